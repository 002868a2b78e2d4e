"""Job status poller.

Translates an external job's status vocabulary into ``ProcessingStatus`` and
turns a finished job's output artifact into plain transcript text.

A job the service reports as ``NOT_FOUND`` raises instead of mapping to a
status. Unknown vendor statuses are treated as still running so a new upstream
state never marks a healthy job as failed.
"""

import logging

from src.core.exceptions import ResultFetchError, TranscriptionJobNotFoundError
from src.core.models import JobStatusResult, TranscriptItem, TranscriptResult
from src.core.status import ProcessingStatus
from src.services.transcription.base import BaseTranscriptionService

logger = logging.getLogger(__name__)

_STATUS_MAP: dict[str, ProcessingStatus] = {
    "COMPLETED": ProcessingStatus.COMPLETED,
    "FAILED": ProcessingStatus.FAILED,
    "QUEUED": ProcessingStatus.IN_PROGRESS,
    "IN_PROGRESS": ProcessingStatus.IN_PROGRESS,
}


def map_job_status(raw_status: str | None) -> ProcessingStatus:
    """Map a vendor status string onto the local four-state enum."""
    key = (raw_status or "").strip().upper()
    status = _STATUS_MAP.get(key)
    if status is None:
        logger.debug("Unrecognized job status %r treated as in progress", raw_status)
        return ProcessingStatus.IN_PROGRESS
    return status


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_transcript_document(document: dict) -> TranscriptResult:
    """Extract transcript text and word items from a job output document.

    Expects the Amazon Transcribe layout::

        {"results": {"transcripts": [{"transcript": "..."}],
                     "items": [{"start_time": "0.1", "end_time": "0.4",
                                "alternatives": [{"content": "...", "confidence": "0.9"}]}]}}

    Raises:
        ResultFetchError: If the document has no ``results.transcripts`` entry.
    """
    if not isinstance(document, dict):
        raise ResultFetchError("Transcript document is not a JSON object")
    results = document.get("results")
    if not isinstance(results, dict):
        raise ResultFetchError("Transcript document has no results")
    transcripts = results.get("transcripts")
    if not isinstance(transcripts, list) or not transcripts:
        raise ResultFetchError("Transcript document has no transcripts")

    first = transcripts[0]
    if not isinstance(first, dict):
        raise ResultFetchError("Transcript entry is not a JSON object")
    text = first.get("transcript") or ""
    if not isinstance(text, str):
        raise ResultFetchError("Transcript text is not a string")

    raw_items = results.get("items") or []
    if not isinstance(raw_items, list):
        raise ResultFetchError("Transcript items are not a list")

    items: list[TranscriptItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ResultFetchError("Transcript item is not a JSON object")
        alternatives = raw.get("alternatives") or [{}]
        best = alternatives[0] if isinstance(alternatives, list) else None
        if not isinstance(best, dict):
            raise ResultFetchError("Transcript item has a malformed alternative")
        items.append(
            TranscriptItem(
                text=str(best.get("content") or ""),
                start_time=_to_float(raw.get("start_time")),
                end_time=_to_float(raw.get("end_time")),
                confidence=_to_float(best.get("confidence")),
            )
        )
    return TranscriptResult(text=text.strip(), items=items)


class JobStatusPoller:
    """Adapter between a transcription job service and the lifecycle controller.

    Args:
        service: The external job backend.
    """

    def __init__(self, service: BaseTranscriptionService) -> None:
        self._service = service

    async def get_status(self, job_id: str) -> JobStatusResult:
        """Return the job's status in local terms.

        Raises:
            TranscriptionJobNotFoundError: The service has no record of *job_id*.
            ExternalServiceError: If the service cannot be reached.
        """
        raw = await self._service.get_job_status(job_id)
        raw_status = str(raw.get("status") or "UNKNOWN")
        if raw_status.strip().upper() == "NOT_FOUND":
            raise TranscriptionJobNotFoundError(
                detail=f"Transcription job not found: {job_id}"
            )
        return JobStatusResult(
            status=map_job_status(raw_status),
            raw_status=raw_status,
            error_message=raw.get("error_message"),
        )

    async def get_result(self, job_id: str) -> TranscriptResult:
        """Fetch and parse the output of a completed job.

        Raises:
            ResultFetchError: If the artifact is missing or unparsable.
            ExternalServiceError: If the service cannot be reached.
        """
        document = await self._service.get_job_output(job_id)
        result = parse_transcript_document(document)
        logger.info("Fetched transcript for job %s (%d items)", job_id, len(result.items))
        return result

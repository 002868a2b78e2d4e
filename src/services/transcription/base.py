"""
Abstract base class for external transcription job services.

A job service runs speech-to-text asynchronously: a job is started against
an audio file, its status is polled, and once finished its output artifact
is fetched. Implementations speak the vendor's own status vocabulary; the
``JobStatusPoller`` maps that vocabulary onto ``ProcessingStatus``.
"""

from abc import ABC, abstractmethod


class BaseTranscriptionService(ABC):
    """Interface that every transcription job backend must implement."""

    @abstractmethod
    async def start_job(self, job_name: str, media_uri: str, language_code: str) -> str:
        """Start a transcription job.

        Args:
            job_name: Unique name for the job.
            media_uri: Location of the audio (e.g. ``s3://bucket/key``).
            language_code: Vendor language code such as ``"ja-JP"``.

        Returns:
            The job identifier used for later status/result calls.
        """

    @abstractmethod
    async def get_job_status(self, job_id: str) -> dict:
        """Return the raw job status.

        Returns:
            Dict with keys ``status`` (vendor vocabulary, or ``"NOT_FOUND"``)
            and ``error_message`` (may be None).

        Raises:
            ExternalServiceError: When the service cannot be reached.
        """

    @abstractmethod
    async def get_job_output(self, job_id: str) -> dict:
        """Return the decoded output artifact of a finished job.

        Raises:
            ResultFetchError: When the artifact is missing or not valid JSON.
            ExternalServiceError: When the service cannot be reached.
        """

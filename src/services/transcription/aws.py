"""AWS Transcribe implementation of the transcription job service.

Jobs read audio straight from S3 and write their JSON transcript back to the
configured output bucket. boto3 calls are blocking and run in a worker
thread via ``asyncio.to_thread``.
"""

import asyncio
import json
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.core.config import get_settings
from src.core.exceptions import ExternalServiceError, ResultFetchError, StorageError
from src.services.storage.object_store import S3ObjectStore, parse_s3_url
from src.services.transcription.base import BaseTranscriptionService

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class AWSTranscribeService(BaseTranscriptionService):
    """Transcription jobs backed by Amazon Transcribe.

    Args:
        object_store: Store used to download job output artifacts.
        client: Optional pre-built boto3 ``transcribe`` client (used in tests).
        output_bucket: Bucket the job writes to (falls back to settings).
    """

    def __init__(
        self,
        object_store: S3ObjectStore | None = None,
        client=None,
        output_bucket: str | None = None,
    ) -> None:
        settings = get_settings()
        self._output_bucket = output_bucket or settings.output_bucket
        self._client = client or boto3.client("transcribe", region_name=settings.aws_region)
        self._object_store = object_store or S3ObjectStore()

    async def start_job(self, job_name: str, media_uri: str, language_code: str) -> str:
        if not self._output_bucket:
            raise ExternalServiceError("AWS_S3_BUCKET not set")
        try:
            await asyncio.to_thread(
                self._client.start_transcription_job,
                TranscriptionJobName=job_name,
                LanguageCode=language_code,
                Media={"MediaFileUri": media_uri},
                OutputBucketName=self._output_bucket,
            )
        except ClientError as exc:
            status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            message = "AWS permission denied" if status == 403 else str(exc)
            raise ExternalServiceError(f"Failed to start transcription job: {message}") from exc
        except BotoCoreError as exc:
            raise ExternalServiceError(f"Failed to start transcription job: {exc}") from exc
        return job_name

    async def _describe(self, job_id: str) -> dict:
        response = await asyncio.to_thread(
            self._client.get_transcription_job, TranscriptionJobName=job_id
        )
        job = response.get("TranscriptionJob")
        if not job:
            raise ExternalServiceError(f"Transcription job not found: {job_id}")
        return job

    async def get_job_status(self, job_id: str) -> dict:
        try:
            job = await self._describe(job_id)
        except ClientError as exc:
            code = _error_code(exc)
            if code in ("NotFoundException", "ResourceNotFoundException"):
                return {"status": "NOT_FOUND", "error_message": "Job not found"}
            if code == "BadRequestException" and "couldn't be found" in str(exc):
                return {"status": "NOT_FOUND", "error_message": "Job not found"}
            logger.warning("Transcribe status check failed for %s: %s", job_id, exc)
            raise ExternalServiceError(f"Transcription status error: {exc}") from exc
        except BotoCoreError as exc:
            logger.warning("Transcribe unreachable for %s: %s", job_id, exc)
            raise ExternalServiceError(f"Transcription status error: {exc}") from exc

        return {
            "status": job.get("TranscriptionJobStatus") or "UNKNOWN",
            "error_message": job.get("FailureReason"),
        }

    async def get_job_output(self, job_id: str) -> dict:
        """Download and decode the job's transcript document.

        A missing or unparsable artifact raises ``ResultFetchError``; S3 or
        Transcribe being unreachable raises ``ExternalServiceError``.
        """
        try:
            job = await self._describe(job_id)
        except (BotoCoreError, ClientError) as exc:
            raise ExternalServiceError(f"Transcription result error: {exc}") from exc

        uri = (job.get("Transcript") or {}).get("TranscriptFileUri")
        if not uri:
            logger.error("No transcript file URI for job %s", job_id)
            raise ResultFetchError("No transcript file available")

        bucket, key = parse_s3_url(uri)
        if not key:
            raise ResultFetchError(f"Unable to parse transcript location: {uri}")

        try:
            body = await self._object_store.download(key, bucket=bucket)
        except StorageError as exc:
            raise ResultFetchError(f"Transcript file unavailable: {exc.detail}") from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ResultFetchError(f"Transcript file is not valid JSON: {exc}") from exc

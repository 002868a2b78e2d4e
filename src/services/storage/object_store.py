"""
S3 object storage wrapper.

Holds recording audio and transcription job artifacts. boto3 is blocking,
so every call is pushed to a worker thread with ``asyncio.to_thread``.
"""

import asyncio
import logging
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.core.config import get_settings
from src.core.exceptions import ExternalServiceError, StorageError

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def parse_s3_url(url: str) -> tuple[str | None, str]:
    """Split an S3 object URL into ``(bucket, key)``.

    Handles ``s3://bucket/key``, path-style
    ``https://s3.<region>.amazonaws.com/bucket/key`` and virtual-hosted
    ``https://bucket.s3.<region>.amazonaws.com/key`` URLs. The bucket is None
    when it cannot be determined.
    """
    parsed = urlparse(url)
    path = unquote(parsed.path.lstrip("/"))
    if parsed.scheme == "s3":
        return parsed.netloc or None, path

    host = parsed.netloc
    if host.startswith("s3.") or host.startswith("s3-") or host == "s3.amazonaws.com":
        bucket, _, key = path.partition("/")
        return bucket or None, key
    if ".s3." in host or ".s3-" in host:
        return host.split(".s3", 1)[0], path
    return None, path


class S3ObjectStore:
    """Thin async facade over an S3 bucket.

    Args:
        bucket: Bucket name (falls back to ``settings.aws_s3_bucket``).
        region: AWS region (falls back to ``settings.aws_region``).
        client: Optional pre-built boto3 S3 client (used in tests).
    """

    def __init__(
        self,
        bucket: str | None = None,
        region: str | None = None,
        client=None,
    ) -> None:
        settings = get_settings()
        self._bucket = bucket or settings.aws_s3_bucket
        self._region = region or settings.aws_region
        self._client = client or boto3.client("s3", region_name=self._region)

    @property
    def bucket(self) -> str:
        if not self._bucket:
            raise StorageError("S3 bucket name required. Set AWS_S3_BUCKET.")
        return self._bucket

    def s3_uri(self, key: str) -> str:
        """Return the ``s3://`` URI for *key* in this bucket."""
        return f"s3://{self.bucket}/{key}"

    def get_recording_path(self, file_path: str) -> str:
        """Return the media URI a transcription job reads the recording from."""
        if file_path.startswith("s3://"):
            return file_path
        return self.s3_uri(file_path.lstrip("/"))

    async def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Store *data* under *key* and return its ``s3://`` URI."""
        kwargs = {"Bucket": self.bucket, "Key": key, "Body": data}
        if content_type:
            kwargs["ContentType"] = content_type
        try:
            await asyncio.to_thread(self._client.put_object, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc)
            raise StorageError(f"Upload failed for {key}: {exc}") from exc
        return self.s3_uri(key)

    async def download(self, key: str, bucket: str | None = None) -> bytes:
        """Return the raw bytes stored under *key*.

        Raises:
            StorageError: If the object does not exist.
            ExternalServiceError: If S3 cannot be reached or refuses the read.
        """
        try:
            response = await asyncio.to_thread(
                self._client.get_object, Bucket=bucket or self.bucket, Key=key
            )
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                raise StorageError(f"Object not found: {key}") from exc
            logger.warning("S3 download failed for %s: %s", key, exc)
            raise ExternalServiceError(f"Download failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            logger.warning("S3 unreachable while downloading %s: %s", key, exc)
            raise ExternalServiceError(f"Download failed for {key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Delete failed for {key}: {exc}") from exc

    async def exists(self, key: str) -> bool:
        """Return True if *key* exists; other S3 errors propagate as StorageError."""
        try:
            await asyncio.to_thread(self._client.head_object, Bucket=self.bucket, Key=key)
            return True
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return False
            raise StorageError(f"Head failed for {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Head failed for {key}: {exc}") from exc

    async def presigned_url(self, key: str, expires_in: int | None = None) -> str:
        """Return a time-limited GET URL for client playback."""
        expiry = expires_in or get_settings().presigned_url_expiry
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expiry,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not sign URL for {key}: {exc}") from exc

    async def presigned_upload_url(
        self, key: str, content_type: str, expires_in: int | None = None
    ) -> str:
        """Return a time-limited PUT URL the client uploads the audio to directly.

        The upload must send the same ``Content-Type`` header that was signed.
        """
        expiry = expires_in or get_settings().presigned_url_expiry
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expiry,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not sign upload URL for {key}: {exc}") from exc

"""
Recording REST endpoints.

CRUD over the caller's recordings, presigned upload and playback URLs.
All endpoints delegate to ``RecordingRepository``; no business logic here.
"""

import logging
import uuid
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_current_user_id, get_object_store, get_store
from src.core.config import get_settings
from src.core.exceptions import StorageError
from src.core.models import (
    AudioUrlResponse,
    DeleteRecordingResponse,
    RecordingCreate,
    RecordingResponse,
    RecordingUpdate,
    UploadUrlRequest,
    UploadUrlResponse,
)
from src.services.lifecycle import to_recording_response
from src.services.storage.object_store import S3ObjectStore, parse_s3_url
from src.services.storage.repository import RecordingStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recordings", tags=["recordings"])


def _object_key(file_path: str) -> str:
    """Return the bucket key for a stored ``file_path`` (key or S3 URL)."""
    if "://" in file_path:
        return parse_s3_url(file_path)[1]
    return file_path.lstrip("/")


def _upload_key(user_id: str, filename: str) -> str:
    """Fresh bucket key for a user's upload, keeping the file extension."""
    suffix = PurePosixPath(filename).suffix.lower()
    if not suffix[1:].isalnum():
        suffix = ""
    return f"recordings/{user_id}/{uuid.uuid4().hex}{suffix}"


@router.post("/upload-url", response_model=UploadUrlResponse, status_code=201)
async def create_upload_url(
    body: UploadUrlRequest,
    user_id: str = Depends(get_current_user_id),
    object_store: S3ObjectStore = Depends(get_object_store),
):
    """Sign a direct-to-S3 PUT for a new audio file.

    The client uploads to ``url`` with the same ``Content-Type``, then creates
    the recording with ``file_path=key``.
    """
    key = _upload_key(user_id, body.filename)
    expires_in = get_settings().presigned_url_expiry
    url = await object_store.presigned_upload_url(key, body.content_type, expires_in=expires_in)
    logger.info("Signed upload for user %s: %s", user_id, key)
    return UploadUrlResponse(
        key=key, url=url, content_type=body.content_type, expires_in=expires_in
    )


@router.post("", response_model=RecordingResponse, status_code=201)
async def create_recording(
    body: RecordingCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """Register an uploaded audio file as a new recording."""
    async with store.unit() as repo:
        recording = await repo.create_recording(
            user_id=user_id,
            title=body.title,
            file_path=body.file_path,
            description=body.description,
            language=body.language,
            duration=body.duration,
            workspace_id=body.workspace_id,
        )
        return to_recording_response(recording)


@router.get("", response_model=list[RecordingResponse])
async def list_recordings(
    language: str | None = Query(None),
    workspace_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """List the caller's recordings, newest first (optionally one workspace only)."""
    async with store.unit() as repo:
        recordings = await repo.list_recordings(
            user_id, language=language, limit=limit, offset=offset, workspace_id=workspace_id
        )
        return [to_recording_response(r) for r in recordings]


@router.get("/{recording_id}", response_model=RecordingResponse)
async def get_recording(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        recording = await repo.get_recording(recording_id, user_id)
        return to_recording_response(recording)


@router.patch("/{recording_id}", response_model=RecordingResponse)
async def update_recording(
    recording_id: str,
    body: RecordingUpdate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """Update only the fields present in the request body."""
    fields = body.model_dump(exclude_unset=True, mode="json")
    async with store.unit() as repo:
        recording = await repo.update_recording(recording_id, user_id, **fields)
        return to_recording_response(recording)


@router.delete("/{recording_id}", response_model=DeleteRecordingResponse)
async def delete_recording(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
    object_store: S3ObjectStore = Depends(get_object_store),
):
    """Delete a recording and, best effort, its audio object."""
    async with store.unit() as repo:
        recording = await repo.delete_recording(recording_id, user_id)
        file_path = recording.file_path

    audio_deleted = False
    try:
        await object_store.delete(_object_key(file_path))
        audio_deleted = True
    except StorageError as exc:
        logger.warning("Recording %s: audio cleanup failed: %s", recording_id, exc.detail)

    return DeleteRecordingResponse(recording_id=recording_id, audio_deleted=audio_deleted)


@router.get("/{recording_id}/audio-url", response_model=AudioUrlResponse)
async def get_audio_url(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
    object_store: S3ObjectStore = Depends(get_object_store),
):
    """Return a time-limited URL for playing the recording's audio."""
    async with store.unit() as repo:
        recording = await repo.get_recording(recording_id, user_id)
        file_path = recording.file_path

    expires_in = get_settings().presigned_url_expiry
    url = await object_store.presigned_url(_object_key(file_path), expires_in=expires_in)
    return AudioUrlResponse(recording_id=recording_id, url=url, expires_in=expires_in)

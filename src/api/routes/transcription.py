"""
Transcription endpoints.

Starting a job returns 202 immediately; clients poll
``/transcribe/status`` until the job reaches a terminal state.
"""

from fastapi import APIRouter, Depends

from src.api.deps import get_controller, get_current_user_id
from src.core.models import (
    StartTranscriptionResponse,
    TranscriptionResponse,
    TranscriptionStatusResponse,
)
from src.services.lifecycle import RecordingLifecycleController

router = APIRouter(prefix="/recordings", tags=["transcription"])


@router.post(
    "/{recording_id}/transcribe",
    response_model=StartTranscriptionResponse,
    status_code=202,
)
async def start_transcription(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    controller: RecordingLifecycleController = Depends(get_controller),
):
    """Start a transcription job for the recording."""
    return await controller.start_transcription(recording_id, user_id)


@router.get("/{recording_id}/transcribe/status", response_model=TranscriptionStatusResponse)
async def get_transcription_status(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    controller: RecordingLifecycleController = Depends(get_controller),
):
    """Poll the transcription job; persists the transcript once it completes."""
    return await controller.poll_transcription(recording_id, user_id)


@router.get("/{recording_id}/transcription", response_model=TranscriptionResponse)
async def get_transcription(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    controller: RecordingLifecycleController = Depends(get_controller),
):
    return await controller.get_transcription(recording_id, user_id)

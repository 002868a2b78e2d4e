"""
Translation and transliteration endpoints.
"""

from fastapi import APIRouter, Depends

from src.api.deps import get_controller, get_current_user_id
from src.core.models import (
    TranslateRequest,
    TranslationResponse,
    TransliterateRequest,
    TransliterateResponse,
)
from src.services.lifecycle import RecordingLifecycleController

router = APIRouter(prefix="/recordings", tags=["translation"])


@router.post("/{recording_id}/translate", response_model=TranslationResponse)
async def translate_recording(
    recording_id: str,
    body: TranslateRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    controller: RecordingLifecycleController = Depends(get_controller),
):
    """Translate the completed transcript (default target: English)."""
    target = body.target_language if body else None
    return await controller.translate(recording_id, user_id, target)


@router.get("/{recording_id}/translation", response_model=list[TranslationResponse])
async def list_translations(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    controller: RecordingLifecycleController = Depends(get_controller),
):
    return await controller.get_translations(recording_id, user_id)


@router.post("/{recording_id}/transliterate", response_model=TransliterateResponse)
async def transliterate_recording(
    recording_id: str,
    body: TransliterateRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    controller: RecordingLifecycleController = Depends(get_controller),
):
    """Romanize the latest translation, or the transcript when none exists.

    The result is returned but not stored.
    """
    body = body or TransliterateRequest()
    return await controller.transliterate(
        recording_id,
        user_id,
        language_code=body.language_code,
        source_script=body.source_script_code,
        target_script=body.target_script_code,
    )

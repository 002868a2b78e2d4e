"""
Recording note endpoints.
"""

from fastapi import APIRouter, Depends, Response

from src.api.deps import get_current_user_id, get_store
from src.core.models import NoteCreate, NoteResponse, NoteUpdate
from src.services.lifecycle import to_note_response
from src.services.storage.repository import RecordingStore

router = APIRouter(prefix="/recordings", tags=["notes"])


@router.get("/{recording_id}/notes", response_model=list[NoteResponse])
async def list_notes(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        notes = await repo.list_notes(recording_id, user_id)
        return [to_note_response(n) for n in notes]


@router.post("/{recording_id}/notes", response_model=NoteResponse, status_code=201)
async def create_note(
    recording_id: str,
    body: NoteCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        note = await repo.create_note(
            recording_id, user_id, content=body.content, timestamp=body.timestamp
        )
        return to_note_response(note)


@router.patch("/{recording_id}/notes/{note_id}", response_model=NoteResponse)
async def update_note(
    recording_id: str,
    note_id: str,
    body: NoteUpdate,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    """Update only the provided note fields."""
    fields = body.model_dump(exclude_unset=True)
    async with store.unit() as repo:
        note = await repo.update_note(note_id, recording_id, user_id, **fields)
        return to_note_response(note)


@router.delete("/{recording_id}/notes/{note_id}", status_code=204)
async def delete_note(
    recording_id: str,
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordingStore = Depends(get_store),
):
    async with store.unit() as repo:
        await repo.delete_note(note_id, recording_id, user_id)
    return Response(status_code=204)

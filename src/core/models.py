"""
Pydantic v2 request / response models used across the API layer.

Also holds the small internal result types exchanged between the
transcription adapters, the status poller and the lifecycle controller.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from src.core.status import ProcessingStatus

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------


class RecordingStatus(StrEnum):
    """Audio ingestion state of a recording."""

    processing = "processing"
    ready = "ready"
    error = "error"


class RecordingCreate(BaseModel):
    """POST /recordings request body."""

    title: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, description="Object-storage key of the audio file")
    description: str | None = None
    language: str | None = None
    duration: int = Field(default=0, ge=0, description="Duration in seconds")
    workspace_id: str | None = None


class RecordingUpdate(BaseModel):
    """PATCH /recordings/{id} body; only provided fields are changed."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    language: str | None = None
    status: RecordingStatus | None = None
    workspace_id: str | None = Field(default=None, description="Move to a workspace; null unfiles")


class TranscriptionResponse(BaseModel):
    """Persisted transcription state for a recording."""

    recording_id: str
    status: ProcessingStatus = ProcessingStatus.NOT_STARTED
    text: str | None = None
    romanization: str | None = None
    language: str | None = None
    job_id: str | None = None
    updated_at: datetime | None = None


class TranslationResponse(BaseModel):
    """A translation of a recording's transcript into one target language."""

    id: str
    source_language: str
    target_language: str
    status: ProcessingStatus
    text: str = ""
    updated_at: datetime | None = None


class RecordingResponse(BaseModel):
    """Standard recording representation returned by the API."""

    id: str
    title: str
    description: str | None = None
    language: str | None = None
    duration: int = 0
    status: RecordingStatus
    file_path: str
    workspace_id: str | None = None
    created_at: datetime
    updated_at: datetime
    transcription_status: ProcessingStatus = ProcessingStatus.NOT_STARTED
    is_transcribed: bool = False
    is_translated: bool = False
    transcription: TranscriptionResponse | None = None
    translations: list[TranslationResponse] = Field(default_factory=list)


class DeleteRecordingResponse(BaseModel):
    """DELETE /recordings/{id} response."""

    recording_id: str
    deleted: bool = True
    audio_deleted: bool = False


class AudioUrlResponse(BaseModel):
    """GET /recordings/{id}/audio-url response."""

    recording_id: str
    url: str
    expires_in: int


class UploadUrlRequest(BaseModel):
    """POST /recordings/upload-url body."""

    filename: str = Field(min_length=1, max_length=255)
    content_type: str = Field(pattern=r"^audio/[\w.+-]+$", examples=["audio/webm"])


class UploadUrlResponse(BaseModel):
    """Where and how long the client may PUT the audio file.

    ``key`` is the value to send as ``file_path`` when creating the recording.
    """

    key: str
    url: str
    content_type: str
    expires_in: int


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


class WorkspaceRole(StrEnum):
    """Member role; owners manage membership, editors file recordings."""

    owner = "owner"
    editor = "editor"
    viewer = "viewer"


class WorkspaceCreate(BaseModel):
    """POST /workspaces request body."""

    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str | None = None


class WorkspaceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class WorkspaceMemberUpdate(BaseModel):
    """PUT /workspaces/{id}/members/{user_id} body."""

    role: WorkspaceRole = WorkspaceRole.viewer


class WorkspaceMemberResponse(BaseModel):
    user_id: str
    role: WorkspaceRole
    created_at: datetime


class WorkspaceResponse(BaseModel):
    """A workspace together with its members."""

    id: str
    name: str
    slug: str
    description: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime
    members: list[WorkspaceMemberResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Transcription jobs
# ---------------------------------------------------------------------------


class StartTranscriptionResponse(BaseModel):
    """POST /recordings/{id}/transcribe response."""

    recording_id: str
    message: str
    job_id: str | None = None
    transcription_status: ProcessingStatus
    requested_at: datetime


class TranscriptionStatusResponse(BaseModel):
    """GET /recordings/{id}/transcribe/status response."""

    recording_id: str
    transcription_status: ProcessingStatus
    job_status: str
    error_message: str | None = None
    text: str | None = None
    romanized_text: str | None = None
    language_code: str | None = None
    source_script_code: str | None = None
    target_script_code: str | None = None
    requested_at: datetime


class JobStatusResult(BaseModel):
    """External job state translated into the local status vocabulary."""

    status: ProcessingStatus
    raw_status: str
    error_message: str | None = None


class TranscriptItem(BaseModel):
    """A single recognized word with timing and confidence."""

    text: str
    start_time: float = 0.0
    end_time: float = 0.0
    confidence: float = 0.0


class TranscriptResult(BaseModel):
    """Parsed output artifact of a completed transcription job."""

    text: str
    items: list[TranscriptItem] = Field(default_factory=list)


class RomanizationOutcome(BaseModel):
    """Result of the romanization step for one transcript."""

    text: str
    romanized: bool = False
    source_script: str | None = None
    target_script: str = "Latn"


# ---------------------------------------------------------------------------
# Translation / transliteration
# ---------------------------------------------------------------------------


class TranslateRequest(BaseModel):
    """POST /recordings/{id}/translate body."""

    target_language: str | None = None


class TransliterateRequest(BaseModel):
    """POST /recordings/{id}/transliterate body."""

    language_code: str | None = None
    source_script_code: str | None = None
    target_script_code: str = "Latn"


class TransliterateResponse(BaseModel):
    """On-demand romanization result (not persisted)."""

    recording_id: str
    transliterated_text: str
    language_code: str
    source_script_code: str
    target_script_code: str


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class NoteCreate(BaseModel):
    """POST /recordings/{id}/notes body."""

    content: str = Field(min_length=1)
    timestamp: int | None = Field(default=None, ge=0, description="Position in seconds")


class NoteUpdate(BaseModel):
    """PATCH /recordings/{id}/notes/{note_id} body."""

    content: str | None = Field(default=None, min_length=1)
    timestamp: int | None = Field(default=None, ge=0)


class NoteResponse(BaseModel):
    """A user note attached to a recording."""

    id: str
    recording_id: str
    content: str
    timestamp: int | None = None
    created_at: datetime
    updated_at: datetime

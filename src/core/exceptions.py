"""
BakBak exception hierarchy.

All application-specific exceptions inherit from BakBakError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class BakBakError(Exception):
    """Base exception for all BakBak errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "BAKBAK_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class RecordingNotFoundError(BakBakError):
    """Raised when a recording ID does not exist or belongs to another user."""

    def __init__(self, recording_id: str) -> None:
        super().__init__(
            detail=f"Recording not found: {recording_id}",
            code="RECORDING_NOT_FOUND",
            status_code=404,
        )


class NoteNotFoundError(BakBakError):
    """Raised when a note ID does not exist for the recording and user."""

    def __init__(self, note_id: str) -> None:
        super().__init__(
            detail=f"Note not found: {note_id}",
            code="NOTE_NOT_FOUND",
            status_code=404,
        )


class WorkspaceNotFoundError(BakBakError):
    """Raised when a workspace does not exist or the user is not a member."""

    def __init__(self, workspace_id: str) -> None:
        super().__init__(
            detail=f"Workspace not found: {workspace_id}",
            code="WORKSPACE_NOT_FOUND",
            status_code=404,
        )


class WorkspacePermissionError(BakBakError):
    """Raised when a member's role does not allow the requested change."""

    def __init__(self, workspace_id: str, action: str) -> None:
        super().__init__(
            detail=f"Not allowed to {action} in workspace {workspace_id}",
            code="WORKSPACE_FORBIDDEN",
            status_code=403,
        )


class WorkspaceConflictError(BakBakError):
    def __init__(self, slug: str) -> None:
        super().__init__(
            detail=f"Workspace slug already taken: {slug}",
            code="WORKSPACE_CONFLICT",
            status_code=409,
        )


class TranscriptionJobNotFoundError(BakBakError):
    """Raised when no job was ever started, or the job service no longer knows it."""

    def __init__(self, recording_id: str | None = None, detail: str | None = None) -> None:
        super().__init__(
            detail=detail
            or f"No transcription job has been started for recording {recording_id}",
            code="JOB_NOT_FOUND",
            status_code=404,
        )


class TranscriptionConflictError(BakBakError):
    """Raised when a transcription start is requested while one cannot begin."""

    def __init__(self, detail: str = "Transcription already in progress") -> None:
        super().__init__(
            detail=detail,
            code="TRANSCRIPTION_CONFLICT",
            status_code=409,
        )


class InvalidTransitionError(BakBakError):
    """Raised when a status change is not allowed by the state machine."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            detail=f"Invalid status transition: {current} -> {target}",
            code="INVALID_TRANSITION",
            status_code=400,
        )


class TranscriptionStartError(BakBakError):
    """Raised when the external service refuses to start a transcription job."""

    def __init__(self, detail: str = "Transcription failed") -> None:
        super().__init__(
            detail=f"Transcription failed: {detail}",
            code="TRANSCRIPTION_START_FAILED",
            status_code=500,
        )


class ExternalServiceError(BakBakError):
    """Raised on transient failures talking to AWS or the LLM provider."""

    def __init__(self, detail: str = "External service error") -> None:
        super().__init__(detail=detail, code="EXTERNAL_SERVICE_ERROR", status_code=502)


class ResultFetchError(BakBakError):
    """Raised when a finished job's output artifact is missing or unparsable."""

    def __init__(self, detail: str = "Transcription result unavailable") -> None:
        super().__init__(detail=detail, code="RESULT_FETCH_ERROR", status_code=502)


class NoTranscriptionError(BakBakError):
    """Raised when translation or romanization is requested with no transcript."""

    def __init__(self, detail: str = "No transcription available") -> None:
        super().__init__(detail=detail, code="NO_TRANSCRIPTION", status_code=400)


class UnsupportedLanguageError(BakBakError):
    """Raised for language codes outside the supported language table."""

    def __init__(self, language_code: str) -> None:
        super().__init__(
            detail=f"Unknown or unsupported language code: {language_code}",
            code="UNSUPPORTED_LANGUAGE",
            status_code=400,
        )


class RomanizationError(BakBakError):
    """Raised when the AI romanization call fails or returns nothing."""

    def __init__(self, detail: str = "Romanization failed") -> None:
        super().__init__(detail=detail, code="ROMANIZATION_ERROR", status_code=502)


class StorageError(BakBakError):
    """Raised when object storage is misconfigured or an object is missing."""

    def __init__(self, detail: str = "Storage error") -> None:
        super().__init__(detail=detail, code="STORAGE_ERROR", status_code=500)


class TranslationConflictError(BakBakError):
    """Raised when a translation into the same language is already running."""

    def __init__(self, target_language: str) -> None:
        super().__init__(
            detail=f"Translation to {target_language} already in progress",
            code="TRANSLATION_CONFLICT",
            status_code=409,
        )

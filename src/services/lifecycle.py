"""Recording lifecycle controller.

Drives a recording's transcription (and its translations) through the
``ProcessingStatus`` state machine:

* ``start_transcription`` claims the row, commits IN_PROGRESS, then asks the
  external job service to start;
* ``poll_transcription`` asks the poller for the job state and persists the
  result once the job completes, romanizing the transcript on the way;
* ``translate`` / ``transliterate`` work on the completed transcript.

Every database step runs in its own committed unit from ``RecordingStore``
so a status is durable before the next external call is made.

Usage::

    controller = build_controller()
    await controller.start_transcription(recording_id, user_id)
    status = await controller.poll_transcription(recording_id, user_id)
"""

import logging
import time
from datetime import UTC, datetime

from src.core.config import Settings, get_settings
from src.core.exceptions import (
    BakBakError,
    ExternalServiceError,
    NoTranscriptionError,
    ResultFetchError,
    TranscriptionConflictError,
    TranscriptionJobNotFoundError,
    TranscriptionStartError,
    TranslationConflictError,
    UnsupportedLanguageError,
)
from src.core.languages import (
    LATIN_SCRIPT,
    get_default_script,
    get_transcribe_code,
    is_supported,
    normalize_translate_language,
)
from src.core.models import (
    NoteResponse,
    RecordingResponse,
    RecordingStatus,
    StartTranscriptionResponse,
    TranscriptionResponse,
    TranscriptionStatusResponse,
    TranslationResponse,
    TransliterateResponse,
)
from src.core.status import ProcessingStatus, ensure_transition
from src.services.romanization import BaseTransliterator, Romanizer
from src.services.storage.object_store import S3ObjectStore
from src.services.storage.repository import RecordingStore
from src.services.transcription import BaseTranscriptionService, JobStatusPoller
from src.services.translation import BaseTranslator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ORM -> API model conversion
# ---------------------------------------------------------------------------


def to_transcription_response(recording_id: str, transcription) -> TranscriptionResponse:
    """Convert a ``Transcription`` row (or None) to its API model."""
    if transcription is None:
        return TranscriptionResponse(recording_id=recording_id)
    return TranscriptionResponse(
        recording_id=recording_id,
        status=ProcessingStatus(transcription.status),
        text=transcription.text or None,
        romanization=transcription.romanization,
        language=transcription.language,
        job_id=transcription.job_id,
        updated_at=transcription.updated_at,
    )


def to_translation_response(translation) -> TranslationResponse:
    return TranslationResponse(
        id=translation.id,
        source_language=translation.source_language,
        target_language=translation.target_language,
        status=ProcessingStatus(translation.status),
        text=translation.text or "",
        updated_at=translation.updated_at,
    )


def to_recording_response(recording) -> RecordingResponse:
    """Convert a ``Recording`` row, with its loaded children, to its API model."""
    transcription = recording.transcription
    status = (
        ProcessingStatus(transcription.status)
        if transcription is not None
        else ProcessingStatus.NOT_STARTED
    )
    translations = list(transcription.translations) if transcription is not None else []
    return RecordingResponse(
        id=recording.id,
        title=recording.title,
        description=recording.description,
        language=recording.language,
        duration=recording.duration,
        status=RecordingStatus(recording.status),
        file_path=recording.file_path,
        workspace_id=recording.workspace_id,
        created_at=recording.created_at,
        updated_at=recording.updated_at,
        transcription_status=status,
        is_transcribed=status is ProcessingStatus.COMPLETED,
        is_translated=any(t.status == ProcessingStatus.COMPLETED for t in translations),
        transcription=(
            to_transcription_response(recording.id, transcription)
            if transcription is not None
            else None
        ),
        translations=[to_translation_response(t) for t in translations],
    )


def to_note_response(note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        recording_id=note.recording_id,
        content=note.content,
        timestamp=note.timestamp,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class RecordingLifecycleController:
    """Orchestrates transcription, romanization and translation for recordings.

    Args:
        store: Unit-of-work factory over the recording tables.
        transcriber: External speech-to-text job service.
        poller: Status poller wrapping *transcriber*.
        romanizer: Romanization step applied to completed transcripts.
        translator: Text translation service.
        object_store: Resolves recording audio keys to media URIs.
        settings: Application settings (defaults to ``get_settings()``).
    """

    def __init__(
        self,
        store: RecordingStore,
        transcriber: BaseTranscriptionService,
        poller: JobStatusPoller,
        romanizer: Romanizer,
        translator: BaseTranslator,
        object_store: S3ObjectStore,
        settings: Settings | None = None,
        transliterator: BaseTransliterator | None = None,
    ) -> None:
        self._store = store
        self._transcriber = transcriber
        self._poller = poller
        self._romanizer = romanizer
        self._translator = translator
        self._object_store = object_store
        self._settings = settings or get_settings()
        self._transliterator = transliterator

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    def _job_name(self, recording_id: str) -> str:
        return f"transcription-{recording_id}-{int(time.time() * 1000)}"

    def _language_for(self, recording, transcription=None) -> str:
        if transcription is not None and transcription.language not in (None, "", "auto"):
            return transcription.language
        return recording.language or self._settings.default_language

    async def start_transcription(
        self, recording_id: str, user_id: str
    ) -> StartTranscriptionResponse:
        """Start an external transcription job for a recording.

        IN_PROGRESS is committed before the job service is called, so a
        duplicate request arriving meanwhile gets a conflict instead of a
        second job.

        Starting again after COMPLETED re-transcribes the recording: the stored
        text, romanization and translations are discarded.

        Raises:
            RecordingNotFoundError: Unknown recording or not owned by *user_id*.
            TranscriptionConflictError: A job is already running.
            TranscriptionStartError: The job service refused the request.
        """
        async with self._store.unit() as repo:
            recording = await repo.get_recording(recording_id, user_id)
            transcription = await repo.get_or_create_transcription(recording)
            current = ProcessingStatus(transcription.status)
            if not current.can_start():
                raise TranscriptionConflictError()
            ensure_transition(current, ProcessingStatus.IN_PROGRESS)

            language = self._language_for(recording)
            claimed = await repo.claim_transcription(
                recording_id,
                from_statuses=(
                    ProcessingStatus.NOT_STARTED,
                    ProcessingStatus.FAILED,
                    ProcessingStatus.COMPLETED,
                ),
                to_status=ProcessingStatus.IN_PROGRESS,
                job_id=None,
                language=language,
                text="",
                romanization=None,
            )
            if not claimed:
                raise TranscriptionConflictError()
            if current is ProcessingStatus.COMPLETED:
                dropped = await repo.clear_translations(transcription)
                logger.info(
                    "Recording %s: re-transcribing, dropped %d translation(s)",
                    recording_id,
                    dropped,
                )
            file_path = recording.file_path

        logger.info("Recording %s: transcription %s -> IN_PROGRESS", recording_id, current)

        job_name = self._job_name(recording_id)
        try:
            media_uri = self._object_store.get_recording_path(file_path)
            job_id = await self._transcriber.start_job(
                job_name, media_uri, get_transcribe_code(language)
            )
        except Exception as exc:
            detail = exc.detail if isinstance(exc, BakBakError) else str(exc)
            logger.error("Recording %s: failed to start transcription: %s", recording_id, detail)
            async with self._store.unit() as repo:
                await repo.update_transcription(
                    recording_id, status=ProcessingStatus.FAILED.value, job_id=None
                )
            raise TranscriptionStartError(detail) from exc

        async with self._store.unit() as repo:
            await repo.update_transcription(
                recording_id, status=ProcessingStatus.IN_PROGRESS.value, job_id=job_id
            )
        logger.info("Recording %s: transcription job %s started", recording_id, job_id)

        return StartTranscriptionResponse(
            recording_id=recording_id,
            message="Transcription started",
            job_id=job_id,
            transcription_status=ProcessingStatus.IN_PROGRESS,
            requested_at=datetime.now(UTC),
        )

    def _status_response(
        self,
        recording_id: str,
        status: ProcessingStatus,
        job_status: str,
        language: str,
        text: str | None = None,
        romanization: str | None = None,
        error_message: str | None = None,
    ) -> TranscriptionStatusResponse:
        return TranscriptionStatusResponse(
            recording_id=recording_id,
            transcription_status=status,
            job_status=job_status,
            error_message=error_message,
            text=text,
            romanized_text=romanization,
            language_code=language,
            source_script_code=get_default_script(language),
            target_script_code=LATIN_SCRIPT,
            requested_at=datetime.now(UTC),
        )

    async def poll_transcription(
        self, recording_id: str, user_id: str
    ) -> TranscriptionStatusResponse:
        """Check the external job and persist its outcome when it has finished.

        A completed transcription is answered from the database without any
        external call. Jobs that are still running cause no write.

        Raises:
            RecordingNotFoundError: Unknown recording or not owned by *user_id*.
            TranscriptionJobNotFoundError: No job was ever started, or the job
                service no longer knows it. Nothing is written.
            ExternalServiceError: The job service could not be reached.
            ResultFetchError: The job finished but its output is unusable.
        """
        async with self._store.unit() as repo:
            recording = await repo.get_recording(recording_id, user_id)
            transcription = recording.transcription
            language = self._language_for(recording, transcription)

            if transcription is not None and transcription.status == ProcessingStatus.COMPLETED:
                return self._status_response(
                    recording_id,
                    ProcessingStatus.COMPLETED,
                    ProcessingStatus.COMPLETED.value,
                    language,
                    text=transcription.text,
                    romanization=transcription.romanization,
                )
            if transcription is None or not transcription.job_id:
                raise TranscriptionJobNotFoundError(recording_id)

            job_id = transcription.job_id
            local_status = ProcessingStatus(transcription.status)
            existing_romanization = transcription.romanization

        try:
            job = await self._poller.get_status(job_id)
        except (ExternalServiceError, TranscriptionJobNotFoundError) as exc:
            logger.warning(
                "Recording %s: status check for job %s failed: %s",
                recording_id,
                job_id,
                exc.detail,
            )
            raise

        if job.status is ProcessingStatus.COMPLETED:
            return await self._complete(recording_id, job_id, language, existing_romanization)

        if job.status is ProcessingStatus.FAILED:
            error_message = job.error_message or "Transcription job failed"
            async with self._store.unit() as repo:
                current = await repo.get_transcription(recording_id)
                if current is not None and ProcessingStatus(current.status).can_fail():
                    await repo.update_transcription(
                        recording_id, status=ProcessingStatus.FAILED.value
                    )
                    logger.info(
                        "Recording %s: job %s failed (%s)", recording_id, job_id, error_message
                    )
            return self._status_response(
                recording_id,
                ProcessingStatus.FAILED,
                ProcessingStatus.FAILED.value,
                language,
                error_message=error_message,
            )

        return self._status_response(recording_id, local_status, job.raw_status, language)

    async def _complete(
        self,
        recording_id: str,
        job_id: str,
        language: str,
        existing_romanization: str | None,
    ) -> TranscriptionStatusResponse:
        """Fetch a finished job's transcript, romanize it and persist COMPLETED."""
        try:
            result = await self._poller.get_result(job_id)
        except ExternalServiceError as exc:
            logger.warning(
                "Recording %s: result fetch for job %s failed, will retry: %s",
                recording_id,
                job_id,
                exc.detail,
            )
            raise
        except ResultFetchError as exc:
            logger.error(
                "Recording %s: job %s completed but result fetch failed: %s",
                recording_id,
                job_id,
                exc.detail,
            )
            async with self._store.unit() as repo:
                current = await repo.get_transcription(recording_id)
                if current is not None and ProcessingStatus(current.status).can_complete():
                    await repo.update_transcription(
                        recording_id, status=ProcessingStatus.COMPLETED.value, text=""
                    )
            raise

        outcome = await self._romanizer.romanize(
            result.text, language, existing=existing_romanization
        )

        async with self._store.unit() as repo:
            current = await repo.get_transcription(recording_id)
            current_status = ProcessingStatus(current.status)
            if current_status.can_complete():
                ensure_transition(current_status, ProcessingStatus.COMPLETED)
                current = await repo.update_transcription(
                    recording_id,
                    text=result.text,
                    romanization=outcome.text or None,
                    status=ProcessingStatus.COMPLETED.value,
                )
                logger.info("Recording %s: transcription COMPLETED (job %s)", recording_id, job_id)
            text, romanization = current.text, current.romanization
            status = ProcessingStatus(current.status)

        return self._status_response(
            recording_id,
            status,
            ProcessingStatus.COMPLETED.value,
            language,
            text=text,
            romanization=romanization,
        )

    async def get_transcription(self, recording_id: str, user_id: str) -> TranscriptionResponse:
        """Return the persisted transcription; NOT_STARTED when none exists."""
        async with self._store.unit() as repo:
            recording = await repo.get_recording(recording_id, user_id)
            response = to_transcription_response(recording.id, recording.transcription)
            if recording.transcription is None:
                response.language = recording.language
            return response

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def _source_language(self, recording, transcription) -> str:
        code = self._language_for(recording, transcription)
        return normalize_translate_language(code, fallback="auto")

    async def translate(
        self, recording_id: str, user_id: str, target_language: str | None = None
    ) -> TranslationResponse:
        """Translate the completed transcript into *target_language*.

        A translation that already completed for the same target is returned
        without calling the translator again.

        Raises:
            NoTranscriptionError: The transcription is not COMPLETED or is empty.
            TranslationConflictError: The same translation is already running.
            ExternalServiceError: The translation service failed.
        """
        default_target = self._settings.default_translation_language
        target = normalize_translate_language(
            target_language or default_target, fallback=default_target
        )

        async with self._store.unit() as repo:
            recording = await repo.get_recording(recording_id, user_id)
            transcription = recording.transcription
            if (
                transcription is None
                or transcription.status != ProcessingStatus.COMPLETED
                or not transcription.text
            ):
                raise NoTranscriptionError("Recording has no completed transcription")

            source = self._source_language(recording, transcription)
            existing = await repo.get_translation(transcription.id, target)
            if existing is not None:
                existing_status = ProcessingStatus(existing.status)
                if existing_status is ProcessingStatus.COMPLETED:
                    return to_translation_response(existing)
                if existing_status is ProcessingStatus.IN_PROGRESS:
                    raise TranslationConflictError(target)
                ensure_transition(existing_status, ProcessingStatus.IN_PROGRESS)

            translation = await repo.upsert_translation(
                transcription, source, target, status=ProcessingStatus.IN_PROGRESS.value
            )
            translation_id = translation.id
            text = transcription.text

        logger.info("Recording %s: translating %s -> %s", recording_id, source, target)
        try:
            if source == target:
                translated = text
            else:
                translated = await self._translator.translate_text(text, source, target)
        except Exception as exc:
            logger.error("Recording %s: translation to %s failed: %s", recording_id, target, exc)
            async with self._store.unit() as repo:
                await repo.update_translation(
                    translation_id, status=ProcessingStatus.FAILED.value
                )
            if isinstance(exc, BakBakError):
                raise
            raise ExternalServiceError(f"Translation failed: {exc}") from exc

        async with self._store.unit() as repo:
            translation = await repo.update_translation(
                translation_id, text=translated, status=ProcessingStatus.COMPLETED.value
            )
            return to_translation_response(translation)

    async def get_translations(self, recording_id: str, user_id: str) -> list[TranslationResponse]:
        async with self._store.unit() as repo:
            recording = await repo.get_recording(recording_id, user_id)
            if recording.transcription is None:
                return []
            translations = await repo.list_translations(recording.transcription.id)
            return [to_translation_response(t) for t in translations]

    # ------------------------------------------------------------------
    # Transliteration
    # ------------------------------------------------------------------

    async def transliterate(
        self,
        recording_id: str,
        user_id: str,
        language_code: str | None = None,
        source_script: str | None = None,
        target_script: str = LATIN_SCRIPT,
    ) -> TransliterateResponse:
        """Render the latest translation (or the transcript) in *target_script*.

        Nothing is persisted.

        Raises:
            NoTranscriptionError: No text is available.
            UnsupportedLanguageError: The language cannot be resolved.
            ExternalServiceError: The transliterator failed.
        """
        async with self._store.unit() as repo:
            recording = await repo.get_recording(recording_id, user_id)
            transcription = recording.transcription
            text: str | None = None
            text_language: str | None = None
            if transcription is not None:
                translations = [
                    t
                    for t in await repo.list_translations(transcription.id)
                    if t.status == ProcessingStatus.COMPLETED and t.text
                ]
                if translations:
                    text = translations[0].text
                    text_language = translations[0].target_language
                elif transcription.text:
                    text = transcription.text
            recording_language = recording.language

        if not text:
            raise NoTranscriptionError("No text available to romanize")

        language = language_code or text_language or recording_language or ""
        if not is_supported(language):
            raise UnsupportedLanguageError(language)

        source = source_script or get_default_script(language)
        if source == target_script:
            result = text
        else:
            if self._transliterator is None:
                raise ExternalServiceError("No transliterator configured")
            try:
                result = await self._transliterator.transliterate(
                    text, language, source, target_script
                )
            except Exception as exc:
                logger.error("Recording %s: transliteration failed: %s", recording_id, exc)
                detail = exc.detail if isinstance(exc, BakBakError) else str(exc)
                raise ExternalServiceError(f"Transliteration failed: {detail}") from exc

        return TransliterateResponse(
            recording_id=recording_id,
            transliterated_text=result,
            language_code=language,
            source_script_code=source,
            target_script_code=target_script,
        )


def build_controller(
    store: RecordingStore | None = None,
    settings: Settings | None = None,
) -> RecordingLifecycleController:
    """Wire a controller from configuration (AWS services + configured LLM)."""
    from src.services.romanization import create_transliterator
    from src.services.transcription import create_transcription_service
    from src.services.translation import create_translator

    settings = settings or get_settings()
    object_store = S3ObjectStore(bucket=settings.aws_s3_bucket, region=settings.aws_region)
    transcriber = create_transcription_service("aws", object_store=object_store)
    transliterator = create_transliterator(settings=settings)
    return RecordingLifecycleController(
        store=store or RecordingStore(),
        transcriber=transcriber,
        poller=JobStatusPoller(transcriber),
        romanizer=Romanizer(transliterator),
        translator=create_translator("aws"),
        object_store=object_store,
        settings=settings,
        transliterator=transliterator,
    )

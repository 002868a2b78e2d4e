"""
CRUD repository for the BakBak tables.

``RecordingRepository`` receives an ``AsyncSession`` and provides all
data-access methods.  It calls ``flush()`` rather than ``commit()`` so
that transaction boundaries are controlled by the caller (typically
:func:`get_session` or :meth:`RecordingStore.unit`).

Every read of a recording is scoped by owner so one user can never see or
modify another user's rows.
"""

import logging
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.core.exceptions import (
    BakBakError,
    NoteNotFoundError,
    RecordingNotFoundError,
    TranscriptionConflictError,
    WorkspaceConflictError,
    WorkspaceNotFoundError,
    WorkspacePermissionError,
)
from src.core.models import WorkspaceRole
from src.core.status import ProcessingStatus
from src.services.storage.database import get_session
from src.services.storage.models_db import (
    Note,
    Recording,
    Transcription,
    Translation,
    Workspace,
    WorkspaceMember,
)

logger = logging.getLogger(__name__)

_RECORDING_FIELDS = frozenset(
    {"title", "description", "language", "duration", "status", "workspace_id"}
)
_WORKSPACE_FIELDS = frozenset({"name", "description"})
_WRITE_ROLES = frozenset({WorkspaceRole.owner, WorkspaceRole.editor})
_TRANSCRIPTION_FIELDS = frozenset({"text", "romanization", "language", "job_id", "status"})
_TRANSLATION_FIELDS = frozenset({"text", "source_language", "status"})
_NOTE_FIELDS = frozenset({"content", "timestamp"})


def _now() -> datetime:
    return datetime.now(UTC)


def _apply(row: object, allowed: frozenset[str], fields: dict) -> None:
    """Copy *fields* onto *row*; unknown names are a programming error."""
    unknown = set(fields) - allowed
    if unknown:
        raise BakBakError(
            detail=f"Cannot update fields: {', '.join(sorted(unknown))}",
            code="INVALID_FIELDS",
            status_code=400,
        )
    for key, value in fields.items():
        setattr(row, key, value)
    row.updated_at = _now()


class RecordingRepository:
    """Data-access layer for recordings, transcriptions, translations and notes.

    All methods use ``flush()`` instead of ``commit()`` so a write is visible
    to later reads in the same session while the caller decides when to commit.

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Recordings
    # ------------------------------------------------------------------

    async def create_recording(
        self,
        user_id: str,
        title: str,
        file_path: str,
        description: str | None = None,
        language: str | None = None,
        duration: int = 0,
        workspace_id: str | None = None,
    ) -> Recording:
        """Create and return a new recording with status *processing*.

        Filing it in *workspace_id* requires an owner or editor membership.
        """
        if workspace_id is not None:
            await self.require_workspace_role(workspace_id, user_id, _WRITE_ROLES, "add recordings")
        recording = Recording(
            user_id=user_id,
            title=title,
            file_path=file_path,
            description=description,
            language=language,
            duration=duration,
            workspace_id=workspace_id,
            transcription=None,
            notes=[],
        )
        self._session.add(recording)
        await self._session.flush()
        return recording

    async def get_recording(self, recording_id: str, user_id: str) -> Recording:
        """Return a recording owned by *user_id* or raise :class:`RecordingNotFoundError`."""
        stmt = (
            select(Recording)
            .where(Recording.id == recording_id, Recording.user_id == user_id)
            .options(
                selectinload(Recording.transcription).selectinload(Transcription.translations),
                selectinload(Recording.notes),
            )
        )
        result = await self._session.execute(stmt)
        recording = result.scalar_one_or_none()
        if recording is None:
            raise RecordingNotFoundError(recording_id)
        return recording

    async def list_recordings(
        self,
        user_id: str,
        language: str | None = None,
        limit: int = 50,
        offset: int = 0,
        workspace_id: str | None = None,
    ) -> list[Recording]:
        """Return a user's recordings, newest first.

        Optionally filtered by *language* and by *workspace_id*, which the
        user must be a member of.
        """
        if workspace_id is not None:
            await self.get_workspace(workspace_id, user_id)
        stmt = (
            select(Recording)
            .where(Recording.user_id == user_id)
            .options(
                selectinload(Recording.transcription).selectinload(Transcription.translations),
            )
            .order_by(Recording.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        if language is not None:
            stmt = stmt.where(Recording.language == language)
        if workspace_id is not None:
            stmt = stmt.where(Recording.workspace_id == workspace_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_recording(self, recording_id: str, user_id: str, **fields) -> Recording:
        """Overwrite only the provided recording fields.

        A non-null ``workspace_id`` moves the recording and needs write access
        to the target workspace; ``None`` unfiles it.
        """
        recording = await self.get_recording(recording_id, user_id)
        target = fields.get("workspace_id")
        if target is not None and target != recording.workspace_id:
            await self.require_workspace_role(target, user_id, _WRITE_ROLES, "add recordings")
        _apply(recording, _RECORDING_FIELDS, fields)
        await self._session.flush()
        return recording

    async def update_recording_status(self, recording_id: str, user_id: str, status: str) -> Recording:
        """Update only the ingestion status of a recording."""
        return await self.update_recording(recording_id, user_id, status=status)

    async def delete_recording(self, recording_id: str, user_id: str) -> Recording:
        """Delete a recording; transcription, translations and notes cascade."""
        recording = await self.get_recording(recording_id, user_id)
        await self._session.delete(recording)
        await self._session.flush()
        return recording

    # ------------------------------------------------------------------
    # Workspaces
    # ------------------------------------------------------------------

    async def create_workspace(
        self, user_id: str, name: str, slug: str, description: str | None = None
    ) -> Workspace:
        """Create a workspace with *user_id* as its owner.

        Raises:
            WorkspaceConflictError: The slug is already taken.
        """
        workspace = Workspace(
            name=name,
            slug=slug,
            description=description,
            created_by=user_id,
            members=[WorkspaceMember(user_id=user_id, role=WorkspaceRole.owner.value)],
        )
        self._session.add(workspace)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise WorkspaceConflictError(slug) from exc
        return workspace

    async def list_workspaces(self, user_id: str) -> list[Workspace]:
        """Return the workspaces *user_id* belongs to, newest first."""
        stmt = (
            select(Workspace)
            .join(WorkspaceMember)
            .where(WorkspaceMember.user_id == user_id)
            .order_by(Workspace.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_workspace(self, workspace_id: str, user_id: str) -> Workspace:
        """Return a workspace *user_id* belongs to or raise :class:`WorkspaceNotFoundError`."""
        stmt = (
            select(Workspace)
            .join(WorkspaceMember)
            .where(Workspace.id == workspace_id, WorkspaceMember.user_id == user_id)
        )
        result = await self._session.execute(stmt)
        workspace = result.scalar_one_or_none()
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        return workspace

    async def require_workspace_role(
        self,
        workspace_id: str,
        user_id: str,
        roles: Iterable[WorkspaceRole],
        action: str,
    ) -> Workspace:
        """Return the workspace if *user_id* holds one of *roles* in it.

        Raises:
            WorkspaceNotFoundError: Unknown workspace or not a member.
            WorkspacePermissionError: Member, but with another role.
        """
        workspace = await self.get_workspace(workspace_id, user_id)
        role = next(m.role for m in workspace.members if m.user_id == user_id)
        if role not in {r.value for r in roles}:
            raise WorkspacePermissionError(workspace_id, action)
        return workspace

    async def update_workspace(self, workspace_id: str, user_id: str, **fields) -> Workspace:
        """Rename or re-describe a workspace (owners and editors)."""
        workspace = await self.require_workspace_role(
            workspace_id, user_id, _WRITE_ROLES, "edit the workspace"
        )
        _apply(workspace, _WORKSPACE_FIELDS, fields)
        await self._session.flush()
        return workspace

    async def delete_workspace(self, workspace_id: str, user_id: str) -> None:
        """Delete a workspace (owners only); its recordings become unfiled."""
        workspace = await self.require_workspace_role(
            workspace_id, user_id, {WorkspaceRole.owner}, "delete the workspace"
        )
        await self._session.execute(
            update(Recording)
            .where(Recording.workspace_id == workspace_id)
            .values(workspace_id=None, updated_at=_now())
        )
        await self._session.delete(workspace)
        await self._session.flush()

    async def set_workspace_member(
        self, workspace_id: str, user_id: str, member_id: str, role: WorkspaceRole
    ) -> WorkspaceMember:
        """Add *member_id* to the workspace or change their role (owners only)."""
        workspace = await self.require_workspace_role(
            workspace_id, user_id, {WorkspaceRole.owner}, "manage members"
        )
        if member_id == user_id:
            raise WorkspacePermissionError(workspace_id, "change your own role")
        member = next((m for m in workspace.members if m.user_id == member_id), None)
        if member is None:
            member = WorkspaceMember(user_id=member_id, role=role.value)
            workspace.members.append(member)
        else:
            member.role = role.value
        workspace.updated_at = _now()
        await self._session.flush()
        return member

    async def remove_workspace_member(
        self, workspace_id: str, user_id: str, member_id: str
    ) -> None:
        """Remove *member_id* (owners only, never the caller themselves)."""
        workspace = await self.require_workspace_role(
            workspace_id, user_id, {WorkspaceRole.owner}, "manage members"
        )
        if member_id == user_id:
            raise WorkspacePermissionError(workspace_id, "remove yourself")
        member = next((m for m in workspace.members if m.user_id == member_id), None)
        if member is None:
            raise BakBakError(
                detail=f"{member_id} is not a member of workspace {workspace_id}",
                code="WORKSPACE_MEMBER_NOT_FOUND",
                status_code=404,
            )
        workspace.members.remove(member)
        await self._session.flush()

    # ------------------------------------------------------------------
    # Transcriptions
    # ------------------------------------------------------------------

    async def get_transcription(self, recording_id: str) -> Transcription | None:
        """Return the transcription row for a recording, if one exists."""
        stmt = (
            select(Transcription)
            .where(Transcription.recording_id == recording_id)
            .options(selectinload(Transcription.translations))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_transcription(self, recording: Recording) -> Transcription:
        """Return the recording's transcription, creating it NOT_STARTED on first use.

        Raises:
            TranscriptionConflictError: A concurrent caller created the row first.
        """
        if recording.transcription is not None:
            return recording.transcription
        transcription = Transcription(
            recording_id=recording.id,
            language=recording.language or "auto",
            status=ProcessingStatus.NOT_STARTED.value,
            translations=[],
        )
        recording.transcription = transcription
        try:
            await self._session.flush()
        except IntegrityError as exc:
            logger.info("Transcription for recording %s created concurrently", recording.id)
            raise TranscriptionConflictError() from exc
        logger.debug("Created transcription row for recording %s", recording.id)
        return transcription

    async def update_transcription(self, recording_id: str, **fields) -> Transcription:
        """Overwrite only the provided transcription fields and bump *updated_at*."""
        transcription = await self.get_transcription(recording_id)
        if transcription is None:
            raise RecordingNotFoundError(recording_id)
        _apply(transcription, _TRANSCRIPTION_FIELDS, fields)
        await self._session.flush()
        return transcription

    async def claim_transcription(
        self,
        recording_id: str,
        from_statuses: Iterable[ProcessingStatus],
        to_status: ProcessingStatus,
        **fields,
    ) -> bool:
        """Conditionally move a transcription to *to_status*.

        The single UPDATE only matches while the row is still in one of
        *from_statuses*, so two racing callers cannot both win.

        Returns:
            True if this call performed the transition.
        """
        stmt = (
            update(Transcription)
            .where(
                Transcription.recording_id == recording_id,
                Transcription.status.in_([s.value for s in from_statuses]),
            )
            .values(status=to_status.value, updated_at=_now(), **fields)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Translations
    # ------------------------------------------------------------------

    async def get_translation(
        self, transcription_id: str, target_language: str
    ) -> Translation | None:
        """Return the translation for one target language, if any."""
        stmt = select(Translation).where(
            Translation.transcription_id == transcription_id,
            Translation.target_language == target_language,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_translations(self, transcription_id: str) -> list[Translation]:
        """Return a transcription's translations, most recently updated first."""
        stmt = (
            select(Translation)
            .where(Translation.transcription_id == transcription_id)
            .order_by(Translation.updated_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def clear_translations(self, transcription: Transcription) -> int:
        """Drop every translation of *transcription*; returns the number removed."""
        removed = len(transcription.translations)
        transcription.translations.clear()
        await self._session.flush()
        return removed

    async def upsert_translation(
        self,
        transcription: Transcription,
        source_language: str,
        target_language: str,
        **fields,
    ) -> Translation:
        """Create the (transcription, target) translation or update the existing one."""
        translation = await self.get_translation(transcription.id, target_language)
        if translation is None:
            translation = Translation(
                source_language=source_language,
                target_language=target_language,
            )
            transcription.translations.append(translation)
            _apply(translation, _TRANSLATION_FIELDS, fields)
        else:
            _apply(translation, _TRANSLATION_FIELDS, {"source_language": source_language, **fields})
        await self._session.flush()
        return translation

    async def update_translation(self, translation_id: str, **fields) -> Translation:
        """Overwrite only the provided translation fields."""
        translation = await self._session.get(Translation, translation_id)
        if translation is None:
            raise BakBakError(
                detail=f"Translation not found: {translation_id}",
                code="TRANSLATION_NOT_FOUND",
                status_code=404,
            )
        _apply(translation, _TRANSLATION_FIELDS, fields)
        await self._session.flush()
        return translation

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def create_note(
        self,
        recording_id: str,
        user_id: str,
        content: str,
        timestamp: int | None = None,
    ) -> Note:
        """Attach a note to a recording the user owns."""
        recording = await self.get_recording(recording_id, user_id)
        note = Note(
            recording_id=recording.id,
            user_id=user_id,
            content=content,
            timestamp=timestamp,
        )
        recording.notes.append(note)
        await self._session.flush()
        return note

    async def list_notes(self, recording_id: str, user_id: str) -> list[Note]:
        """Return notes for a recording ordered by creation time."""
        await self.get_recording(recording_id, user_id)
        stmt = (
            select(Note)
            .where(Note.recording_id == recording_id, Note.user_id == user_id)
            .order_by(Note.created_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_note(self, note_id: str, recording_id: str, user_id: str) -> Note:
        """Return a note or raise :class:`NoteNotFoundError`."""
        stmt = select(Note).where(
            Note.id == note_id,
            Note.recording_id == recording_id,
            Note.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        note = result.scalar_one_or_none()
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def update_note(self, note_id: str, recording_id: str, user_id: str, **fields) -> Note:
        """Overwrite only the provided note fields."""
        note = await self.get_note(note_id, recording_id, user_id)
        _apply(note, _NOTE_FIELDS, fields)
        await self._session.flush()
        return note

    async def delete_note(self, note_id: str, recording_id: str, user_id: str) -> None:
        """Delete a single note."""
        note = await self.get_note(note_id, recording_id, user_id)
        await self._session.delete(note)
        await self._session.flush()


class RecordingStore:
    """Hands out one repository per unit of work.

    Each ``async with store.unit() as repo`` block runs in its own session and
    commits on clean exit, so a status written inside one block is durable
    before the caller moves on to an external call.

    Args:
        session_scope: Context-manager factory yielding a committing session.
            Defaults to :func:`get_session`.
    """

    def __init__(
        self,
        session_scope: Callable[[], AbstractAsyncContextManager[AsyncSession]] = get_session,
    ) -> None:
        self._session_scope = session_scope

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "RecordingStore":
        """Build a store bound to *engine* instead of the module-level engine."""
        factory = async_sessionmaker(engine, expire_on_commit=False)

        @asynccontextmanager
        async def scope() -> AsyncIterator[AsyncSession]:
            async with factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        return cls(scope)

    @asynccontextmanager
    async def unit(self) -> AsyncIterator[RecordingRepository]:
        """Yield a repository whose writes are committed when the block exits."""
        async with self._session_scope() as session:
            yield RecordingRepository(session)

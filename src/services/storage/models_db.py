"""
SQLAlchemy ORM models for the BakBak schema.

Tables: ``workspaces``, ``workspace_members``, ``recordings``,
``transcriptions``, ``translations``, ``notes``.
A recording owns at most one transcription; a transcription owns at most one
translation per target language. A recording may be filed in one workspace;
removing the workspace leaves the recording unfiled.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.status import ProcessingStatus
from src.services.storage.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Workspace(Base):
    """A shared space grouping recordings; access is granted by membership."""

    __tablename__ = "workspaces"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(default=_now)
    updated_at: Mapped[datetime] = mapped_column(default=_now)

    members: Mapped[list["WorkspaceMember"]] = relationship(
        back_populates="workspace",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Workspace id={self.id} slug={self.slug!r}>"


class WorkspaceMember(Base):
    """A user's role in a workspace: ``owner``, ``editor`` or ``viewer``."""

    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id", name="uq_workspace_member"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    role: Mapped[str] = mapped_column(String(20), default="viewer")
    created_at: Mapped[datetime] = mapped_column(default=_now)

    workspace: Mapped["Workspace"] = relationship(back_populates="members")


class Recording(Base):
    """An uploaded or recorded audio file owned by one user."""

    __tablename__ = "recordings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    workspace_id: Mapped[str | None] = mapped_column(
        ForeignKey("workspaces.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_path: Mapped[str] = mapped_column(String(1024))
    language: Mapped[str | None] = mapped_column(String(16), nullable=True, index=True)
    duration: Mapped[int] = mapped_column(default=0)
    status: Mapped[str] = mapped_column(String(20), default="processing")
    created_at: Mapped[datetime] = mapped_column(default=_now)
    updated_at: Mapped[datetime] = mapped_column(default=_now)

    transcription: Mapped["Transcription"] = relationship(
        back_populates="recording",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )
    notes: Mapped[list["Note"]] = relationship(
        back_populates="recording",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Note.created_at",
    )

    def __repr__(self) -> str:
        return f"<Recording id={self.id} user={self.user_id!r} status={self.status!r}>"


class Transcription(Base):
    """Speech-to-text state and result for one recording."""

    __tablename__ = "transcriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    recording_id: Mapped[str] = mapped_column(
        ForeignKey("recordings.id", ondelete="CASCADE"), unique=True
    )
    text: Mapped[str] = mapped_column(Text, default="")
    romanization: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(16), default="auto")
    job_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ProcessingStatus.NOT_STARTED.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=_now)
    updated_at: Mapped[datetime] = mapped_column(default=_now)

    recording: Mapped["Recording"] = relationship(back_populates="transcription")
    translations: Mapped[list["Translation"]] = relationship(
        back_populates="transcription",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Translation.created_at",
    )

    def __repr__(self) -> str:
        return f"<Transcription recording={self.recording_id} status={self.status!r}>"


class Translation(Base):
    """A transcript translated into one target language."""

    __tablename__ = "translations"
    __table_args__ = (
        UniqueConstraint("transcription_id", "target_language", name="uq_translation_target"),
        Index("ix_translations_languages", "source_language", "target_language"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    transcription_id: Mapped[str] = mapped_column(
        ForeignKey("transcriptions.id", ondelete="CASCADE"), index=True
    )
    text: Mapped[str] = mapped_column(Text, default="")
    source_language: Mapped[str] = mapped_column(String(16))
    target_language: Mapped[str] = mapped_column(String(16))
    status: Mapped[str] = mapped_column(String(20), default=ProcessingStatus.NOT_STARTED.value)
    created_at: Mapped[datetime] = mapped_column(default=_now)
    updated_at: Mapped[datetime] = mapped_column(default=_now)

    transcription: Mapped["Transcription"] = relationship(back_populates="translations")

    def __repr__(self) -> str:
        return (
            f"<Translation transcription={self.transcription_id} "
            f"{self.source_language}->{self.target_language} status={self.status!r}>"
        )


class Note(Base):
    """Free-form user note, optionally pinned to a position in the audio."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    recording_id: Mapped[str] = mapped_column(
        ForeignKey("recordings.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    content: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[int | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_now)
    updated_at: Mapped[datetime] = mapped_column(default=_now)

    recording: Mapped["Recording"] = relationship(back_populates="notes")

    def __repr__(self) -> str:
        return f"<Note id={self.id} recording={self.recording_id}>"

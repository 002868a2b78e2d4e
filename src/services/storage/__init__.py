"""
Storage module - Database and object storage operations.
"""

from src.services.storage.database import (
    Base,
    close_db,
    get_engine,
    get_session,
    init_db,
    reset_engine,
)
from src.services.storage.models_db import Note, Recording, Transcription, Translation
from src.services.storage.object_store import S3ObjectStore
from src.services.storage.repository import RecordingRepository, RecordingStore

__all__ = [
    "Base",
    "Note",
    "Recording",
    "RecordingRepository",
    "RecordingStore",
    "S3ObjectStore",
    "Transcription",
    "Translation",
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
]

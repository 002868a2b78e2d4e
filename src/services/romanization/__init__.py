"""
Romanization module - script conversion for transcripts.
"""

from src.core.config import Settings, get_settings

from .base import BaseTransliterator
from .romanizer import Romanizer

__all__ = ["BaseTransliterator", "Romanizer", "create_transliterator"]


def create_transliterator(
    provider: str | None = None, settings: Settings | None = None
) -> BaseTransliterator:
    """Create an LLM-backed transliterator using *provider* (defaults to settings)."""
    from src.services.llm import create_llm

    from .llm import LLMTransliterator

    settings = settings or get_settings()
    llm = create_llm(provider, settings=settings)
    return LLMTransliterator(llm, max_text_length=settings.romanization_max_text_length)

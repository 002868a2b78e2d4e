"""
Abstract base class for text translation providers.
"""

from abc import ABC, abstractmethod


class BaseTranslator(ABC):
    """Interface that every translation provider must implement."""

    @abstractmethod
    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        """Translate *text* between two language codes.

        Returns:
            The translated text. Same-language requests return *text* unchanged.

        Raises:
            ExternalServiceError: If the provider fails or returns nothing.
        """

"""
Abstract base class for transliteration engines.
"""

from abc import ABC, abstractmethod


class BaseTransliterator(ABC):
    """Converts text from one script to another."""

    @abstractmethod
    async def transliterate(
        self,
        text: str,
        language_code: str,
        source_script: str,
        target_script: str = "Latn",
    ) -> str:
        """Render *text* in *target_script*.

        Args:
            text: Text written in *source_script*.
            language_code: App language code of the text (e.g. "ja").
            source_script: ISO 15924 script of the input (e.g. "Jpan").
            target_script: ISO 15924 script to produce.

        Returns:
            The transliterated text.

        Raises:
            RomanizationError: If the text cannot be transliterated.
        """

"""Derives the Latin-script rendering stored next to a transcript."""

import logging

from src.core.languages import LATIN_SCRIPT, get_default_script, is_supported
from src.core.models import RomanizationOutcome
from src.services.romanization.base import BaseTransliterator

logger = logging.getLogger(__name__)


class Romanizer:
    """Decides whether a transcript needs romanizing and produces the result.

    Rules, in order:

    * an existing romanization is returned unchanged;
    * unsupported languages and languages already written in Latin script
      pass the original text through without calling the transliterator;
    * otherwise the transliterator runs, and any failure falls back to the
      original text.

    A produced romanization is lower-cased; passthrough text is returned as is.
    """

    def __init__(self, transliterator: BaseTransliterator) -> None:
        self._transliterator = transliterator

    async def romanize(
        self,
        text: str,
        language_code: str | None,
        existing: str | None = None,
    ) -> RomanizationOutcome:
        if existing:
            return RomanizationOutcome(
                text=existing,
                romanized=True,
                source_script=get_default_script(language_code),
            )

        source_script = get_default_script(language_code)
        if (
            not text
            or not is_supported(language_code)
            or source_script in (None, LATIN_SCRIPT)
        ):
            return RomanizationOutcome(text=text, source_script=source_script)

        try:
            romanized = await self._transliterator.transliterate(
                text, language_code, source_script, LATIN_SCRIPT
            )
        except Exception as exc:
            logger.warning(
                "Romanization failed for %s text, keeping original: %s", language_code, exc
            )
            return RomanizationOutcome(text=text, source_script=source_script)

        return RomanizationOutcome(
            text=romanized.lower(),
            romanized=True,
            source_script=source_script,
        )

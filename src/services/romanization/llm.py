"""
LLM-backed transliterator.

Asks the configured language model to romanize a transcript using the
standard system for the language (Hepburn, Revised Romanization, ...).
"""

import logging

from src.core.config import get_settings
from src.core.exceptions import RomanizationError
from src.core.languages import LATIN_SCRIPT, get_language
from src.core.utils import strip_code_fences, strip_wrapping_quotes
from src.services.llm.base import BaseLLM
from src.services.romanization.base import BaseTransliterator

logger = logging.getLogger(__name__)

ROMANIZATION_SYSTEM_PROMPT = (
    "You are an expert linguist specializing in romanization of voice transcriptions."
)

ROMANIZATION_PROMPT = """\
Romanize the following {language} text using standard conventions \
(e.g., Pinyin for Chinese, Hepburn for Japanese, Revised Romanization for Korean).
The text comes from an automatic voice transcription, so account for potential \
transcription errors and focus on readability.
Return only the romanized text.

Text:
{text}"""

SCRIPT_CONVERSION_PROMPT = """\
Convert the following {language} text from the {source_script} script to the \
{target_script} script. Keep the meaning and word order unchanged.
Return only the converted text.

Text:
{text}"""


class LLMTransliterator(BaseTransliterator):
    """Transliterator that delegates to an LLM provider.

    Args:
        llm: Any :class:`BaseLLM` implementation.
        max_text_length: Longest input accepted; defaults to settings.
    """

    def __init__(self, llm: BaseLLM, max_text_length: int | None = None) -> None:
        self._llm = llm
        self._max_text_length = max_text_length or get_settings().romanization_max_text_length

    def _build_prompt(
        self, text: str, language_code: str, source_script: str, target_script: str
    ) -> str:
        lang = get_language(language_code)
        language = lang.name if lang else language_code
        if target_script == LATIN_SCRIPT:
            return ROMANIZATION_PROMPT.format(language=language, text=text)
        return SCRIPT_CONVERSION_PROMPT.format(
            language=language,
            source_script=source_script,
            target_script=target_script,
            text=text,
        )

    async def transliterate(
        self,
        text: str,
        language_code: str,
        source_script: str,
        target_script: str = LATIN_SCRIPT,
    ) -> str:
        if not text or not text.strip():
            raise RomanizationError("Text must not be empty")
        if len(text) > self._max_text_length:
            raise RomanizationError(
                f"Text too long for romanization ({len(text)} > {self._max_text_length} chars)"
            )

        prompt = self._build_prompt(text, language_code, source_script, target_script)
        try:
            raw = await self._llm.generate(
                prompt,
                system=ROMANIZATION_SYSTEM_PROMPT,
                temperature=0.1,
                max_tokens=2048,
            )
        except (ConnectionError, TimeoutError, RuntimeError) as exc:
            logger.error("Romanization LLM call failed (%s): %s", language_code, exc)
            raise RomanizationError(f"Romanization failed: {exc}") from exc

        result = strip_wrapping_quotes(strip_code_fences(raw or ""))
        if not result:
            raise RomanizationError("Romanization returned an empty response")
        return result

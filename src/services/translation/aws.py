"""AWS Translate provider with a small in-process result cache."""

import asyncio
import logging
import time
from collections import OrderedDict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.core.config import get_settings
from src.core.exceptions import ExternalServiceError
from src.services.translation.base import BaseTranslator

logger = logging.getLogger(__name__)

# Languages AWS Translate accepts by base code; anything else falls back to English.
_SUPPORTED = frozenset(
    {
        "en", "es", "fr", "de", "it", "ja", "ko", "pt", "ru", "zh", "ar", "hi",
        "cs", "da", "fi", "he", "id", "nl", "no", "pl", "sv", "tr", "uk", "vi",
    }
)


def normalize_language(code: str) -> str:
    """Reduce ``"en-US"`` style codes to a base code AWS Translate accepts."""
    if code == "auto":
        return code
    base = code.split("-")[0].lower()
    return base if base in _SUPPORTED else "en"


class AWSTranslator(BaseTranslator):
    """Amazon Translate client.

    Results are cached per (source, target, text) for ``cache_ttl`` seconds.
    Expired entries are dropped whenever a new result is stored, and the
    cache never holds more than ``max_entries`` results (oldest go first).

    Args:
        client: Optional pre-built boto3 ``translate`` client (used in tests).
        cache_ttl: Cache lifetime in seconds (falls back to settings).
        max_entries: Cache size bound (falls back to settings).
    """

    def __init__(
        self, client=None, cache_ttl: int | None = None, max_entries: int | None = None
    ) -> None:
        settings = get_settings()
        self._client = client or boto3.client("translate", region_name=settings.aws_region)
        self._cache_ttl = cache_ttl if cache_ttl is not None else settings.translate_cache_ttl
        self._max_entries = (
            max_entries if max_entries is not None else settings.translate_cache_max_entries
        )
        # Insertion order == age, so the first entry is always the oldest.
        self._cache: OrderedDict[tuple[str, str, str], tuple[str, float]] = OrderedDict()

    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        source = normalize_language(source_language)
        target = normalize_language(target_language)
        if source == target:
            return text

        key = (source, target, text)
        cached = self._cache.get(key)
        if cached and time.monotonic() - cached[1] < self._cache_ttl:
            return cached[0]

        try:
            response = await asyncio.to_thread(
                self._client.translate_text,
                Text=text,
                SourceLanguageCode=source,
                TargetLanguageCode=target,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Translation %s->%s failed: %s", source, target, exc)
            raise ExternalServiceError(f"Translation failed: {exc}") from exc

        translated = response.get("TranslatedText")
        if not translated:
            raise ExternalServiceError("Translation failed: no translated text received")

        self._store(key, translated)
        return translated

    def _store(self, key: tuple[str, str, str], translated: str) -> None:
        if self._cache_ttl <= 0 or self._max_entries <= 0:
            return
        now = time.monotonic()
        self._cache.pop(key, None)
        while self._cache:
            _, (_, stored_at) = next(iter(self._cache.items()))
            if now - stored_at < self._cache_ttl and len(self._cache) < self._max_entries:
                break
            self._cache.popitem(last=False)
        self._cache[key] = (translated, now)

    def clear_cache(self) -> None:
        self._cache.clear()

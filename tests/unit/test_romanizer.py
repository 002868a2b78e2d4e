"""Tests for the romanization decision rules."""

from unittest.mock import AsyncMock

import pytest

from src.core.exceptions import RomanizationError
from src.services.romanization import Romanizer
from src.services.romanization.base import BaseTransliterator


@pytest.fixture
def transliterator():
    mock = AsyncMock(spec=BaseTransliterator)
    mock.transliterate.return_value = "Konnichiwa"
    return mock


@pytest.fixture
def romanizer(transliterator):
    return Romanizer(transliterator)


async def test_non_latin_language_is_romanized_and_lower_cased(romanizer, transliterator):
    outcome = await romanizer.romanize("こんにちは", "ja")

    assert outcome.text == "konnichiwa"
    assert outcome.romanized is True
    assert outcome.source_script == "Jpan"
    assert outcome.target_script == "Latn"
    transliterator.transliterate.assert_awaited_once_with("こんにちは", "ja", "Jpan", "Latn")


async def test_latin_language_passes_through(romanizer, transliterator):
    outcome = await romanizer.romanize("Bonjour à tous", "fr")

    assert outcome.text == "Bonjour à tous"
    assert outcome.romanized is False
    transliterator.transliterate.assert_not_awaited()


@pytest.mark.parametrize("language", ["xx", None, ""])
async def test_unsupported_language_passes_through(romanizer, transliterator, language):
    outcome = await romanizer.romanize("текст", language)

    assert outcome.text == "текст"
    assert outcome.romanized is False
    transliterator.transliterate.assert_not_awaited()


async def test_existing_romanization_is_reused(romanizer, transliterator):
    outcome = await romanizer.romanize("こんにちは", "ja", existing="konnichiwa")

    assert outcome.text == "konnichiwa"
    assert outcome.romanized is True
    transliterator.transliterate.assert_not_awaited()


async def test_failure_falls_back_to_original(romanizer, transliterator):
    transliterator.transliterate.side_effect = RomanizationError("LLM down")

    outcome = await romanizer.romanize("नमस्ते", "hi")

    assert outcome.text == "नमस्ते"
    assert outcome.romanized is False
    assert outcome.source_script == "Deva"


async def test_empty_text_skips_transliterator(romanizer, transliterator):
    outcome = await romanizer.romanize("", "ko")

    assert outcome.text == ""
    transliterator.transliterate.assert_not_awaited()

"""Tests for the LLM-backed transliterator."""

import pytest

from src.core.exceptions import RomanizationError
from src.services.romanization.llm import LLMTransliterator


@pytest.fixture
def transliterator(mock_llm):
    return LLMTransliterator(mock_llm, max_text_length=50)


async def test_prompt_and_options(transliterator, mock_llm):
    result = await transliterator.transliterate("こんにちは", "ja", "Jpan", "Latn")

    assert result == "Konnichiwa"
    prompt = mock_llm.generate.call_args.args[0]
    kwargs = mock_llm.generate.call_args.kwargs
    assert "Japanese" in prompt
    assert "Hepburn" in prompt
    assert "こんにちは" in prompt
    assert "expert linguist" in kwargs["system"]
    assert kwargs["temperature"] == 0.1


async def test_non_latin_target_uses_script_prompt(transliterator, mock_llm):
    await transliterator.transliterate("namaste", "hi", "Latn", "Deva")

    prompt = mock_llm.generate.call_args.args[0]
    assert "Latn" in prompt
    assert "Deva" in prompt


async def test_strips_fences_and_quotes(transliterator, mock_llm):
    mock_llm.generate.return_value = '```\n"annyeonghaseyo"\n```'

    result = await transliterator.transliterate("안녕하세요", "ko", "Kore")

    assert result == "annyeonghaseyo"


@pytest.mark.parametrize("text", ["", "   "])
async def test_rejects_empty_input(transliterator, mock_llm, text):
    with pytest.raises(RomanizationError, match="empty"):
        await transliterator.transliterate(text, "ja", "Jpan")
    mock_llm.generate.assert_not_awaited()


async def test_rejects_long_input(transliterator, mock_llm):
    with pytest.raises(RomanizationError, match="too long"):
        await transliterator.transliterate("あ" * 51, "ja", "Jpan")
    mock_llm.generate.assert_not_awaited()


async def test_empty_response(transliterator, mock_llm):
    mock_llm.generate.return_value = "  ``` ```  "

    with pytest.raises(RomanizationError, match="empty response"):
        await transliterator.transliterate("こんにちは", "ja", "Jpan")


async def test_provider_error_is_wrapped(transliterator, mock_llm):
    mock_llm.generate.side_effect = ConnectionError("refused")

    with pytest.raises(RomanizationError, match="refused"):
        await transliterator.transliterate("こんにちは", "ja", "Jpan")

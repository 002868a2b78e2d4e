"""Tests for the supported-language table."""

from src.core.languages import (
    LATIN_SCRIPT,
    get_default_script,
    get_language,
    get_supported_scripts,
    get_transcribe_code,
    is_supported,
    normalize_translate_language,
)


def test_lookup_by_base_and_regional_code():
    assert get_language("ja").name == "Japanese"
    assert get_language("ja-JP").code == "ja"
    assert get_language("HI").code == "hi"
    assert get_language(None) is None
    assert get_language("xx") is None


def test_is_supported():
    assert is_supported("ko")
    assert not is_supported("zz")
    assert not is_supported("")


def test_default_scripts():
    assert get_default_script("hi") == "Deva"
    assert get_default_script("ja") == "Jpan"
    assert get_default_script("ko") == "Kore"
    assert get_default_script("fr") == LATIN_SCRIPT
    assert get_default_script("unknown") is None


def test_supported_scripts_include_latin_for_romanizable_languages():
    assert get_supported_scripts("ja") == ["Jpan", LATIN_SCRIPT]
    assert get_supported_scripts("es") == [LATIN_SCRIPT]
    assert get_supported_scripts("zz") == []


def test_transcribe_codes():
    assert get_transcribe_code("hi") == "hi-IN"
    assert get_transcribe_code("ja-JP") == "ja-JP"
    assert get_transcribe_code("pt-BR") == "pt-BR"
    assert get_transcribe_code("zz") == "en-US"
    assert get_transcribe_code(None) == "en-US"


def test_normalize_translate_language():
    assert normalize_translate_language("de-DE") == "de"
    assert normalize_translate_language("zz") == "en"
    assert normalize_translate_language(None, fallback="auto") == "auto"

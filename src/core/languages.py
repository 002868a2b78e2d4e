"""
Supported languages and their script metadata.

Each entry maps an app language code to the AWS Transcribe / Translate codes
and the ISO 15924 scripts the language is written in. Romanization relies on
``get_default_script`` to decide whether a transcript needs a Latin rendering.
"""

from dataclasses import dataclass, field

LATIN_SCRIPT = "Latn"


@dataclass(frozen=True)
class Language:
    """A language the transcription and translation flows can handle."""

    code: str
    name: str
    native_name: str
    transcribe_code: str
    translate_code: str
    default_script: str
    scripts: tuple[str, ...] = field(default_factory=tuple)


LANGUAGES: tuple[Language, ...] = (
    Language("hi", "Hindi", "हिन्दी", "hi-IN", "hi", "Deva", ("Deva", LATIN_SCRIPT)),
    Language("ja", "Japanese", "日本語", "ja-JP", "ja", "Jpan", ("Jpan", LATIN_SCRIPT)),
    Language("ko", "Korean", "한국어", "ko-KR", "ko", "Kore", ("Kore", LATIN_SCRIPT)),
    Language("fr", "French", "Français", "fr-FR", "fr", LATIN_SCRIPT, (LATIN_SCRIPT,)),
    Language("es", "Spanish", "Español", "es-ES", "es", LATIN_SCRIPT, (LATIN_SCRIPT,)),
    Language("de", "German", "Deutsch", "de-DE", "de", LATIN_SCRIPT, (LATIN_SCRIPT,)),
    Language("en", "English", "English", "en-US", "en", LATIN_SCRIPT, (LATIN_SCRIPT,)),
)

_BY_CODE = {lang.code: lang for lang in LANGUAGES}


def _base(code: str) -> str:
    """Return the lower-cased base subtag, e.g. ``"ja"`` for ``"ja-JP"``."""
    return code.split("-")[0].strip().lower()


def get_language(code: str | None) -> Language | None:
    """Look up a language by app code or regional code (``hi`` / ``hi-IN``)."""
    if not code:
        return None
    return _BY_CODE.get(_base(code))


def is_supported(code: str | None) -> bool:
    """Return True if the code's base language is in the language table."""
    return get_language(code) is not None


def normalize_translate_language(code: str | None, fallback: str = "en") -> str:
    """Map any code to its AWS Translate code, falling back to *fallback*."""
    lang = get_language(code)
    return lang.translate_code if lang else fallback


def get_transcribe_code(code: str | None, fallback: str = "en-US") -> str:
    """Return the AWS Transcribe code for *code*.

    Codes that already carry a region (``"ja-JP"``) are passed through as-is.
    """
    if code and "-" in code:
        return code
    lang = get_language(code)
    return lang.transcribe_code if lang else fallback


def get_default_script(code: str | None) -> str | None:
    """Return the default ISO 15924 script for a language, or None if unknown."""
    lang = get_language(code)
    return lang.default_script if lang else None


def get_supported_scripts(code: str | None) -> list[str]:
    """Return every script a language can be rendered in."""
    lang = get_language(code)
    return list(lang.scripts) if lang else []

"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """BakBak application settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        aws_s3_bucket: Bucket holding recording audio and transcription output.
        llm_provider: Which LLM backend performs romanization ("claude" or "ollama").
        database_url: Async SQLAlchemy connection string for SQLite.
        auth_user_header: Header carrying the user id set by the auth provider.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- AWS ---
    aws_region: str = "us-east-1"
    aws_s3_bucket: str = ""
    transcribe_output_bucket: str = ""  # Empty = write job output to aws_s3_bucket
    presigned_url_expiry: int = 3600  # Seconds a playback URL stays valid

    # --- Languages ---
    default_language: str = "hi"  # Used when a recording has no language set
    default_translation_language: str = "en"
    translate_cache_ttl: int = 24 * 60 * 60
    translate_cache_max_entries: int = 1000

    # --- LLM Provider (romanization) ---
    # "claude" for Anthropic API, "ollama" for local models
    llm_provider: str = "claude"

    claude_api_key: str = ""  # Required when llm_provider="claude"
    claude_model: str = "claude-3-haiku-20240307"

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"

    romanization_max_text_length: int = 10000

    # --- Auth ---
    # Authentication happens upstream; the service only reads the user id header
    auth_user_header: str = "X-User-Id"
    dev_user_id: str = ""  # Fallback user for local development; empty = header required

    # --- Application ---
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # --- Storage ---
    database_url: str = "sqlite+aiosqlite:///data/bakbak.db"

    @property
    def output_bucket(self) -> str:
        """Bucket that transcription jobs write their JSON artifacts to."""
        return self.transcribe_output_bucket or self.aws_s3_bucket


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()

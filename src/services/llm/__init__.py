"""
LLM providers used for romanization.

``create_llm`` builds the configured provider from ``Settings`` so callers
only choose between ``"claude"`` (Anthropic API) and ``"ollama"`` (local).
"""

from src.core.config import Settings, get_settings

from .base import BaseLLM

__all__ = ["BaseLLM", "LLM_PROVIDERS", "create_llm"]

LLM_PROVIDERS = ("claude", "ollama")


def create_llm(provider: str | None = None, settings: Settings | None = None) -> BaseLLM:
    """Build the LLM client for *provider* (defaults to ``settings.llm_provider``).

    Raises:
        ValueError: If the provider is not one of ``LLM_PROVIDERS``.
    """
    settings = settings or get_settings()
    provider = (provider or settings.llm_provider).lower()

    if provider == "claude":
        from .claude import ClaudeLLM

        return ClaudeLLM(api_key=settings.claude_api_key, model=settings.claude_model)
    if provider == "ollama":
        from .ollama import OllamaLLM

        return OllamaLLM(base_url=settings.ollama_base_url, model=settings.ollama_model)
    raise ValueError(
        f"Unknown LLM provider: {provider} (expected one of {', '.join(LLM_PROVIDERS)})"
    )

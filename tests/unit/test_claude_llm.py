"""Unit tests for ClaudeLLM provider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from anthropic import APIConnectionError, APITimeoutError, RateLimitError

from src.core.config import Settings
from src.services.llm import create_llm
from src.services.llm.claude import ClaudeLLM

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_message_response(text: str):
    """Build a minimal object that looks like ``anthropic.types.Message``."""
    block = SimpleNamespace(text=text)
    return SimpleNamespace(content=[block])


def _mock_settings(**overrides):
    """Return a fake Settings object with sensible defaults."""
    defaults = {
        "claude_api_key": "sk-test-key",
        "claude_model": "claude-3-haiku-20240307",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_client():
    """Return an ``AsyncMock`` mimicking ``AsyncAnthropic``."""
    client = AsyncMock()
    client.messages.create = AsyncMock(return_value=_make_message_response("namaste"))
    return client


@pytest.fixture
def llm(mock_client):
    """Create a ClaudeLLM with a mocked Anthropic client."""
    with patch("src.services.llm.claude.get_settings", return_value=_mock_settings()):
        with patch("src.services.llm.claude.AsyncAnthropic", return_value=mock_client):
            instance = ClaudeLLM()
    return instance


# ---------------------------------------------------------------------------
# TestClaudeLLMInit
# ---------------------------------------------------------------------------


class TestClaudeLLMInit:
    """Constructor / settings tests."""

    def test_defaults_from_settings(self):
        settings = _mock_settings()
        with patch("src.services.llm.claude.get_settings", return_value=settings):
            with patch("src.services.llm.claude.AsyncAnthropic") as mock_cls:
                llm = ClaudeLLM()

        assert llm._api_key == "sk-test-key"
        assert llm.model_name == "claude-3-haiku-20240307"
        assert llm._temperature == 0.1
        mock_cls.assert_called_once_with(api_key="sk-test-key")

    def test_explicit_args_override_settings(self):
        with patch("src.services.llm.claude.get_settings", return_value=_mock_settings()):
            with patch("src.services.llm.claude.AsyncAnthropic"):
                llm = ClaudeLLM(api_key="sk-custom", model="claude-other", max_tokens=512)

        assert llm._api_key == "sk-custom"
        assert llm._model == "claude-other"
        assert llm._max_tokens == 512

    def test_factory_builds_claude_from_settings(self):
        settings = Settings(
            llm_provider="claude", claude_api_key="sk-from-settings", claude_model="claude-x"
        )
        with patch("src.services.llm.claude.get_settings", return_value=settings):
            with patch("src.services.llm.claude.AsyncAnthropic") as mock_cls:
                llm = create_llm(settings=settings)
        assert isinstance(llm, ClaudeLLM)
        assert llm.model_name == "claude-x"
        mock_cls.assert_called_once_with(api_key="sk-from-settings")

    def test_factory_explicit_provider_beats_settings(self):
        settings = Settings(llm_provider="ollama", claude_api_key="sk-test-key")
        with patch("src.services.llm.claude.get_settings", return_value=settings):
            with patch("src.services.llm.claude.AsyncAnthropic"):
                llm = create_llm("CLAUDE", settings=settings)
        assert isinstance(llm, ClaudeLLM)

    def test_factory_rejects_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_llm("gpt", settings=Settings())


# ---------------------------------------------------------------------------
# TestGenerate
# ---------------------------------------------------------------------------


class TestGenerate:
    """Tests for ``generate()``."""

    async def test_returns_text(self, llm, mock_client):
        result = await llm.generate("Romanize this")
        assert result == "namaste"

    async def test_joins_text_blocks(self, llm, mock_client):
        mock_client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text="kon"), SimpleNamespace(text="nichiwa")]
        )
        assert await llm.generate("prompt") == "konnichiwa"

    async def test_passes_system_kwarg(self, llm, mock_client):
        await llm.generate("user prompt", system="You are a linguist")

        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert call_kwargs["system"] == "You are a linguist"

    async def test_no_system_kwarg_omitted(self, llm, mock_client):
        await llm.generate("user prompt")

        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert "system" not in call_kwargs

    async def test_default_options(self, llm, mock_client):
        await llm.generate("prompt")

        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert call_kwargs["temperature"] == 0.1
        assert call_kwargs["max_tokens"] == 2048
        assert call_kwargs["model"] == "claude-3-haiku-20240307"

    async def test_forwards_options(self, llm, mock_client):
        await llm.generate("prompt", temperature=0.0, max_tokens=512)

        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert call_kwargs["temperature"] == 0.0
        assert call_kwargs["max_tokens"] == 512


# ---------------------------------------------------------------------------
# TestErrorHandling
# ---------------------------------------------------------------------------


class TestErrorHandling:
    """Tests for exception translation and retries."""

    async def test_connection_error(self, llm, mock_client):
        mock_client.messages.create.side_effect = APIConnectionError(request=MagicMock())

        with pytest.raises(ConnectionError, match="Failed to connect"):
            await llm.generate("prompt")
        assert mock_client.messages.create.await_count == 3

    async def test_timeout_error(self, llm, mock_client):
        mock_client.messages.create.side_effect = APITimeoutError(request=MagicMock())

        with pytest.raises(TimeoutError, match="timed out"):
            await llm.generate("prompt")

    async def test_rate_limit_error(self, llm, mock_client):
        mock_client.messages.create.side_effect = RateLimitError(
            message="Rate limit exceeded",
            response=MagicMock(status_code=429, headers={}),
            body={"error": {"message": "rate limited"}},
        )

        with pytest.raises(ConnectionError, match="rate limit"):
            await llm.generate("prompt")

    async def test_unexpected_error_not_retried(self, llm, mock_client):
        mock_client.messages.create.side_effect = ValueError("something weird")

        with pytest.raises(RuntimeError, match="Claude API error"):
            await llm.generate("prompt")
        assert mock_client.messages.create.await_count == 1

"""
Abstract base class for LLM providers.

The romanization step talks to a model only through this interface, so the
backing provider (Claude, Ollama) is chosen by configuration.
"""

from abc import ABC, abstractmethod


class BaseLLM(ABC):
    """Interface that every LLM provider must implement."""

    model_name: str = ""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a text response.

        Args:
            prompt: The user prompt.
            system: Optional system instructions.
            temperature: Sampling temperature override.
            max_tokens: Output token limit override.

        Returns:
            The model's text response.

        Raises:
            ConnectionError: Provider unreachable or rate limited (retryable).
            TimeoutError: Provider timed out (retryable).
            RuntimeError: Any other provider failure.
        """

"""
Translation module - text translation abstraction layer.
"""

from .base import BaseTranslator

__all__ = ["BaseTranslator", "create_translator"]


def create_translator(provider: str = "aws", **kwargs) -> BaseTranslator:
    """Create a translator for *provider* ("aws").

    Raises:
        ValueError: If provider is unknown
    """
    if provider in ("aws", "translate"):
        from .aws import AWSTranslator

        return AWSTranslator(**kwargs)
    raise ValueError(f"Unknown translation provider: {provider}")

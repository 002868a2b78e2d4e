"""
Transcription module - external speech-to-text job abstraction layer.

Factory function for creating job service instances based on provider configuration.
"""

from .base import BaseTranscriptionService
from .poller import JobStatusPoller

__all__ = ["BaseTranscriptionService", "JobStatusPoller", "create_transcription_service"]


def create_transcription_service(provider: str = "aws", **kwargs) -> BaseTranscriptionService:
    """
    Factory function to create a transcription job service.

    Args:
        provider: Job service name ("aws")
        **kwargs: Provider-specific configuration

    Returns:
        BaseTranscriptionService implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider in ("aws", "transcribe"):
        from .aws import AWSTranscribeService

        return AWSTranscribeService(**kwargs)
    raise ValueError(f"Unknown transcription provider: {provider}")

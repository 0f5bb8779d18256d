"""Factory function for creating LLM service instances."""

import logging

from stressy.constants import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_LLM_SERVICE,
    DEFAULT_OLLAMA_HOST,
    GENERATION_DEFAULTS,
)
from stressy.llm.base import LLMService
from stressy.llm.gemini import GeminiService
from stressy.llm.ollama import OllamaService

logger = logging.getLogger(__name__)


def get_llm_service(config: dict | None = None) -> LLMService | None:
    """Factory function to create an LLM service instance.

    Credentials come only from ``config``; nothing is read from the
    environment here.

    Args:
        config: Optional configuration dictionary. Expected keys:
                - 'service': "gemini" (default) or "ollama"
                - 'model': Generation model name
                - 'api_key': Gemini API key
                - 'host': Ollama host URL
                - 'embedding_model': Embedding model name
                - 'embedding_dimensions': Requested embedding size
                - 'timeout': Per-call HTTP timeout in seconds

    Returns:
        LLMService | None: A service instance, or None when the Gemini service
        is selected but no API key is configured.

    Raises:
        ValueError: If the service type is not supported.
    """
    if config is None:
        config = {}

    service_type = config.get("service") or DEFAULT_LLM_SERVICE
    model = config.get("model") or GENERATION_DEFAULTS.get(service_type)
    timeout = config.get("timeout")

    if service_type == "ollama":
        return OllamaService(
            host=config.get("host") or DEFAULT_OLLAMA_HOST,
            model=model,
            embedding_model=config.get("embedding_model"),
            embedding_dimensions=config.get("embedding_dimensions"),
            timeout=timeout,
        )

    if service_type == "gemini":
        api_key = config.get("api_key")
        if not api_key:
            logger.warning("⚠️ Gemini API key not configured; Gemini service disabled")
            return None
        return GeminiService(
            model=model,
            api_key=api_key,
            embedding_model=config.get("embedding_model"),
            embedding_dimensions=config.get("embedding_dimensions", DEFAULT_EMBEDDING_DIMENSIONS),
            timeout=timeout,
        )

    raise ValueError(f"Unsupported service type: {service_type}")

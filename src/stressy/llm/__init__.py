"""LLM service abstraction layer for Stressy.

This package provides a unified interface for multiple LLM providers:
- GeminiService: Google Gemini API
- OllamaService: Local LLM via Ollama

Every service can embed a single text and answer a composed prompt. Answers
come back as a tagged ``GenerationResult`` (success, blocked or error).

Usage:
    from stressy.llm import get_llm_service

    service = get_llm_service({"service": "gemini", "api_key": "...", "model": "gemini-2.5-flash"})
"""

from stressy.llm.base import (
    EmbeddingProvider,
    GenerationBlocked,
    GenerationError,
    GenerationParams,
    GenerationProvider,
    GenerationResult,
    GenerationSuccess,
    LLMService,
)
from stressy.llm.factory import get_llm_service
from stressy.llm.gemini import GeminiService
from stressy.llm.ollama import OllamaService

__all__ = [
    "EmbeddingProvider",
    "GenerationProvider",
    "GenerationParams",
    "GenerationResult",
    "GenerationSuccess",
    "GenerationBlocked",
    "GenerationError",
    "LLMService",
    "GeminiService",
    "OllamaService",
    "get_llm_service",
]

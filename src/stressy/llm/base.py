"""Base protocols and result types for LLM services."""

from dataclasses import dataclass, field
from typing import Protocol

from stressy.constants import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_SAFETY_THRESHOLDS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_K,
    DEFAULT_TOP_P,
)


@dataclass(frozen=True)
class GenerationParams:
    """Generation parameters passed through to the provider unmodified.

    Attributes:
        temperature: Sampling temperature
        top_p: Nucleus sampling threshold
        top_k: Top-k sampling cutoff
        max_output_tokens: Upper bound on generated tokens
        safety_thresholds: Harm category name -> block threshold name
    """

    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    top_k: int = DEFAULT_TOP_K
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    safety_thresholds: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SAFETY_THRESHOLDS)
    )


@dataclass(frozen=True)
class GenerationSuccess:
    """The provider returned answer text."""

    text: str


@dataclass(frozen=True)
class GenerationBlocked:
    """The provider refused to answer on content-safety grounds."""

    reason: str


@dataclass(frozen=True)
class GenerationError:
    """The provider call failed or returned an unusable body."""

    message: str


GenerationResult = GenerationSuccess | GenerationBlocked | GenerationError


class EmbeddingProvider(Protocol):
    """Anything that can turn one text into one embedding vector."""

    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            list[float]: The provider's embedding vector

        Raises:
            Exception: Any provider failure; callers decide how to degrade.
        """
        ...


class GenerationProvider(Protocol):
    """Anything that can answer a fully composed prompt."""

    async def generate(self, prompt: str, params: GenerationParams) -> GenerationResult:
        """Generate text for a prompt.

        Implementations never raise for provider-side failures; they return
        a ``GenerationBlocked`` or ``GenerationError`` instead.

        Args:
            prompt: The complete prompt text
            params: Generation parameters to pass through

        Returns:
            GenerationResult: Tagged success, blocked or error result.
        """
        ...


class LLMService(EmbeddingProvider, GenerationProvider, Protocol):
    """Protocol for a provider that offers both embeddings and generation."""

    model: str

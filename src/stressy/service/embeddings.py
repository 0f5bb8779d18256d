"""Embedding generation with a deterministic local fallback.

``Embedder`` asks the configured provider first. When there is no provider
(no credentials), or the provider errors, times out or returns something that
is not a numeric vector of the configured dimension, it degrades to
``fallback_embedding``: a token frequency vector that is reproducible but
carries no semantic meaning.
"""

import asyncio
import logging
import math
import numbers
from collections import Counter
from typing import Any, Protocol

import tiktoken

from stressy.constants import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    FALLBACK_TOKENIZER_ENCODING,
)
from stressy.llm.base import EmbeddingProvider

logger = logging.getLogger(__name__)


class Tokenizer(Protocol):
    """Maps text to an ordered sequence of non-negative token ids."""

    def encode(self, text: str) -> list[int]: ...


class TiktokenTokenizer:
    """Tokenizer backed by a tiktoken encoding, loaded on first use."""

    def __init__(self, encoding_name: str = FALLBACK_TOKENIZER_ENCODING) -> None:
        self.encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None

    def encode(self, text: str) -> list[int]:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return self._encoding.encode(text, disallowed_special=())


def fallback_embedding(
    text: str,
    tokenizer: Tokenizer,
    dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
) -> list[float]:
    """Build a token-frequency embedding for ``text``.

    Each distinct token writes to position ``token % dimensions``. Distinct
    tokens that land on the same position fold into each other through
    ``(previous + count) / total``, in first-occurrence order.

    Args:
        text: Text to embed
        tokenizer: Tokenizer producing integer token ids
        dimensions: Length of the returned vector

    Returns:
        list[float]: Vector of exactly ``dimensions`` floats; all zeros for
        text with no tokens.
    """
    vector = [0.0] * dimensions
    tokens = tokenizer.encode(text) if text else []
    if not tokens:
        return vector

    total = len(tokens)
    for token, count in Counter(tokens).items():
        position = token % dimensions
        vector[position] = (vector[position] + count) / total
    return vector


def is_valid_vector(value: Any) -> bool:
    """Whether a provider response is a non-empty sequence of finite real numbers."""
    if not isinstance(value, (list, tuple)) or not value:
        return False
    return all(
        isinstance(item, numbers.Real) and not isinstance(item, bool) and math.isfinite(item)
        for item in value
    )


class Embedder:
    """Turns text into embedding vectors, never failing outward.

    Attributes:
        provider: Embedding provider, or None to always use the fallback
        tokenizer: Tokenizer for the fallback path
        dimensions: Length D of every returned vector
        timeout: Seconds allowed for one provider call in ``aembed``
    """

    def __init__(
        self,
        provider: EmbeddingProvider | None,
        tokenizer: Tokenizer | None = None,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        self.provider = provider
        self.tokenizer = tokenizer or TiktokenTokenizer()
        self.dimensions = dimensions
        self.timeout = timeout
        if provider is None:
            logger.warning("⚠️ No embedding provider configured; using fallback embeddings")

    def fallback(self, text: str) -> list[float]:
        return fallback_embedding(text, self.tokenizer, self.dimensions)

    def _accept(self, value: Any, text: str) -> list[float]:
        if not is_valid_vector(value):
            logger.warning("⚠️ Malformed embedding response, using fallback")
            return self.fallback(text)
        if len(value) != self.dimensions:
            logger.warning(
                f"⚠️ Provider returned {len(value)} dimensions, expected {self.dimensions}; "
                "using fallback"
            )
            return self.fallback(text)
        return [float(item) for item in value]

    def embed(self, text: str) -> list[float]:
        """Embed one text synchronously.

        Args:
            text: Text to embed

        Returns:
            list[float]: Provider vector, or the fallback vector on any
            provider problem
        """
        if self.provider is None:
            return self.fallback(text)
        try:
            value = self.provider.embed(text)
        except Exception as e:
            logger.warning(f"⚠️ Error generating embeddings, using fallback: {e}")
            return self.fallback(text)
        return self._accept(value, text)

    async def aembed(self, text: str) -> list[float]:
        """Embed one text without blocking the event loop.

        The provider call runs in a worker thread and is abandoned after
        ``timeout`` seconds.

        Args:
            text: Text to embed

        Returns:
            list[float]: Provider vector, or the fallback vector on any
            provider problem or timeout
        """
        if self.provider is None:
            return self.fallback(text)
        try:
            async with asyncio.timeout(self.timeout):
                value = await asyncio.to_thread(self.provider.embed, text)
        except TimeoutError:
            logger.warning(f"⚠️ Embedding call timed out after {self.timeout}s, using fallback")
            return self.fallback(text)
        except Exception as e:
            logger.warning(f"⚠️ Error generating embeddings, using fallback: {e}")
            return self.fallback(text)
        return self._accept(value, text)

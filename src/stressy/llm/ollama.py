"""Ollama LLM service implementation."""

import asyncio
import logging

import ollama

from stressy.constants import EMBEDDING_DEFAULTS
from stressy.llm.base import (
    GenerationError,
    GenerationParams,
    GenerationResult,
    GenerationSuccess,
)

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama LLM service implementation.

    This service uses the Ollama API to embed text and generate answers with
    local models. Ollama has no content-safety filter, so safety thresholds
    in ``GenerationParams`` are ignored.
    """

    def __init__(
        self,
        host: str,
        model: str,
        embedding_model: str | None = None,
        embedding_dimensions: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The generation model name (e.g., "llama3")
            embedding_model: Embedding model name (default: nomic-embed-text)
            embedding_dimensions: Requested embedding size, or None for the
                model's native size
            timeout: HTTP timeout in seconds for every API call
        """
        self.host = host
        self.model = model
        self.embedding_model = embedding_model or EMBEDDING_DEFAULTS["ollama"]
        self.embedding_dimensions = embedding_dimensions
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")
        self.client = ollama.Client(host=host, timeout=timeout)

    async def generate(self, prompt: str, params: GenerationParams) -> GenerationResult:
        """Generate an answer using Ollama.

        Args:
            prompt: The complete prompt text
            params: Sampling parameters

        Returns:
            GenerationResult: Success with text, or error.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Prompt preview: {prompt[:100]}...")

        options = {
            "temperature": params.temperature,
            "top_p": params.top_p,
            "top_k": params.top_k,
            "num_predict": params.max_output_tokens,
        }
        try:
            response = await asyncio.to_thread(
                self.client.generate, model=self.model, prompt=prompt, options=options
            )
        except Exception as e:
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            return GenerationError(message=f"{type(e).__name__}: {e}")

        content = response["response"] or ""
        if not content:
            return GenerationError(message="Ollama returned an empty response")

        logger.info(f"✅ Response generated: {len(content)} characters")
        return GenerationSuccess(text=content)

    def embed(self, text: str) -> list[float]:
        """Generate an embedding for one text using Ollama.

        Args:
            text: Text to embed

        Returns:
            list[float]: The embedding vector
        """
        response = self.client.embed(
            model=self.embedding_model, input=text, dimensions=self.embedding_dimensions
        )
        return list(response["embeddings"][0])

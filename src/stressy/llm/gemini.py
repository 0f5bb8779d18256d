"""Google Gemini LLM service implementation."""

import logging
from typing import Any

from google import genai

from stressy.constants import DEFAULT_EMBEDDING_DIMENSIONS, EMBEDDING_DEFAULTS
from stressy.llm.base import (
    GenerationBlocked,
    GenerationError,
    GenerationParams,
    GenerationResult,
    GenerationSuccess,
)

logger = logging.getLogger(__name__)

BLOCKING_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"}


class GeminiService:
    """Google Gemini LLM service implementation.

    This service uses the Google Gemini API for both embeddings and answer
    generation. The API key is passed in explicitly; the service never reads
    it from the environment.
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        embedding_model: str | None = None,
        embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        timeout: float | None = None,
    ) -> None:
        """Initialize the Gemini service.

        Args:
            model: The generation model name (e.g., "gemini-2.5-flash")
            api_key: Gemini API key
            embedding_model: Embedding model name (default: gemini-embedding-001)
            embedding_dimensions: Requested output dimensionality for embeddings
            timeout: HTTP timeout in seconds for every API call
        """
        self.model = model
        self.embedding_model = embedding_model or EMBEDDING_DEFAULTS["gemini"]
        self.embedding_dimensions = embedding_dimensions
        logger.info(
            f"🤖 Initializing GeminiService: model={model}, "
            f"embedding_model={self.embedding_model}"
        )
        http_options = None
        if timeout is not None:
            # HttpOptions.timeout is expressed in milliseconds
            http_options = genai.types.HttpOptions(timeout=int(timeout * 1000))
        self.client = genai.Client(api_key=api_key, http_options=http_options)

    def _build_config(self, params: GenerationParams) -> genai.types.GenerateContentConfig:
        """Convert generation parameters to a Gemini request config.

        Args:
            params: Generation parameters

        Returns:
            GenerateContentConfig carrying sampling and safety settings
        """
        safety_settings = [
            genai.types.SafetySetting(category=category, threshold=threshold)
            for category, threshold in params.safety_thresholds.items()
        ]
        return genai.types.GenerateContentConfig(
            temperature=params.temperature,
            top_p=params.top_p,
            top_k=params.top_k,
            max_output_tokens=params.max_output_tokens,
            safety_settings=safety_settings,
        )

    async def generate(self, prompt: str, params: GenerationParams) -> GenerationResult:
        """Generate an answer using Gemini.

        Args:
            prompt: The complete prompt text
            params: Sampling and safety parameters

        Returns:
            GenerationResult: Success with text, blocked, or error.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Prompt preview: {prompt[:100]}...")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self._build_config(params),
            )
        except Exception as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            return GenerationError(message=f"{type(e).__name__}: {e}")

        result = to_generation_result(response)
        if isinstance(result, GenerationSuccess):
            logger.info(f"✅ Response generated: {len(result.text)} characters")
        else:
            logger.warning(f"⚠️ Gemini returned no answer: {result}")
        return result

    def embed(self, text: str) -> list[float]:
        """Generate an embedding for one text using Gemini.

        Args:
            text: Text to embed

        Returns:
            list[float]: The embedding vector

        Raises:
            ValueError: If the response carries no embedding values
        """
        response = self.client.models.embed_content(
            model=self.embedding_model,
            contents=[text],
            config=genai.types.EmbedContentConfig(
                output_dimensionality=self.embedding_dimensions
            ),
        )
        if not response.embeddings or response.embeddings[0].values is None:
            raise ValueError("Gemini embedding response contained no values")
        values = list(response.embeddings[0].values)
        logger.debug(f"Generated embedding with {self.embedding_model}: {len(values)} dims")
        return values


def _enum_name(value: Any) -> str:
    """Name of an SDK enum value, or its string form."""
    return getattr(value, "name", None) or str(value)


def to_generation_result(response: Any) -> GenerationResult:
    """Classify a Gemini ``generate_content`` response.

    Args:
        response: The SDK response object

    Returns:
        GenerationResult: Success when the first candidate has text, blocked
        when the prompt or candidate was stopped by a safety filter, error
        otherwise.
    """
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        return GenerationBlocked(reason=_enum_name(feedback.block_reason))

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return GenerationError(message="Response contained no candidates")

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    text = "".join(part.text for part in parts if getattr(part, "text", None))
    if text:
        return GenerationSuccess(text=text)

    finish_reason = getattr(candidate, "finish_reason", None)
    if finish_reason is not None and _enum_name(finish_reason) in BLOCKING_FINISH_REASONS:
        return GenerationBlocked(reason=_enum_name(finish_reason))

    return GenerationError(message="First candidate contained no text")

"""Runtime settings and logging setup for Stressy.

Settings are read from the environment (and a ``.env`` file) once, at the
entrypoint, and then passed explicitly to every component that needs them.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from stressy.constants import (
    DEFAULT_EMBEDDING_CONCURRENCY,
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_LLM_SERVICE,
    DEFAULT_MAX_CHUNK_LENGTH,
    DEFAULT_OLLAMA_HOST,
    DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    DEFAULT_RAVENDB_DATABASE,
    DEFAULT_RAVENDB_URL,
    EMBEDDING_DEFAULTS,
    GENERATION_DEFAULTS,
    MAX_UPLOAD_SIZE_BYTES,
    get_embedding_model,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for an entrypoint.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL env var, then INFO.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )


@dataclass
class StressySettings:
    """Configuration container for building Stressy services.

    Attributes:
        llm_service: Provider name, "gemini" or "ollama"
        api_key: Gemini API key; None disables the Gemini provider
        llm_model: Generation model name
        embedding_model: Embedding model name
        embedding_dimensions: Dimension D of every stored embedding
        ollama_host: Ollama server URL
        max_chunk_length: Maximum characters per chunk
        embedding_concurrency: Parallel embedding calls per document
        provider_timeout: Seconds allowed for a single provider call
        ravendb_url: RavenDB server URL
        ravendb_database: RavenDB database name
        max_upload_bytes: Largest accepted upload
    """

    llm_service: str = DEFAULT_LLM_SERVICE
    api_key: str | None = None
    llm_model: str = GENERATION_DEFAULTS[DEFAULT_LLM_SERVICE]
    embedding_model: str = EMBEDDING_DEFAULTS[DEFAULT_LLM_SERVICE]
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    ollama_host: str = DEFAULT_OLLAMA_HOST
    max_chunk_length: int = DEFAULT_MAX_CHUNK_LENGTH
    embedding_concurrency: int = DEFAULT_EMBEDDING_CONCURRENCY
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    ravendb_url: str = DEFAULT_RAVENDB_URL
    ravendb_database: str = DEFAULT_RAVENDB_DATABASE
    max_upload_bytes: int = MAX_UPLOAD_SIZE_BYTES

    @classmethod
    def from_env(cls) -> "StressySettings":
        """Build settings from environment variables.

        Returns:
            StressySettings populated from the environment, with defaults
            for anything unset.
        """
        load_dotenv()

        service = os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE)
        return cls(
            llm_service=service,
            api_key=os.getenv("GEMINI_API_KEY") or None,
            llm_model=os.getenv("LLM_MODEL", GENERATION_DEFAULTS.get(service, "")),
            embedding_model=get_embedding_model(service),
            embedding_dimensions=int(
                os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS))
            ),
            ollama_host=os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST),
            max_chunk_length=int(os.getenv("MAX_CHUNK_LENGTH", str(DEFAULT_MAX_CHUNK_LENGTH))),
            embedding_concurrency=int(
                os.getenv("EMBEDDING_CONCURRENCY", str(DEFAULT_EMBEDDING_CONCURRENCY))
            ),
            provider_timeout=float(
                os.getenv("PROVIDER_TIMEOUT_SECONDS", str(DEFAULT_PROVIDER_TIMEOUT_SECONDS))
            ),
            ravendb_url=os.getenv("RAVENDB_URL", DEFAULT_RAVENDB_URL),
            ravendb_database=os.getenv("RAVENDB_DATABASE", DEFAULT_RAVENDB_DATABASE),
            max_upload_bytes=int(os.getenv("UPLOAD_MAX_BYTES", str(MAX_UPLOAD_SIZE_BYTES))),
        )

    def llm_config(self) -> dict:
        """Config dictionary understood by ``stressy.llm.get_llm_service``."""
        return {
            "service": self.llm_service,
            "model": self.llm_model,
            "api_key": self.api_key,
            "host": self.ollama_host,
            "embedding_model": self.embedding_model,
            "embedding_dimensions": self.embedding_dimensions,
            "timeout": self.provider_timeout,
        }

"""Application-wide constants and defaults for Stressy.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os

# =============================================================================
# File Upload Limits
# =============================================================================
MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024  # 50MB

# =============================================================================
# Chunking & Embedding
# =============================================================================
DEFAULT_MAX_CHUNK_LENGTH = 1000  # Characters per chunk
DEFAULT_EMBEDDING_DIMENSIONS = 1536
DEFAULT_EMBEDDING_CONCURRENCY = 4  # Parallel provider calls per document
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 30.0
FALLBACK_TOKENIZER_ENCODING = "gpt2"  # GPT-3 BPE vocabulary

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 10_000  # Characters of raw text kept on a paper record
SNIPPET_LENGTH = 200  # Characters shown in source citations
SNIPPET_ELLIPSIS = "..."
WHITEBOARD_SNIPPET = "Visual content from your whiteboard"
NOTES_TITLE = "Your Notes"
WHITEBOARD_TITLE = "Your Whiteboard"
DEFAULT_INSIGHT_TITLE = "Research Insight"

# =============================================================================
# Generation Settings
# =============================================================================
DEFAULT_TEMPERATURE = 0.2
DEFAULT_TOP_P = 0.8
DEFAULT_TOP_K = 40
DEFAULT_MAX_OUTPUT_TOKENS = 4096
DEFAULT_SAFETY_THRESHOLDS = {
    "HARM_CATEGORY_HARASSMENT": "BLOCK_MEDIUM_AND_ABOVE",
    "HARM_CATEGORY_HATE_SPEECH": "BLOCK_MEDIUM_AND_ABOVE",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT": "BLOCK_MEDIUM_AND_ABOVE",
    "HARM_CATEGORY_DANGEROUS_CONTENT": "BLOCK_MEDIUM_AND_ABOVE",
}
GENERATION_APOLOGY = "Sorry, I couldn't generate a response at this time."

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_LLM_SERVICE = "gemini"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_RAVENDB_URL = "http://localhost:8080"
DEFAULT_RAVENDB_DATABASE = "stressy"

# =============================================================================
# RavenDB Collections
# =============================================================================
PAPERS_COLLECTION = "Papers"
NOTES_COLLECTION = "Notes"
WHITEBOARDS_COLLECTION = "Whiteboards"

# =============================================================================
# Model Defaults
# =============================================================================
EMBEDDING_DEFAULTS = {
    "ollama": "nomic-embed-text",
    "gemini": "gemini-embedding-001",
}

GENERATION_DEFAULTS = {
    "ollama": "llama3",
    "gemini": "gemini-2.5-flash",
}


def get_embedding_model(service: str | None = None) -> str:
    """Get the default embedding model for a given LLM service.

    Checks the EMBEDDING_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The LLM service name ("ollama" or "gemini").
                If None, uses LLM_SERVICE env var or defaults to "gemini".

    Returns:
        str: The embedding model name to use.
    """
    env_model = os.getenv("EMBEDDING_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE)

    return EMBEDDING_DEFAULTS.get(service, EMBEDDING_DEFAULTS[DEFAULT_LLM_SERVICE])

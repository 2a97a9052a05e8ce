"""
Embedding model provider.

Routes through OpenRouter when PROVIDER=openrouter, otherwise direct OpenAI.
"""

from typing import Any
from langchain_openai import OpenAIEmbeddings

from infrastructure.config import (
    EMBEDDING_BATCH_SIZE,
    EMBEDDING_DIM,
    EMBEDDING_MODEL,
    OPENROUTER_BASE_URL,
    PROVIDER,
    get_api_key,
)


def get_default_embeddings(
    batch_size: int = EMBEDDING_BATCH_SIZE,
    **kwargs: Any
) -> OpenAIEmbeddings:
    """
    Get an OpenAIEmbeddings instance configured for the active provider.

    The output size is pinned to ``EMBEDDING_DIM`` so it always matches
    the Qdrant collection created by the ingestion pipeline.

    Args:
        batch_size: Number of texts to embed per API call.
        **kwargs: Additional arguments forwarded to OpenAIEmbeddings.
    """
    llm_kwargs: dict[str, Any] = dict(
        model=EMBEDDING_MODEL,
        dimensions=EMBEDDING_DIM,
        chunk_size=batch_size,
        **kwargs,
    )

    if PROVIDER == "openrouter":
        llm_kwargs["openai_api_base"] = OPENROUTER_BASE_URL
        llm_kwargs["openai_api_key"] = get_api_key("openrouter")

    return OpenAIEmbeddings(**llm_kwargs)

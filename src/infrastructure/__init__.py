"""
Infrastructure layer - pure plumbing (vector store, LLM, config, tracing).

No routing logic here. Just connections, clients, and configuration loading.
"""

from .llm import get_chat_llm, get_router_llm, get_evaluator_llm, get_default_embeddings
from .observability import observe, flush, get_langfuse

__all__ = [
    "get_chat_llm",
    "get_router_llm",
    "get_evaluator_llm",
    "get_default_embeddings",
    "observe",
    "flush",
    "get_langfuse",
]

"""
LLM provider wrappers.

  get_router_llm()         → classifier model
  get_chat_llm()           → department agent model
  get_evaluator_llm()      → answer grader model
  get_default_embeddings() → document / query embeddings
"""

from .llm_provider import get_chat_llm, get_router_llm, get_evaluator_llm
from .embeddings import get_default_embeddings

__all__ = [
    "get_chat_llm",
    "get_router_llm",
    "get_evaluator_llm",
    "get_default_embeddings",
]

"""
Chat LLM providers.

Three roles, one factory:
  - Router:    orders the departments to engage (JSON output)
  - Chat:      department agents answering from retrieved context
  - Evaluator: grades finished answers on a 1-10 scale
"""

from typing import Optional, Any
from langchain_openai import ChatOpenAI

from infrastructure.config import (
    ROUTER_MODEL,
    CHAT_MODEL,
    EVALUATOR_MODEL,
    LLM_MAX_TOKENS,
    OPENROUTER_BASE_URL,
    PROVIDER,
    get_api_key,
)


def _build_llm(
    model: str,
    provider: str = PROVIDER,
    temperature: float = 0,
    max_tokens: Optional[int] = LLM_MAX_TOKENS,
    **kwargs: Any,
) -> ChatOpenAI:
    """Internal factory - builds a ChatOpenAI for any provider."""
    llm_kwargs: dict[str, Any] = dict(
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        **kwargs,
    )

    if provider == "openrouter":
        llm_kwargs["openai_api_base"] = OPENROUTER_BASE_URL
        llm_kwargs["openai_api_key"] = get_api_key("openrouter")
    elif provider == "openai":
        llm_kwargs["openai_api_key"] = get_api_key("openai")

    return ChatOpenAI(**llm_kwargs)


def get_router_llm(temperature: float = 0, **kwargs: Any) -> ChatOpenAI:
    """LLM for intent classification (department ordering)."""
    return _build_llm(ROUTER_MODEL, temperature=temperature, **kwargs)


def get_chat_llm(temperature: float = 0, **kwargs: Any) -> ChatOpenAI:
    """LLM shared by the department agents."""
    return _build_llm(CHAT_MODEL, temperature=temperature, **kwargs)


def get_evaluator_llm(temperature: float = 0, **kwargs: Any) -> ChatOpenAI:
    """LLM for answer-quality grading."""
    return _build_llm(EVALUATOR_MODEL, temperature=temperature, **kwargs)

"""
Agent prompt templates - classifier, domain agent, evaluator.

Prompts are fetched from Langfuse Prompt Management at runtime.
Local fallbacks are defined in 'agent_prompts.py'.
"""

from .agent_prompts import (
    LANGFUSE_PROMPT_NAMES,
    NO_MATCHING_DOCUMENTS,
    NO_PRIOR_RESPONSES,
    build_classifier_prompt,
    build_domain_agent_prompt,
    build_evaluator_prompt,
)

__all__ = [
    "LANGFUSE_PROMPT_NAMES",
    "NO_MATCHING_DOCUMENTS",
    "NO_PRIOR_RESPONSES",
    "build_classifier_prompt",
    "build_domain_agent_prompt",
    "build_evaluator_prompt",
]

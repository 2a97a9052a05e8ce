"""
Prompt templates for the department router.

Prompts are fetched from **Langfuse Prompt Management** at runtime.
If a prompt hasn't been created in Langfuse yet, the local fallback
(defined below) is used instead - so the system works out-of-the-box.

To manage prompts via Langfuse Cloud:
  1. Open Langfuse → Prompts → + New Prompt
  2. Create prompts with the names listed in the LANGFUSE_PROMPT_NAMES dict
  3. Use {{variable}} (double-curly Mustache syntax) for template variables
  4. Label a version "production" to make it active

Three prompt roles:
  1. CLASSIFIER   - orders the departments a question needs
  2. DOMAIN AGENT - answers from department context, may request a handoff
  3. EVALUATOR    - grades an answer on a 1-10 helpfulness scale
"""

from infrastructure.observability import fetch_prompt


LANGFUSE_PROMPT_NAMES = {
    "classifier_system": "router-classifier-system",
    "classifier_user":   "router-classifier-user",
    "agent_system":      "router-domain-agent-system",
    "agent_user":        "router-domain-agent-user",
    "evaluator_system":  "router-evaluator-system",
    "evaluator_user":    "router-evaluator-user",
}

NO_PRIOR_RESPONSES = "No prior agent responses."
NO_MATCHING_DOCUMENTS = "No matching documents."


# 1. CLASSIFIER (fallback)


_CLASSIFIER_SYSTEM_FALLBACK = """\
You are the routing orchestrator for the employee helpdesk. Identify whether \
a question spans multiple departments (hr, tech, finance, unknown) and order \
the intents in the sequence they should be engaged. Always mention unknown if \
nothing fits."""

_CLASSIFIER_USER_FALLBACK = """\
Question: {question}

Return JSON that follows: {format_instructions}"""


# 2. DOMAIN AGENT (fallback)


_AGENT_SYSTEM_FALLBACK = """\
You are {agent_name}. Follow this style guide: {style_guide}. Ground every reply in \
the provided context, cite KB identifiers when possible, and say you do not \
know if the answer is missing. If another department must help, clearly state \
that in the follow_up section of the JSON response described by the format \
instructions."""

_AGENT_USER_FALLBACK = """\
Conversation so far:
{history}

Question: {question}

Context:
{context}

Adhere to: {format_instructions}"""


# 3. EVALUATOR (fallback)


_EVALUATOR_SYSTEM_FALLBACK = """\
You are the QA evaluator. Score helpfulness on a 1-10 scale considering \
relevance, accuracy, and completeness."""

_EVALUATOR_USER_FALLBACK = """\
Question: {question}
Answer: {answer}

Provide JSON following: {format_instructions}"""


# Prompt builders - fetch from Langfuse, fall back to local


def build_classifier_prompt(
    question: str,
    format_instructions: str,
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for the classifier call."""
    system_prompt = fetch_prompt(
        LANGFUSE_PROMPT_NAMES["classifier_system"],
        fallback=_CLASSIFIER_SYSTEM_FALLBACK,
    )
    user_prompt = fetch_prompt(
        LANGFUSE_PROMPT_NAMES["classifier_user"],
        fallback=_CLASSIFIER_USER_FALLBACK,
        question=question,
        format_instructions=format_instructions,
    )
    return system_prompt, user_prompt


def build_domain_agent_prompt(
    name: str,
    style_guide: str,
    question: str,
    history: str,
    context: str,
    format_instructions: str,
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for a department agent call."""
    system_prompt = fetch_prompt(
        LANGFUSE_PROMPT_NAMES["agent_system"],
        fallback=_AGENT_SYSTEM_FALLBACK,
        agent_name=name,
        style_guide=style_guide,
    )
    user_prompt = fetch_prompt(
        LANGFUSE_PROMPT_NAMES["agent_user"],
        fallback=_AGENT_USER_FALLBACK,
        history=history or NO_PRIOR_RESPONSES,
        question=question,
        context=context or NO_MATCHING_DOCUMENTS,
        format_instructions=format_instructions,
    )
    return system_prompt, user_prompt


def build_evaluator_prompt(
    question: str,
    answer: str,
    format_instructions: str,
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for the evaluator call."""
    system_prompt = fetch_prompt(
        LANGFUSE_PROMPT_NAMES["evaluator_system"],
        fallback=_EVALUATOR_SYSTEM_FALLBACK,
    )
    user_prompt = fetch_prompt(
        LANGFUSE_PROMPT_NAMES["evaluator_user"],
        fallback=_EVALUATOR_USER_FALLBACK,
        question=question,
        answer=answer,
        format_instructions=format_instructions,
    )
    return system_prompt, user_prompt

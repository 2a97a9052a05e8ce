"""
Department agent profiles and factories.

One agent per known department; ``unknown`` never gets one.
"""

from typing import Any, Dict, Mapping

from agents.domain_agent import DomainAgentOptions, DomainRagAgent, RetrieverLike
from agents.errors import ConfigurationError
from agents.schemas import DepartmentIntent, KNOWN_DEPARTMENTS

DEPARTMENT_PROFILES: Dict[DepartmentIntent, DomainAgentOptions] = {
    DepartmentIntent.HR: DomainAgentOptions(
        intent=DepartmentIntent.HR,
        name="HR Knowledge Specialist",
        style_guide=(
            "Prioritize empathy, cite policy IDs, mention leave types, onboarding "
            "steps, and benefits clarifications. Provide action items and "
            "escalation options for HRBP involvement."
        ),
    ),
    DepartmentIntent.TECH: DomainAgentOptions(
        intent=DepartmentIntent.TECH,
        name="IT Support Strategist",
        style_guide=(
            "Diagnose root causes, reference KB tickets, surface remediation steps "
            "with command examples, and list monitoring signals before resolving "
            "incidents."
        ),
    ),
    DepartmentIntent.FINANCE: DomainAgentOptions(
        intent=DepartmentIntent.FINANCE,
        name="Finance Operations Advisor",
        style_guide=(
            "Detail approval matrices, cite invoice and audit codes, include "
            "timelines, and flag SOX or budget compliance considerations explicitly."
        ),
    ),
}


def create_hr_agent(llm: Any, retriever: RetrieverLike) -> DomainRagAgent:
    return DomainRagAgent(llm, retriever, DEPARTMENT_PROFILES[DepartmentIntent.HR])


def create_tech_agent(llm: Any, retriever: RetrieverLike) -> DomainRagAgent:
    return DomainRagAgent(llm, retriever, DEPARTMENT_PROFILES[DepartmentIntent.TECH])


def create_finance_agent(llm: Any, retriever: RetrieverLike) -> DomainRagAgent:
    return DomainRagAgent(llm, retriever, DEPARTMENT_PROFILES[DepartmentIntent.FINANCE])


_FACTORIES = {
    DepartmentIntent.HR: create_hr_agent,
    DepartmentIntent.TECH: create_tech_agent,
    DepartmentIntent.FINANCE: create_finance_agent,
}


def build_agents(
    llm: Any,
    retrievers: Mapping[DepartmentIntent, RetrieverLike],
) -> Dict[DepartmentIntent, DomainRagAgent]:
    """
    Build the complete department → agent map.

    Raises:
        ConfigurationError: If a known department has no retriever.
    """
    missing = [d.value for d in KNOWN_DEPARTMENTS if d not in retrievers]
    if missing:
        raise ConfigurationError(f"No retriever configured for: {', '.join(missing)}")
    return {
        department: _FACTORIES[department](llm, retrievers[department])
        for department in KNOWN_DEPARTMENTS
    }

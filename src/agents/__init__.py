"""
Department routing engine — the core agent module.

Public API:
    build_router()       → MultiAgentRouter (fully wired, ready to route)
    MultiAgentRouter     → classification + FIFO dispatch + handoffs
    OrchestratorAgent    → intent classifier
    DomainRagAgent       → retrieval-grounded department agent
    RouteResult          → terminal result of a route call
"""

from .domain_agent import DomainAgentOptions, DomainRagAgent
from .errors import (
    AgentSystemError,
    ClassificationError,
    ConfigurationError,
    EvaluationError,
    GenerationError,
)
from .orchestrator import OrchestratorAgent, normalize_intent, resolve_ordered_intents
from .router import MultiAgentRouter, build_directive, build_router
from .schemas import (
    AgentResult,
    AgentTurn,
    ClassificationResult,
    DepartmentIntent,
    DispatchDecision,
    Handoff,
    KNOWN_DEPARTMENTS,
    QueueItem,
    RouteResult,
)

__all__ = [
    "AgentResult",
    "AgentSystemError",
    "AgentTurn",
    "ClassificationError",
    "ClassificationResult",
    "ConfigurationError",
    "DepartmentIntent",
    "DispatchDecision",
    "DomainAgentOptions",
    "DomainRagAgent",
    "EvaluationError",
    "GenerationError",
    "Handoff",
    "KNOWN_DEPARTMENTS",
    "MultiAgentRouter",
    "OrchestratorAgent",
    "QueueItem",
    "RouteResult",
    "build_directive",
    "build_router",
    "normalize_intent",
    "resolve_ordered_intents",
]

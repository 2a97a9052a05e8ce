"""
Routing data model.

Everything here is immutable once built: the router creates queue
items, turns and the final ``RouteResult``; nothing downstream mutates
them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class DepartmentIntent(str, Enum):
    """Department that owns (part of) a request."""

    HR = "hr"
    TECH = "tech"
    FINANCE = "finance"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


KNOWN_DEPARTMENTS: Tuple[DepartmentIntent, ...] = (
    DepartmentIntent.HR,
    DepartmentIntent.TECH,
    DepartmentIntent.FINANCE,
)


class DispatchDecision(str, Enum):
    """What the router did with one dequeued item."""

    DISPATCH = "dispatch"
    SKIP_UNKNOWN = "skip_unknown"
    SKIP_DUPLICATE = "skip_duplicate"
    SKIP_NO_AGENT = "skip_no_agent"


@dataclass(frozen=True)
class ClassificationResult:
    """
    Classifier output for one question.

    Attributes:
        ordered_intents: Departments in engagement order (deduplicated, 1-3).
        confidence: Classifier's self-assessed confidence [0-1].
        reasoning: Short explanation of the ordering.
    """

    ordered_intents: Tuple[DepartmentIntent, ...]
    confidence: float
    reasoning: str


@dataclass(frozen=True)
class Handoff:
    """Request from an agent to also engage another department."""

    intent: DepartmentIntent
    reason: str
    context: Optional[str] = None

    @property
    def note(self) -> str:
        """Directive passed to the next agent (context wins over reason)."""
        return self.context if self.context else self.reason


@dataclass(frozen=True)
class AgentResult:
    """
    Answer produced by a department agent.

    Attributes:
        text: Answer body.
        sources: Citation identifiers, in the order the agent gave them.
        handoff: Optional request to engage another department.
    """

    text: str
    sources: Tuple[str, ...] = ()
    handoff: Optional[Handoff] = None


@dataclass(frozen=True)
class QueueItem:
    """Pending agent invocation; ``note`` comes from a prior handoff."""

    intent: DepartmentIntent
    note: Optional[str] = None


@dataclass(frozen=True)
class AgentTurn:
    """One completed agent invocation."""

    intent_attempted: DepartmentIntent
    result: AgentResult


@dataclass(frozen=True)
class RouteResult:
    """
    Everything a ``route`` call produced.

    Attributes:
        classification: The classifier output that seeded the queue.
        turns: Completed turns in dispatch order.
        unresolved_intents: Departments still queued when the turn
            budget ran out.
        decisions: Every dequeued item with the decision taken for it.
    """

    classification: ClassificationResult
    turns: Tuple[AgentTurn, ...] = ()
    unresolved_intents: Tuple[DepartmentIntent, ...] = ()
    decisions: Tuple[Tuple[QueueItem, DispatchDecision], ...] = field(default=())

    @property
    def intents_attempted(self) -> Tuple[DepartmentIntent, ...]:
        return tuple(turn.intent_attempted for turn in self.turns)

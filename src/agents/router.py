"""
Multi-agent router — classification, FIFO dispatch, handoffs.

Flow for one ``route(question)`` call:
  1. Classify the question into ordered departments.
  2. Seed a FIFO queue with those departments (no notes).
  3. Pop items; skip ``unknown``, already-visited and unbound intents
     without spending a turn.
  4. Invoke the department agent with the transcript so far and, for
     handoff items, a follow-up directive.
  5. Append any handoff to the tail of the queue.
  6. Stop when the queue is empty or the turn budget is spent.

All routing state (queue, visited set, transcript) lives inside the
call, so one router instance can serve concurrent callers.
"""

from loguru import logger
from collections import deque
from types import MappingProxyType
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from langchain_core.runnables import RunnableConfig

from agents.errors import ConfigurationError
from agents.orchestrator import resolve_ordered_intents
from agents.prompts.agent_prompts import NO_PRIOR_RESPONSES
from agents.schemas import (
    AgentTurn,
    DepartmentIntent,
    DispatchDecision,
    QueueItem,
    RouteResult,
)
from infrastructure.config import MAX_AGENT_TURNS
from infrastructure.observability import (
    observe,
    update_current_observation,
    update_current_trace,
)


def build_directive(question: str, note: Optional[str] = None) -> str:
    """Original question, plus the handoff note as a follow-up directive."""
    if note:
        return f"{question}\n\nFollow-up directive: {note}"
    return question


class MultiAgentRouter:
    """
    Routes a question through the department agents.

    Dependencies (injected via '__init__'):
        classifier  - anything with ``classify(question, config=...)``
        agents      - department → agent map; each agent exposes
                      ``invoke(task, history, config=...)`` and ``name``
        turn_budget - hard cap on completed agent turns per call
    """

    def __init__(
        self,
        classifier: Any,
        agents: Mapping[Any, Any],
        *,
        turn_budget: int = MAX_AGENT_TURNS,
    ) -> None:
        if turn_budget < 1:
            raise ConfigurationError(f"turn_budget must be >= 1 (got {turn_budget})")
        for intent, agent in agents.items():
            if intent == DepartmentIntent.UNKNOWN:
                raise ConfigurationError("The 'unknown' intent cannot be bound to an agent.")
            if not callable(getattr(agent, "invoke", None)):
                raise ConfigurationError(f"Agent for '{intent}' has no invoke() method.")

        self.classifier = classifier
        self.agents = MappingProxyType(dict(agents))
        self.turn_budget = turn_budget

    # public entry point

    @observe(name="route")
    def route(
        self,
        question: str,
        config: Optional[RunnableConfig] = None,
    ) -> RouteResult:
        """
        Route *question* and return the full transcript.

        Classifier and agent errors propagate unchanged; there is no
        partial result.
        """
        classification = self.classifier.classify(question, config=config)

        queue: Deque[QueueItem] = deque(
            QueueItem(intent=intent)
            for intent in resolve_ordered_intents(classification.ordered_intents)
        )
        visited: Set[Any] = set()
        turns: List[AgentTurn] = []
        decisions: List[Tuple[QueueItem, DispatchDecision]] = []

        while queue and len(turns) < self.turn_budget:
            item = queue.popleft()
            decision = self.decide(item, visited)
            decisions.append((item, decision))

            if decision is not DispatchDecision.DISPATCH:
                log = logger.warning if decision is DispatchDecision.SKIP_NO_AGENT else logger.debug
                log("Skipping '{}': {}", item.intent, decision.value)
                continue

            agent = self.agents[item.intent]
            logger.info(
                "Turn {}/{}: dispatching '{}'{}",
                len(turns) + 1,
                self.turn_budget,
                item.intent,
                " (handoff)" if item.note else "",
            )
            result = agent.invoke(
                build_directive(question, item.note),
                self.build_history(turns),
                config=config,
            )
            turns.append(AgentTurn(intent_attempted=item.intent, result=result))
            visited.add(item.intent)

            handoff = result.handoff
            if (
                handoff is not None
                and handoff.intent != DepartmentIntent.UNKNOWN
                and handoff.intent not in visited
            ):
                logger.info(
                    "Handoff {} → {} ({})", item.intent, handoff.intent, handoff.reason
                )
                queue.append(QueueItem(intent=handoff.intent, note=handoff.note))

        unresolved = self._unresolved(queue, visited)
        if unresolved:
            logger.warning(
                "Turn budget ({}) reached; unresolved: {}",
                self.turn_budget,
                ", ".join(str(i) for i in unresolved),
            )

        update_current_trace(
            metadata={
                "intents": [str(i) for i in classification.ordered_intents],
                "confidence": classification.confidence,
                "turns": [str(t.intent_attempted) for t in turns],
                "unresolved": [str(i) for i in unresolved],
            },
        )
        update_current_observation(output=f"{len(turns)} turn(s)")

        return RouteResult(
            classification=classification,
            turns=tuple(turns),
            unresolved_intents=tuple(unresolved),
            decisions=tuple(decisions),
        )

    # dispatch decisions

    def decide(self, item: QueueItem, visited: Set[Any]) -> DispatchDecision:
        """Classify a dequeued item: dispatch it, or why it is skipped."""
        if item.intent == DepartmentIntent.UNKNOWN:
            return DispatchDecision.SKIP_UNKNOWN
        if item.intent in visited:
            return DispatchDecision.SKIP_DUPLICATE
        if item.intent not in self.agents:
            return DispatchDecision.SKIP_NO_AGENT
        return DispatchDecision.DISPATCH

    # helpers

    def agent_label(self, intent: Any) -> str:
        agent = self.agents.get(intent)
        return getattr(agent, "name", None) or str(intent)

    def build_history(self, turns: Iterable[AgentTurn]) -> str:
        """Prior answers as ``"<agent name>:\\n<text>"`` blocks."""
        blocks = [
            f"{self.agent_label(turn.intent_attempted)}:\n{turn.result.text}"
            for turn in turns
        ]
        return "\n\n".join(blocks) or NO_PRIOR_RESPONSES

    @staticmethod
    def _unresolved(queue: Iterable[QueueItem], visited: Set[Any]) -> List[Any]:
        """Intents left queued and never visited, in queue order."""
        return [item.intent for item in queue if item.intent not in visited]


# Factory: build a fully-wired router from config


def build_router(seed: Optional[bool] = None) -> MultiAgentRouter:
    """
    Convenience factory that constructs and wires all components.

    Reads config / env for API keys and the Qdrant location (``.env`` is
    loaded when ``infrastructure.config`` is first imported).

    Args:
        seed: Re-seed department collections; defaults to the
              ``vector_store.seed_on_startup`` setting.

    Returns:
        A ready-to-use ``MultiAgentRouter``.
    """
    from infrastructure import config
    from infrastructure.observability import get_langfuse

    config.validate()
    get_langfuse()

    from infrastructure.llm import get_chat_llm, get_router_llm, get_default_embeddings
    from services.chat_service.retriever import QdrantRetriever
    from services.ingest_service.pipeline import seed_all_departments
    from agents.departments import build_agents
    from agents.orchestrator import OrchestratorAgent

    llm_chat = get_chat_llm(temperature=config.LLM_TEMPERATURE)
    llm_router = get_router_llm(temperature=config.LLM_TEMPERATURE)
    embedder = get_default_embeddings()

    logger.info("LLM models loaded:")
    logger.info("   Agents     : {}", getattr(llm_chat, "model_name", "?"))
    logger.info("   Classifier : {}", getattr(llm_router, "model_name", "?"))

    collections = seed_all_departments(
        embedder=embedder,
        seed=config.SHOULD_SEED_VECTORS if seed is None else seed,
    )
    retrievers: Dict[DepartmentIntent, QdrantRetriever] = {
        DepartmentIntent(intent): QdrantRetriever(
            embedder=embedder,
            collection_name=collection,
            top_k=config.TOP_K_RESULTS,
            score_threshold=config.SIMILARITY_THRESHOLD,
        )
        for intent, collection in collections.items()
    }

    agents = build_agents(llm_chat, retrievers)
    for intent, agent in agents.items():
        logger.info("✓ {} agent loaded ({})", intent, agent.name)

    return MultiAgentRouter(
        OrchestratorAgent(llm_router),
        agents,
        turn_budget=config.MAX_AGENT_TURNS,
    )

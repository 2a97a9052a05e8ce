"""
Department RAG agent.

Each agent answers from its own department's document collection:

  1. Retrieve evidence for the task (department retriever).
  2. Format the evidence as labelled context blocks.
  3. Prompt the chat LLM with history + task + context.
  4. Parse the JSON reply (answer, citations, optional follow_up).

A ``follow_up`` naming another department becomes a ``Handoff`` the
router may act on; ``unknown`` as a follow-up target means no handoff.
"""

from loguru import logger
from dataclasses import dataclass
from typing import Any, List, Literal, Optional, Protocol, Sequence

from langchain_core.documents import Document
from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel, Field

from agents.errors import GenerationError
from agents.orchestrator import normalize_intent
from agents.parsing import extract_text, model_name
from agents.prompts.agent_prompts import (
    NO_MATCHING_DOCUMENTS,
    NO_PRIOR_RESPONSES,
    build_domain_agent_prompt,
)
from agents.schemas import AgentResult, DepartmentIntent, Handoff
from infrastructure.observability import observe, update_current_observation


class RetrieverLike(Protocol):
    def invoke(self, input: str, config: Optional[RunnableConfig] = None) -> List[Document]:
        ...


class FollowUp(BaseModel):
    intent: Literal["hr", "tech", "finance", "unknown"]
    reason: str
    context_package: Optional[str] = None


class AgentOutput(BaseModel):
    """Raw JSON contract for department agents."""

    answer: str
    citations: List[str] = Field(default_factory=list)
    follow_up: Optional[FollowUp] = None


@dataclass(frozen=True)
class DomainAgentOptions:
    intent: DepartmentIntent
    name: str
    style_guide: str


def source_label(doc: Document, idx: int) -> str:
    """Citation id for a retrieved passage: its ``source`` or ``chunk-<idx>``."""
    source = (doc.metadata or {}).get("source")
    return source if isinstance(source, str) else f"chunk-{idx}"


def format_context(docs: Sequence[Document]) -> str:
    if not docs:
        return NO_MATCHING_DOCUMENTS
    return "\n\n---\n\n".join(
        f"Source: {source_label(doc, idx)}\n{doc.page_content}"
        for idx, doc in enumerate(docs)
    )


class DomainRagAgent:
    """
    Retrieval-grounded answerer for one department.

    Dependencies (injected via '__init__'):
        llm       - LangChain ChatOpenAI (or compatible)
        retriever - anything with ``invoke(query, config=...)`` → Documents
        options   - department intent, display name, style guide
    """

    def __init__(
        self,
        llm: Any,
        retriever: RetrieverLike,
        options: DomainAgentOptions,
    ) -> None:
        self.llm = llm
        self.retriever = retriever
        self.options = options
        self.parser = PydanticOutputParser(pydantic_object=AgentOutput)

    @property
    def intent(self) -> DepartmentIntent:
        return self.options.intent

    @property
    def name(self) -> str:
        return self.options.name

    def __repr__(self) -> str:
        return f"DomainRagAgent(intent={self.intent.value!r}, name={self.name!r})"

    @observe(name="domain_agent")
    def invoke(
        self,
        task: str,
        history: str = NO_PRIOR_RESPONSES,
        config: Optional[RunnableConfig] = None,
    ) -> AgentResult:
        """
        Answer *task* from department evidence.

        Raises:
            GenerationError: If retrieval, the LLM call or parsing fails.
        """
        update_current_observation(
            input=task[:1000],
            metadata={"department": self.intent.value, "agent": self.name},
        )

        try:
            docs = self.retriever.invoke(task, config=config)
        except Exception as exc:
            logger.error("{} retrieval failed: {}", self.name, exc)
            raise GenerationError(f"{self.name} retrieval failed: {exc}") from exc

        system_prompt, user_prompt = build_domain_agent_prompt(
            name=self.name,
            style_guide=self.options.style_guide,
            question=task,
            history=history,
            context=format_context(docs),
            format_instructions=self.parser.get_format_instructions(),
        )

        try:
            response = self.llm.invoke(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                config=config,
            )
        except Exception as exc:
            logger.error("{} LLM call failed: {}", self.name, exc)
            raise GenerationError(f"{self.name} LLM call failed: {exc}") from exc

        content = extract_text(response)
        try:
            parsed = self.parser.parse(content)
        except OutputParserException as exc:
            logger.warning("{} output rejected: {}", self.name, exc)
            raise GenerationError(f"Invalid {self.name} output: {exc}") from exc

        result = AgentResult(
            text=parsed.answer,
            sources=tuple(
                parsed.citations
                if parsed.citations
                else [source_label(doc, idx) for idx, doc in enumerate(docs)]
            ),
            handoff=self._handoff(parsed.follow_up),
        )
        update_current_observation(
            output=result.text[:500],
            metadata={
                "model": model_name(self.llm),
                "documents": len(docs),
                "handoff": result.handoff.intent.value if result.handoff else None,
            },
        )
        return result

    def _handoff(self, follow_up: Optional[FollowUp]) -> Optional[Handoff]:
        if follow_up is None:
            return None
        target = normalize_intent(follow_up.intent)
        if target is DepartmentIntent.UNKNOWN:
            return None
        return Handoff(
            intent=target,
            reason=follow_up.reason,
            context=follow_up.context_package,
        )

"""Pytest configuration and shared fakes."""

import os

# Must be set before any project module is imported: decorators read it.
os.environ["OBSERVABILITY_ENABLED"] = "false"

from typing import Any, Dict, List, Optional, Sequence

import pytest
from langchain_core.documents import Document
from langchain_core.messages import AIMessage

from agents.schemas import AgentResult, ClassificationResult, Handoff


class ScriptedClassifier:
    """Classifier double returning a fixed ordering."""

    def __init__(
        self,
        intents: Sequence[Any],
        confidence: float = 0.9,
        reasoning: str = "scripted classification",
        error: Optional[Exception] = None,
    ) -> None:
        self.result = ClassificationResult(
            ordered_intents=tuple(intents),
            confidence=confidence,
            reasoning=reasoning,
        )
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def classify(self, question: str, config: Any = None) -> ClassificationResult:
        self.calls.append({"question": question, "config": config})
        if self.error is not None:
            raise self.error
        return self.result


class ScriptedAgent:
    """Department agent double with an optional fixed handoff."""

    def __init__(
        self,
        name: str,
        text: Optional[str] = None,
        handoff: Optional[Handoff] = None,
        sources: Sequence[str] = ("kb-1",),
        error: Optional[Exception] = None,
    ) -> None:
        self.name = name
        self.text = text or f"{name} answer"
        self.handoff = handoff
        self.sources = tuple(sources)
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def invoke(self, task: str, history: str, config: Any = None) -> AgentResult:
        self.calls.append({"task": task, "history": history, "config": config})
        if self.error is not None:
            raise self.error
        return AgentResult(text=self.text, sources=self.sources, handoff=self.handoff)


class RecordingLLM:
    """Chat model double that records messages and run config."""

    def __init__(self, reply: Any = None, error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.model_name = "recording-llm"
        self.calls: List[Dict[str, Any]] = []

    def invoke(self, messages: Any, config: Any = None) -> AIMessage:
        self.calls.append({"messages": messages, "config": config})
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


class StaticRetriever:
    """Retriever double returning fixed documents."""

    def __init__(self, docs: Sequence[Document] = (), error: Optional[Exception] = None) -> None:
        self.docs = list(docs)
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def invoke(self, input: str, config: Any = None) -> List[Document]:
        self.calls.append({"input": input, "config": config})
        if self.error is not None:
            raise self.error
        return list(self.docs)


class FakeEmbedder:
    """Embedder double producing constant vectors."""

    def __init__(self, dim: int = 3) -> None:
        self.dim = dim
        self.batches: List[List[str]] = []

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.batches.append(list(texts))
        return [[0.1] * self.dim for _ in texts]

    def embed_query(self, text: str) -> List[float]:
        return [0.1] * self.dim


@pytest.fixture
def hr_docs() -> List[Document]:
    return [
        Document(page_content="Paid family leave is 12 weeks.", metadata={"source": "hr_docs/leave_policy.md"}),
        Document(page_content="Submit the Workday form.", metadata={}),
    ]

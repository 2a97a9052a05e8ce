"""
Intent classifier — the routing orchestrator's first step.

Reads a raw helpdesk question and returns the departments that should
answer it, in the order they should be engaged.  The LLM reply must
match ``ClassifierOutput``; anything else is a ``ClassificationError``.
"""

from loguru import logger
from typing import Any, Iterable, List, Literal, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel, Field

from agents.errors import ClassificationError
from agents.parsing import extract_text, model_name
from agents.prompts.agent_prompts import build_classifier_prompt
from agents.schemas import ClassificationResult, DepartmentIntent, KNOWN_DEPARTMENTS
from infrastructure.observability import observe, update_current_observation

IntentLiteral = Literal["hr", "tech", "finance", "unknown"]


class ClassifierOutput(BaseModel):
    """Raw JSON contract for the classifier LLM."""

    intents: List[IntentLiteral] = Field(
        min_length=1,
        max_length=3,
        description="Departments to engage, in order.",
    )
    confidence: float = Field(ge=0, le=1)
    reasoning: str = Field(min_length=10)


def normalize_intent(raw: Any) -> DepartmentIntent:
    """Map a raw label onto a known department, or ``unknown``."""
    value = getattr(raw, "value", raw)
    for department in KNOWN_DEPARTMENTS:
        if value == department.value:
            return department
    return DepartmentIntent.UNKNOWN


def resolve_ordered_intents(intents: Iterable[Any]) -> List[Any]:
    """Drop repeated intents, keeping the first occurrence in place."""
    unique: List[Any] = []
    for intent in intents:
        if intent not in unique:
            unique.append(intent)
    return unique


class OrchestratorAgent:
    """
    LLM-backed department classifier.

    Failures are never papered over: transport errors, malformed JSON
    and schema violations all surface as ``ClassificationError``.
    """

    def __init__(self, llm: Any) -> None:
        """
        Args:
            llm: A LangChain ``ChatOpenAI`` (or compatible) instance.
        """
        self.llm = llm
        self.parser = PydanticOutputParser(pydantic_object=ClassifierOutput)

    @observe(name="intent_classifier", as_type="generation")
    def classify(
        self,
        question: str,
        config: Optional[RunnableConfig] = None,
    ) -> ClassificationResult:
        """
        Order the departments that should handle *question*.

        Raises:
            ValueError: If *question* is blank.
            ClassificationError: If no valid classification came back.
        """
        if not question or not question.strip():
            raise ValueError("question must be non-empty")

        system_prompt, user_prompt = build_classifier_prompt(
            question=question,
            format_instructions=self.parser.get_format_instructions(),
        )
        update_current_observation(
            input=user_prompt[:1000],
            model=model_name(self.llm),
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
            logger.error("Classifier LLM call failed: {}", exc)
            raise ClassificationError(f"Classifier LLM call failed: {exc}") from exc

        content = extract_text(response)
        update_current_observation(output=content[:500])
        return self.parse(content)

    def parse(self, raw: str) -> ClassificationResult:
        """Validate the classifier reply and normalise its intents."""
        try:
            parsed = self.parser.parse(raw)
        except OutputParserException as exc:
            logger.warning("Classifier output rejected: {}", exc)
            raise ClassificationError(f"Invalid classifier output: {exc}") from exc

        ordered = resolve_ordered_intents(normalize_intent(i) for i in parsed.intents)
        result = ClassificationResult(
            ordered_intents=tuple(ordered),
            confidence=parsed.confidence,
            reasoning=parsed.reasoning,
        )
        logger.info(
            "Classified: {} (conf={:.2f}) - {}",
            " → ".join(str(i) for i in result.ordered_intents),
            result.confidence,
            result.reasoning,
        )
        return result

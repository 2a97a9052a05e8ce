"""
LLM-as-judge answer evaluator.

Scores a routed answer for helpfulness (relevance, accuracy,
completeness) on a 1-10 scale.  Scores are returned to the caller only;
nothing is written back to the tracing backend.
"""

from loguru import logger
from dataclasses import dataclass
from typing import Any, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.runnables import RunnableConfig
from pydantic import BaseModel, Field

from agents.errors import EvaluationError
from agents.parsing import extract_text, model_name
from agents.prompts.agent_prompts import build_evaluator_prompt
from infrastructure.observability import observe, update_current_observation


class EvaluatorOutput(BaseModel):
    score: float = Field(ge=1, le=10)
    reasoning: str = Field(min_length=10)


@dataclass(frozen=True)
class EvaluationResult:
    score: float
    reasoning: str


class AnswerEvaluator:
    """Grades answers with a dedicated evaluator LLM."""

    def __init__(self, llm: Any) -> None:
        self.llm = llm
        self.parser = PydanticOutputParser(pydantic_object=EvaluatorOutput)

    @observe(name="answer_evaluator", as_type="generation")
    def evaluate(
        self,
        question: str,
        answer: str,
        config: Optional[RunnableConfig] = None,
    ) -> EvaluationResult:
        """
        Score *answer* as a reply to *question*.

        Raises:
            EvaluationError: If the LLM call fails or its reply is invalid.
        """
        system_prompt, user_prompt = build_evaluator_prompt(
            question=question,
            answer=answer,
            format_instructions=self.parser.get_format_instructions(),
        )
        update_current_observation(input=user_prompt[:1000], model=model_name(self.llm))

        try:
            response = self.llm.invoke(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                config=config,
            )
        except Exception as exc:
            logger.error("Evaluator LLM call failed: {}", exc)
            raise EvaluationError(f"Evaluator LLM call failed: {exc}") from exc

        try:
            parsed = self.parser.parse(extract_text(response))
        except OutputParserException as exc:
            raise EvaluationError(f"Invalid evaluator output: {exc}") from exc

        logger.info("Evaluator score {:.1f} - {}", parsed.score, parsed.reasoning)
        return EvaluationResult(score=parsed.score, reasoning=parsed.reasoning)

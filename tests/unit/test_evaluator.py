"""Tests for the LLM-as-judge evaluator."""

import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agents.errors import EvaluationError
from services.evaluation import AnswerEvaluator

from tests.conftest import RecordingLLM


def _reply(score, reasoning="Relevant, accurate and complete."):
    return json.dumps({"score": score, "reasoning": reasoning})


def test_valid_score():
    evaluator = AnswerEvaluator(FakeListChatModel(responses=[_reply(8)]))

    result = evaluator.evaluate("Paid leave?", "Submit the Workday form.")

    assert result.score == 8
    assert result.reasoning == "Relevant, accurate and complete."


@pytest.mark.parametrize("reply", [_reply(0), _reply(11), _reply(7, "short"), "eight"])
def test_invalid_reply(reply):
    evaluator = AnswerEvaluator(FakeListChatModel(responses=[reply]))
    with pytest.raises(EvaluationError):
        evaluator.evaluate("Paid leave?", "Ask HR.")


def test_llm_failure():
    evaluator = AnswerEvaluator(RecordingLLM(error=RuntimeError("boom")))
    with pytest.raises(EvaluationError, match="boom"):
        evaluator.evaluate("Paid leave?", "Ask HR.")


def test_prompt_includes_question_and_answer():
    llm = RecordingLLM(reply=_reply(6))

    AnswerEvaluator(llm).evaluate("Paid leave?", "Submit the Workday form.")

    user = llm.calls[0]["messages"][1]["content"]
    assert "Question: Paid leave?" in user
    assert "Answer: Submit the Workday form." in user

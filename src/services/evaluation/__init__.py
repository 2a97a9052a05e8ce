"""
Answer-quality evaluation (LLM-as-judge).
"""

from .evaluator import AnswerEvaluator, EvaluationResult

__all__ = [
    "AnswerEvaluator",
    "EvaluationResult",
]

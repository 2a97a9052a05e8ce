#!/usr/bin/env python3
"""
Score an answer with the evaluator LLM.

Usage:
    PYTHONPATH=src python scripts/evaluate_answer.py
    PYTHONPATH=src python scripts/evaluate_answer.py "How do I expense a work trip?" "Submit receipts within 10 days via Coupa."
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from loguru import logger
from agents.errors import EvaluationError
from infrastructure.llm import get_evaluator_llm
from infrastructure.log import setup_logging
from infrastructure.observability import flush
from services.evaluation import AnswerEvaluator


def main() -> int:
    parser = argparse.ArgumentParser(description="Grade an answer on a 1-10 scale")
    parser.add_argument("question", nargs="?", default="How do I expense a work trip?")
    parser.add_argument("answer", nargs="?", default="Submit receipts within 10 days via Coupa.")
    args = parser.parse_args()

    setup_logging()

    try:
        result = AnswerEvaluator(get_evaluator_llm()).evaluate(args.question, args.answer)
    except EvaluationError as exc:
        logger.error("Evaluation failed: {}", exc)
        return 1
    finally:
        flush()

    logger.success("Evaluator score {:.1f}: {}", result.score, result.reasoning)
    return 0


if __name__ == "__main__":
    sys.exit(main())

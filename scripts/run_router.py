#!/usr/bin/env python3
"""
Route helpdesk questions through the department agents.

Usage:
    PYTHONPATH=src python scripts/run_router.py                 # sample queries
    PYTHONPATH=src python scripts/run_router.py -q "Laptop stolen, who pays?"
    PYTHONPATH=src python scripts/run_router.py --skip-seed --log-level DEBUG
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from loguru import logger
from agents import AgentSystemError, build_router
from infrastructure.log import setup_logging
from infrastructure.observability import flush, get_langchain_handler
from services.routing_service import run_examples


def main() -> int:
    parser = argparse.ArgumentParser(description="Multi-agent department router")
    parser.add_argument(
        "-q",
        "--query",
        action="append",
        help="Question to route (repeatable; default: built-in samples)",
    )
    parser.add_argument(
        "--skip-seed",
        action="store_true",
        help="Reuse existing Qdrant collections instead of re-seeding",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level, compact=True)

    try:
        router = build_router(seed=False if args.skip_seed else None)
        run_examples(router, args.query, handler=get_langchain_handler())
    except (AgentSystemError, ValueError) as exc:
        logger.error("Failed to route: {}", exc)
        return 1
    finally:
        flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())

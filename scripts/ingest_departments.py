#!/usr/bin/env python3
"""
CLI entry-point for seeding the department Qdrant collections.

All heavy-lifting lives in ``services.ingest_service.pipeline``.

Usage:
    PYTHONPATH=src python scripts/ingest_departments.py
    PYTHONPATH=src python scripts/ingest_departments.py --department hr
    PYTHONPATH=src python scripts/ingest_departments.py --no-seed
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from loguru import logger
from infrastructure.config import DEPARTMENT_FOLDERS
from infrastructure.llm import get_default_embeddings
from infrastructure.log import setup_logging
from services.ingest_service.pipeline import seed_all_departments


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Seed per-department document collections in Qdrant",
    )
    parser.add_argument(
        "--department",
        choices=list(DEPARTMENT_FOLDERS.keys()),
        action="append",
        help="Only seed this department (repeatable; default: all)",
    )
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Only make sure the collections exist; do not re-upload documents",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    folders = {
        intent: folder
        for intent, folder in DEPARTMENT_FOLDERS.items()
        if not args.department or intent in args.department
    }
    try:
        collections = seed_all_departments(
            embedder=get_default_embeddings(),
            seed=not args.no_seed,
            folders=folders,
        )
    except FileNotFoundError as exc:
        logger.error("{}", exc)
        return 1

    logger.success("Collections ready: {}", ", ".join(collections.values()))
    return 0


if __name__ == "__main__":
    sys.exit(main())

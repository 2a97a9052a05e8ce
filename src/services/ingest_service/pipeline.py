"""
Department ingestion pipeline — load, chunk, embed, upsert.

This module contains the service logic for seeding the per-department
Qdrant collections.  ``build_router()`` and
``scripts/ingest_departments.py`` call :func:`seed_all_departments`
rather than duplicating the pipeline steps.
"""

import csv
import re
from loguru import logger
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from infrastructure.config import (
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    DATA_DIR,
    DEPARTMENT_FOLDERS,
    DOCUMENT_EXTENSIONS,
    EMBEDDING_BATCH_SIZE,
    SHOULD_SEED_VECTORS,
    VECTOR_NAMESPACE_PREFIX,
)
from infrastructure.db.qdrant_client import (
    count_points,
    collection_exists,
    delete_collection,
    ensure_collection,
    upsert_chunks,
)


# =====================================================================
# Naming
# =====================================================================


def namespace_for_domain(domain_folder: str, prefix: str = VECTOR_NAMESPACE_PREFIX) -> str:
    """``hr_docs`` → ``dept-hr``; also used as the Qdrant collection name."""
    slug = re.sub(r"_docs?$", "", domain_folder, flags=re.IGNORECASE)
    slug = re.sub(r"[^a-z0-9]+", "-", slug, flags=re.IGNORECASE)
    return f"{prefix}-{slug}".lower()


# =====================================================================
# Document loaders
# =====================================================================


def _load_text(path: Path, source: str) -> List[Document]:
    content = path.read_text(encoding="utf-8").strip()
    if not content:
        return []
    return [Document(page_content=content, metadata={"source": source})]


def _load_csv(path: Path, source: str) -> List[Document]:
    """One document per row, rendered as ``column: value`` lines."""
    docs: List[Document] = []
    with open(path, "r", encoding="utf-8", newline="") as fh:
        for row_idx, row in enumerate(csv.DictReader(fh)):
            content = "\n".join(
                f"{key.strip()}: {(value or '').strip()}"
                for key, value in row.items()
                if key is not None
            )
            if content:
                docs.append(
                    Document(page_content=content, metadata={"source": source, "row": row_idx})
                )
    return docs


LOADER_MAP = {
    ".md": _load_text,
    ".txt": _load_text,
    ".csv": _load_csv,
}


def load_department_docs(
    domain_folder: str,
    data_dir: Optional[Path] = None,
) -> List[Document]:
    """
    Load every supported document under ``<data_dir>/<domain_folder>``.

    Raises:
        FileNotFoundError: If the department folder does not exist.
    """
    data_dir = Path(data_dir or DATA_DIR)
    folder = data_dir / domain_folder
    if not folder.exists():
        raise FileNotFoundError(f"Department directory not found: {folder}")

    docs: List[Document] = []
    for path in sorted(folder.rglob("*")):
        loader = LOADER_MAP.get(path.suffix.lower())
        if not path.is_file() or loader is None or path.suffix.lower() not in DOCUMENT_EXTENSIONS:
            continue
        docs.extend(loader(path, path.relative_to(data_dir).as_posix()))

    logger.info("Loaded {} documents from {}", len(docs), folder)
    return docs


# =====================================================================
# Chunking & embedding
# =====================================================================


def split_documents(
    docs: List[Document],
    namespace: str,
    chunk_size: int = CHUNK_SIZE,
    chunk_overlap: int = CHUNK_OVERLAP,
) -> List[Dict[str, Any]]:
    """Split documents into chunk dicts ready for ``upsert_chunks``."""
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
    )
    pieces = splitter.split_documents(docs)
    return [
        {
            "chunk_id": f"{namespace}-{idx}",
            "text": piece.page_content,
            "source": piece.metadata.get("source", ""),
            "chunk_index": idx,
            "namespace": namespace,
        }
        for idx, piece in enumerate(pieces)
    ]


def embed_texts(
    texts: List[str],
    embedder: Any,
    batch_size: int = EMBEDDING_BATCH_SIZE,
) -> List[List[float]]:
    """Embed a list of texts in batches."""
    all_embeddings: List[List[float]] = []

    total_batches = (len(texts) + batch_size - 1) // batch_size
    for i in range(0, len(texts), batch_size):
        batch = texts[i : i + batch_size]
        logger.debug(
            "Embedding batch {}/{} ({} texts)...",
            i // batch_size + 1,
            total_batches,
            len(batch),
        )
        all_embeddings.extend(embedder.embed_documents(batch))

    return all_embeddings


# =====================================================================
# Seeding
# =====================================================================


def seed_department(
    domain_folder: str,
    embedder: Any,
    seed: bool = SHOULD_SEED_VECTORS,
    data_dir: Optional[Path] = None,
) -> str:
    """
    Make sure a department collection exists; re-seed it when *seed*.

    Seeding wipes the collection and re-upserts every chunk, so repeated
    runs never accumulate stale points.

    Returns:
        The collection name.
    """
    namespace = namespace_for_domain(domain_folder)

    if not seed:
        ensure_collection(namespace)
        logger.info("Using existing collection '{}' (seeding disabled)", namespace)
        return namespace

    docs = load_department_docs(domain_folder, data_dir=data_dir)
    chunks = split_documents(docs, namespace)
    logger.info("{}: {} documents → {} chunks", domain_folder, len(docs), len(chunks))

    if collection_exists(namespace):
        delete_collection(namespace)
    ensure_collection(namespace)

    if not chunks:
        logger.warning("No chunks produced for '{}'. Collection left empty.", namespace)
        return namespace

    t0 = time.time()
    embeddings = embed_texts([c["text"] for c in chunks], embedder)
    n = upsert_chunks(chunks, embeddings, collection_name=namespace)
    logger.success(
        "Seeded '{}' with {} points in {:.1f}s", namespace, n, time.time() - t0
    )
    return namespace


def seed_all_departments(
    embedder: Any,
    seed: bool = SHOULD_SEED_VECTORS,
    folders: Optional[Dict[str, str]] = None,
    data_dir: Optional[Path] = None,
) -> Dict[str, str]:
    """
    Seed (or attach to) every department collection.

    Returns:
        Mapping of department intent value → collection name.
    """
    folders = folders or DEPARTMENT_FOLDERS
    collections = {
        intent: seed_department(folder, embedder, seed=seed, data_dir=data_dir)
        for intent, folder in folders.items()
    }
    for intent, name in collections.items():
        logger.info("   {} → {} ({} points)", intent, name, count_points(name))
    return collections

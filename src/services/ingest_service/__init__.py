"""
Ingest services - department document loading, chunking, Qdrant seeding.
"""

from .pipeline import (
    LOADER_MAP,
    embed_texts,
    load_department_docs,
    namespace_for_domain,
    seed_all_departments,
    seed_department,
    split_documents,
)

__all__ = [
    "LOADER_MAP",
    "embed_texts",
    "load_department_docs",
    "namespace_for_domain",
    "seed_all_departments",
    "seed_department",
    "split_documents",
]

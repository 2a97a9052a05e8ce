"""
Vector store client for the department knowledge bases.

Each department owns one Qdrant collection (``dept-hr``, ``dept-tech``,
``dept-finance``); agents only retrieve from their own.
"""

from .qdrant_client import (
    get_qdrant_client,
    point_id,
    collection_exists,
    ensure_collection,
    delete_collection,
    count_points,
    upsert_chunks,
    search_chunks,
)

__all__ = [
    "get_qdrant_client",
    "point_id",
    "collection_exists",
    "ensure_collection",
    "delete_collection",
    "count_points",
    "upsert_chunks",
    "search_chunks",
]

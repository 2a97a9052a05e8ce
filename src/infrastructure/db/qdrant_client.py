"""
Qdrant client for the department knowledge bases.

Handles:
- Connection to Qdrant Cloud (or a local Qdrant)
- Collection creation with the configured embedding dimension
- Upserting department chunks with deterministic point ids
- Similarity search (cosine)

One collection per department, named ``<prefix>-<department>``
(e.g. ``dept-hr``), so a department agent only ever sees its own
documents.
"""

from loguru import logger
import uuid
from typing import Any, Dict, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import UnexpectedResponse
from qdrant_client.http.models import Distance, PointStruct, VectorParams

from infrastructure.config import QDRANT_API_KEY, QDRANT_URL, EMBEDDING_DIM

# ---------------------------------------------------------------------------
# Singleton client
# ---------------------------------------------------------------------------

_qdrant_client: Optional[QdrantClient] = None


def get_qdrant_client() -> QdrantClient:
    """
    Return a singleton QdrantClient.

    Requires QDRANT_URL in .env (plus QDRANT_API_KEY for Qdrant Cloud).
    """
    global _qdrant_client
    if _qdrant_client is not None:
        return _qdrant_client

    if not QDRANT_URL:
        raise RuntimeError(
            "QDRANT_URL is not set.  Add it to your .env file.\n"
            "Example: QDRANT_URL=https://xxxxx.us-east.aws.cloud.qdrant.io"
        )

    _qdrant_client = QdrantClient(
        url=QDRANT_URL,
        api_key=QDRANT_API_KEY,
        timeout=30,
    )
    logger.info("Connected to Qdrant at {}", QDRANT_URL)
    return _qdrant_client


def point_id(chunk_id: str) -> str:
    """Stable Qdrant point id for a ``<namespace>-<idx>`` chunk id."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, chunk_id))


# ---------------------------------------------------------------------------
# Collection management
# ---------------------------------------------------------------------------


def collection_exists(collection_name: str) -> bool:
    """Check whether *collection_name* exists in Qdrant."""
    client = get_qdrant_client()
    existing = [c.name for c in client.get_collections().collections]
    return collection_name in existing


def ensure_collection(
    collection_name: str,
    vector_size: int = EMBEDDING_DIM,
    distance: Distance = Distance.COSINE,
) -> None:
    """
    Create the collection if it does not exist.

    Safe to call repeatedly (idempotent).
    """
    if collection_exists(collection_name):
        logger.debug("Collection '{}' already exists — skipping creation.", collection_name)
        return

    get_qdrant_client().create_collection(
        collection_name=collection_name,
        vectors_config=VectorParams(size=vector_size, distance=distance),
    )
    logger.info(
        "Created Qdrant collection '{}' (dim={}, distance={})",
        collection_name,
        vector_size,
        distance.name,
    )


def delete_collection(collection_name: str) -> None:
    """Drop the collection; a missing collection is only a warning."""
    try:
        get_qdrant_client().delete_collection(collection_name)
    except UnexpectedResponse as exc:
        if exc.status_code == 404:
            logger.warning("Qdrant collection {} not found yet. Skipping delete.", collection_name)
            return
        raise
    logger.info("Deleted Qdrant collection '{}'", collection_name)


def count_points(collection_name: str) -> int:
    """Return the number of points in the collection."""
    info = get_qdrant_client().get_collection(collection_name)
    return info.points_count or 0


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


def upsert_chunks(
    chunks: List[Dict[str, Any]],
    embeddings: List[List[float]],
    collection_name: str,
    batch_size: int = 100,
) -> int:
    """
    Upsert department chunks (with embeddings) into Qdrant.

    Each chunk dict must contain:
        - chunk_id (str): ``<namespace>-<idx>``, hashed into the point id.
        - text (str): The chunk content.
        - source (str): Originating document path.

    Any extra keys are stored as payload metadata.

    Returns:
        Number of points upserted.
    """
    if len(chunks) != len(embeddings):
        raise ValueError(
            f"Mismatch: {len(chunks)} chunks vs {len(embeddings)} embeddings"
        )

    client = get_qdrant_client()
    total = 0

    for i in range(0, len(chunks), batch_size):
        batch_chunks = chunks[i : i + batch_size]
        batch_embeds = embeddings[i : i + batch_size]

        points = []
        for chunk, vec in zip(batch_chunks, batch_embeds):
            payload = {
                "chunk_id": chunk["chunk_id"],
                "chunk_text": chunk.get("text", ""),
                "source": chunk.get("source", ""),
            }
            for k, v in chunk.items():
                if k not in ("chunk_id", "text", "source"):
                    payload[k] = v
            points.append(
                PointStruct(id=point_id(chunk["chunk_id"]), vector=vec, payload=payload)
            )

        client.upsert(collection_name=collection_name, points=points)
        total += len(points)
        logger.debug("Upserted batch {}–{} ({} points)", i, i + len(points), len(points))

    logger.info("Upserted {} points into '{}'", total, collection_name)
    return total


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def search_chunks(
    query_vector: List[float],
    collection_name: str,
    top_k: int = 5,
    score_threshold: Optional[float] = None,
) -> List[Dict[str, Any]]:
    """
    Semantic search over one department collection.

    Returns:
        List of dicts with keys: chunk_id, chunk_text, source, score
    """
    response = get_qdrant_client().query_points(
        collection_name=collection_name,
        query=query_vector,
        limit=top_k,
        score_threshold=score_threshold or None,
        with_payload=True,
    )

    results = []
    for hit in response.points:
        payload = hit.payload or {}
        results.append(
            {
                "chunk_id": payload.get("chunk_id", ""),
                "chunk_text": payload.get("chunk_text", ""),
                "source": payload.get("source", ""),
                "score": hit.score,
            }
        )
    return results

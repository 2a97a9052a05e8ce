"""
Chat services — department retrieval.
"""

from .retriever import QdrantRetriever

__all__ = [
    "QdrantRetriever",
]

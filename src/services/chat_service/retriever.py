"""
Qdrant-backed LangChain retriever for one department collection.

Used by ``DomainRagAgent`` through the standard ``Runnable`` interface
(``retriever.invoke(query, config=...)``), so Langfuse callbacks on the
run config also see the retrieval step.
"""

from typing import Any, List, Optional

from langchain_core.callbacks import CallbackManagerForRetrieverRun
from langchain_core.documents import Document
from langchain_core.retrievers import BaseRetriever

from infrastructure.config import TOP_K_RESULTS, SIMILARITY_THRESHOLD
from infrastructure.db.qdrant_client import search_chunks


class QdrantRetriever(BaseRetriever):
    """
    LangChain-compatible retriever over a single Qdrant collection.

    Documents carry ``metadata["source"]`` so agents can fall back to it
    when the LLM cites nothing.
    """

    embedder: Any = None
    collection_name: str
    top_k: int = TOP_K_RESULTS
    score_threshold: float = SIMILARITY_THRESHOLD

    def _get_relevant_documents(
        self,
        query: str,
        *,
        run_manager: Optional[CallbackManagerForRetrieverRun] = None,
    ) -> List[Document]:
        """Embed *query* and return the closest department chunks."""
        query_vec = self.embedder.embed_query(query)

        hits = search_chunks(
            query_vector=query_vec,
            collection_name=self.collection_name,
            top_k=self.top_k,
            score_threshold=self.score_threshold,
        )

        return [
            Document(
                page_content=hit["chunk_text"],
                metadata={
                    "source": hit.get("source") or hit.get("chunk_id", ""),
                    "chunk_id": hit.get("chunk_id", ""),
                    "score": hit.get("score", 0.0),
                    "collection": self.collection_name,
                },
            )
            for hit in hits
        ]

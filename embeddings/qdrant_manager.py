"""
Qdrant Vector Database Manager
Handles vector storage and retrieval for document-scoped semantic search

One shared collection (document_embeddings) holds every document's chunks;
tenancy is the `document_id` payload field, filtered by equality at query time.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    MatchAny,
    MatchValue,
    PayloadSchemaType,
    PointStruct,
    VectorParams,
)

from embeddings.schemas import EmbeddingRecord, QueryMatches, RetrievedMatch
from errors import VectorStoreError

log = logging.getLogger(__name__)

# uuid5 namespace for point ids: Qdrant only accepts ints/UUIDs, so the
# "{documentId}_chunk_{n}" id is hashed into a stable UUID.
POINT_ID_NAMESPACE = uuid.UUID("6f1c2a4e-58b1-4d0e-9a57-2d3c8f0b7e11")


def point_id_for(record_id: str) -> str:
    return str(uuid.uuid5(POINT_ID_NAMESPACE, record_id))


class QdrantManager:
    """
    Manages Qdrant vector database operations.

    Writing the same record id twice overwrites the earlier point (Qdrant
    upsert on a deterministic point id).
    """

    DEFAULT_COLLECTION = "document_embeddings"
    DEFAULT_K = 5

    def __init__(
        self,
        client: QdrantClient,
        collection_name: str = DEFAULT_COLLECTION,
        embedding_dim: int = 1536,
    ):
        """
        Args:
            client: QdrantClient (remote URL in production, ":memory:" in tests)
            collection_name: Logical collection name
            embedding_dim: Vector size; must match the embedding model
        """
        self.client = client
        self.collection_name = collection_name
        self.embedding_dim = embedding_dim

    @classmethod
    def from_url(cls, url: str, api_key: Optional[str] = None, **kwargs) -> "QdrantManager":
        return cls(QdrantClient(url=url, api_key=api_key), **kwargs)

    def _collection(self, collection: Optional[str]) -> str:
        return collection or self.collection_name

    def collection_exists(self, collection: Optional[str] = None) -> bool:
        try:
            return self.client.collection_exists(self._collection(collection))
        except Exception as e:
            raise VectorStoreError(detail=str(e)) from e

    def ensure_collection(self, collection: Optional[str] = None) -> None:
        """Create the collection (cosine) and its document_id index if missing."""
        name = self._collection(collection)
        if self.collection_exists(name):
            return
        try:
            self.client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=self.embedding_dim, distance=Distance.COSINE),
            )
            self.client.create_payload_index(
                collection_name=name,
                field_name="document_id",
                field_schema=PayloadSchemaType.KEYWORD,
            )
        except Exception as e:
            raise VectorStoreError(f"Failed to create collection {name}", str(e)) from e
        log.info(f"Created collection: {name} (dim={self.embedding_dim}, cosine)")

    def upsert(self, records: List[EmbeddingRecord], collection: Optional[str] = None) -> int:
        """
        Persist record vectors with text and metadata in a single request.

        Returns:
            Number of points written
        """
        if not records:
            return 0
        name = self._collection(collection)
        self.ensure_collection(name)

        points = [
            PointStruct(
                id=point_id_for(record.id),
                vector=record.vector,
                payload={
                    "record_id": record.id,
                    "document_id": record.metadata.document_id,
                    "chunk_index": record.metadata.chunk_index,
                    "page_number": record.metadata.page_number,
                    "text_preview": record.metadata.text_preview,
                    "text": record.document_text,
                },
            )
            for record in records
        ]
        try:
            self.client.upsert(collection_name=name, points=points, wait=True)
        except Exception as e:
            raise VectorStoreError(f"Failed to upsert {len(points)} points", str(e)) from e
        log.info(f"Upserted {len(points)} points to {name}")
        return len(points)

    @staticmethod
    def _document_filter(document_id: Optional[str]) -> Optional[Filter]:
        if document_id is None:
            return None
        return Filter(must=[FieldCondition(key="document_id", match=MatchValue(value=document_id))])

    def query(
        self,
        query_vector: List[float],
        k: int = DEFAULT_K,
        document_id: Optional[str] = None,
        collection: Optional[str] = None,
    ) -> QueryMatches:
        """
        Nearest-neighbour search, optionally restricted to one document.

        A missing or empty collection, or a document with no points, yields
        an empty match list rather than an error.
        """
        name = self._collection(collection)
        if not self.collection_exists(name):
            return QueryMatches(chunks=[])

        try:
            response = self.client.query_points(
                collection_name=name,
                query=query_vector,
                query_filter=self._document_filter(document_id),
                limit=max(1, k),
                with_payload=True,
            )
        except Exception as e:
            raise VectorStoreError(detail=str(e)) from e

        matches: List[RetrievedMatch] = []
        for rank, point in enumerate(response.points, start=1):
            payload = point.payload or {}
            matches.append(
                RetrievedMatch(
                    chunk_text=payload.get("text", ""),
                    page_number=int(payload.get("page_number") or 1),
                    rank=rank,
                    chunk_index=int(payload.get("chunk_index") or 0),
                    document_id=str(payload.get("document_id", "")),
                    score=float(point.score),
                )
            )
        return QueryMatches(chunks=matches)

    def delete_stale_chunks(self, document_id: str, keep_indexes: List[int], collection: Optional[str] = None) -> None:
        """Remove a document's points whose chunk_index is not in keep_indexes (left over from an earlier ingestion)."""
        name = self._collection(collection)
        if not self.collection_exists(name):
            return
        selector = FilterSelector(
            filter=Filter(
                must=[FieldCondition(key="document_id", match=MatchValue(value=document_id))],
                must_not=[FieldCondition(key="chunk_index", match=MatchAny(any=list(keep_indexes)))],
            )
        )
        try:
            self.client.delete(collection_name=name, points_selector=selector, wait=True)
        except Exception as e:
            raise VectorStoreError(detail=str(e)) from e

    def delete_by_document(self, document_id: str, collection: Optional[str] = None) -> None:
        """Delete all vectors for a document."""
        name = self._collection(collection)
        if not self.collection_exists(name):
            return
        try:
            self.client.delete(
                collection_name=name,
                points_selector=FilterSelector(filter=self._document_filter(document_id)),
                wait=True,
            )
        except Exception as e:
            raise VectorStoreError(detail=str(e)) from e
        log.info(f"Deleted vectors for document {document_id} from {name}")

    def count(self, document_id: Optional[str] = None, collection: Optional[str] = None) -> int:
        name = self._collection(collection)
        if not self.collection_exists(name):
            return 0
        try:
            result = self.client.count(
                collection_name=name,
                count_filter=self._document_filter(document_id),
                exact=True,
            )
        except Exception as e:
            raise VectorStoreError(detail=str(e)) from e
        return result.count

    def get_collection_info(self) -> Dict[str, Any]:
        """Collection statistics (for health checks)."""
        name = self.collection_name
        if not self.collection_exists(name):
            return {"collection_name": name, "points_count": 0, "status": "missing"}
        try:
            info = self.client.get_collection(name)
        except Exception as e:
            raise VectorStoreError(detail=str(e)) from e
        return {
            "collection_name": name,
            "vector_size": self.embedding_dim,
            "points_count": info.points_count,
            "status": str(info.status),
        }

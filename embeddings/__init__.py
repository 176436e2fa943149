"""
Embeddings package
Handles text-to-vector conversion (OpenAI) and vector storage (Qdrant)
"""

from .generator import EmbeddingGenerator
from .qdrant_manager import QdrantManager, point_id_for
from .schemas import EmbeddingRecord, QueryMatches, RecordMetadata, RetrievedMatch

__all__ = [
    "EmbeddingGenerator",
    "QdrantManager",
    "point_id_for",
    "EmbeddingRecord",
    "QueryMatches",
    "RecordMetadata",
    "RetrievedMatch",
]

"""
Schemas at the vector index boundary
"""

from typing import List

from pydantic import BaseModel, Field

from parsing.schemas import ApiModel

TEXT_PREVIEW_CHARS = 500


class RecordMetadata(ApiModel):
    document_id: str
    chunk_index: int
    page_number: int
    text_preview: str = Field(..., description="First 500 characters of the chunk")


class EmbeddingRecord(BaseModel):
    """One chunk vector ready for upsert. id = "{documentId}_chunk_{chunkIndex}"."""
    id: str
    vector: List[float]
    document_text: str
    metadata: RecordMetadata


class RetrievedMatch(ApiModel):
    """Request-scoped search hit; rank 1 is the best match."""
    chunk_text: str
    page_number: int
    rank: int = Field(..., ge=1)
    chunk_index: int = 0
    document_id: str = ""
    score: float = 0.0


class QueryMatches(BaseModel):
    chunks: List[RetrievedMatch] = Field(default_factory=list)

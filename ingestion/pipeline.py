"""
Ingestion pipeline: chunks → embeddings → vector index

Status flow for one document: embedding → indexing → indexed

- Embeddings for all chunks are generated first (bounded concurrency).
  Any failure aborts the document before anything is written, so a
  document is never left partially indexed.
- All records are then written in one upsert. Record ids are deterministic,
  so re-ingesting the same document overwrites its previous points; points
  whose chunk_index is not in the new set are removed afterwards.
- A document with no indexable chunks is a success with 0 chunks processed.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel

from config import Settings
from embeddings.generator import EmbeddingGenerator
from embeddings.qdrant_manager import QdrantManager
from embeddings.schemas import TEXT_PREVIEW_CHARS, EmbeddingRecord, RecordMetadata
from errors import InputValidationError, UpstreamTimeoutError
from parsing.chunker import build_record_id, chunk_elements
from parsing.schemas import Chunk

log = logging.getLogger("rag.pipeline")


class IngestResult(BaseModel):
    document_id: str
    chunks_processed: int


def build_records(document_id: str, chunks: List[Chunk], vectors: List[List[float]]) -> List[EmbeddingRecord]:
    """Pair chunks with their vectors as EmbeddingRecords (chunk order preserved)."""
    if len(chunks) != len(vectors):
        raise ValueError("chunks and vectors must have same length")
    return [
        EmbeddingRecord(
            id=build_record_id(document_id, chunk.chunk_index),
            vector=vector,
            document_text=chunk.text,
            metadata=RecordMetadata(
                document_id=document_id,
                chunk_index=chunk.chunk_index,
                page_number=chunk.page_number,
                text_preview=chunk.text[:TEXT_PREVIEW_CHARS],
            ),
        )
        for chunk, vector in zip(chunks, vectors)
    ]


class IngestionPipeline:
    """Embeds a document's chunks and writes them to the shared collection."""

    def __init__(self, embedder: EmbeddingGenerator, index: QdrantManager, settings: Settings):
        self.embedder = embedder
        self.index = index
        self.settings = settings

    async def ingest(self, document_id: str, chunks: List[Chunk]) -> IngestResult:
        """
        Index pre-chunked text for one document.

        Raises:
            InputValidationError: blank document id or duplicate chunk indexes
            UpstreamError subclasses: embedding / vector store failures
        """
        if not document_id or not document_id.strip():
            raise InputValidationError("documentId is required")

        if not chunks:
            log.info(f"[INGEST] doc={document_id}: no indexable chunks, skipping embedding")
            return IngestResult(document_id=document_id, chunks_processed=0)

        ordered = sorted(chunks, key=lambda c: c.chunk_index)
        indexes = [c.chunk_index for c in ordered]
        if len(set(indexes)) != len(indexes):
            raise InputValidationError("chunkIndex values must be unique within a document")

        log.info(f"[INGEST] doc={document_id}: embedding {len(ordered)} chunks "
                 f"(max {self.embedder.max_concurrency} in flight)")
        try:
            vectors = await asyncio.wait_for(
                self.embedder.embed_batch([c.text for c in ordered]),
                timeout=self.settings.ingest_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(
                "Ingestion timed out while generating embeddings",
                f"exceeded {self.settings.ingest_timeout_seconds}s",
            ) from e

        records = build_records(document_id, ordered, vectors)
        written = await asyncio.to_thread(self.index.upsert, records)
        await asyncio.to_thread(self.index.delete_stale_chunks, document_id, indexes)

        log.info(f"[INGEST] doc={document_id}: indexed {written} chunks")
        return IngestResult(document_id=document_id, chunks_processed=written)

    async def ingest_elements(self, document_id: str, elements: Optional[Iterable[Any]]) -> IngestResult:
        """Chunk parsed elements, then ingest them."""
        chunks = chunk_elements(
            elements,
            window_size=self.settings.chunk_window_size,
            min_chunk_length=self.settings.min_chunk_length,
        )
        log.info(f"[INGEST] doc={document_id}: {len(chunks)} chunks from parsed elements")
        return await self.ingest(document_id, chunks)

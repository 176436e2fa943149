"""
Ingest Router
POST /ingest — embed pre-chunked document text and write it to the vector index
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import ConfigDict, Field

from ingestion.pipeline import IngestionPipeline
from parsing.schemas import ApiModel, Chunk
from routers.deps import get_ingestion_pipeline

router = APIRouter(tags=["ingest"])


class IngestRequest(ApiModel):
    document_id: str = Field(..., description="Tenancy key for every record written")
    chunks: List[Chunk] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "documentId": "1712345678901_biology.pdf",
                "chunks": [{"text": "Photosynthesis converts light energy...", "pageNumber": 1, "chunkIndex": 0}],
            }
        }
    )

class IngestResponse(ApiModel):
    success: bool = True
    chunks_processed: int

@router.post("/ingest", response_model=IngestResponse)
async def ingest_document(
    request: IngestRequest,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
):
    """
    Index a document's chunks.

    Re-ingesting the same documentId replaces its earlier records.
    An empty chunk list succeeds with chunksProcessed = 0.
    """
    result = await pipeline.ingest(request.document_id, request.chunks)
    return IngestResponse(chunks_processed=result.chunks_processed)

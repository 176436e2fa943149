"""
Health Router
Service verification endpoints only
"""

import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from embeddings.generator import EmbeddingGenerator
from embeddings.qdrant_manager import QdrantManager
from errors import VectorStoreError
from routers.deps import get_embedder, get_index

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_check():
    """API is running"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "document-tutor-api",
    }


@router.get("/qdrant")
async def qdrant_health(index: QdrantManager = Depends(get_index)):
    """Verify the vector index is reachable and report its collection"""
    try:
        info = await asyncio.to_thread(index.get_collection_info)
    except VectorStoreError as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": "qdrant", "detail": e.detail},
        )
    return {"status": "healthy", "service": "qdrant", "collection": info}


@router.get("/embeddings")
def embeddings_health(embedder: EmbeddingGenerator = Depends(get_embedder)):
    """Report the configured embedding model (no provider call)"""
    return {"status": "healthy", "service": "embeddings", "model": embedder.get_model_info()}

"""
Query Router
POST /query — grounded answer with page citations for one document
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from embeddings.schemas import RetrievedMatch
from generation.retrieval_engine import RetrievalEngine
from generation.schemas import Citation
from parsing.schemas import ApiModel
from routers.deps import get_retrieval_engine

router = APIRouter(tags=["query"])


class QueryRequest(ApiModel):
    question: Optional[str] = Field(None, description="Natural language question")
    document_id: Optional[str] = Field(None, description="Restrict retrieval to this document")
    include_matches: bool = Field(False, description="Also return the ranked retrieved chunks")


class QueryResponse(ApiModel):
    success: bool = True
    response: str
    citations: List[Citation]
    grounded: bool = True
    matches: Optional[List[RetrievedMatch]] = None


@router.post("/query", response_model=QueryResponse)
async def query_document(
    request: QueryRequest,
    engine: RetrievalEngine = Depends(get_retrieval_engine),
):
    """
    Answer a question from the document's indexed chunks.

    Example:
        POST /query
        {"question": "What is photosynthesis?", "documentId": "1712345678901_biology.pdf"}
    """
    result = await engine.answer(request.question, request.document_id, request.include_matches)
    return QueryResponse(
        response=result.response,
        citations=result.citations,
        grounded=result.grounded,
        matches=result.matches if request.include_matches else None,
    )

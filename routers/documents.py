"""
Documents Router
Upload, list, parse and index PDFs

Endpoints:
  POST /documents/upload        — store a PDF, returns its documentId
  GET  /documents               — uploaded documents + stored PDF files
  POST /documents/parse         — send a PDF to the parser, return ordered elements
  POST /documents/{id}/index    — parse → chunk → embed → index a stored document
  DELETE /documents/{id}        — drop a document's vectors, stored file and record
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from database import crud
from database.database import get_db
from database.models import DocumentStatus
from database.schemas import DocumentResponse
from embeddings.qdrant_manager import QdrantManager
from errors import DocumentParseError, NotFoundError, TutorError
from ingestion.pipeline import IngestionPipeline
from parsing.parser import UnstructuredClient
from parsing.schemas import ApiModel, ParsedElement, ParseErr
from routers.deps import get_file_store, get_index, get_ingestion_pipeline, get_parser
from services.file_store import LocalFileStore, validate_filename

router = APIRouter(prefix="/documents", tags=["documents"])

log = logging.getLogger("rag.pipeline")


class UploadResponse(ApiModel):
    success: bool = True
    document_id: str
    file_name: str


class DocumentListResponse(ApiModel):
    success: bool = True
    documents: List[DocumentResponse]
    files: List[str]


class ParseResponse(ApiModel):
    success: bool = True
    elements: List[ParsedElement]
    total_pages: Optional[int] = None


class IndexResponse(ApiModel):
    success: bool = True
    document_id: str
    chunks_processed: int
    status: str


class DeleteResponse(ApiModel):
    success: bool = True
    document_id: str
    chunks_removed: int
    file_removed: bool


@router.post("/upload", response_model=UploadResponse)
async def upload_document(
    file: UploadFile = File(...),
    store: LocalFileStore = Depends(get_file_store),
    db: Session = Depends(get_db),
):
    """Store an uploaded PDF as "{epoch_ms}_{filename}" and record it."""
    content = await file.read()
    stored = store.save(file.filename, content)
    crud.create_document(db, stored.document_id, stored.filename, str(stored.path), stored.size_bytes)
    return UploadResponse(document_id=stored.document_id, file_name=stored.filename)


@router.get("", response_model=DocumentListResponse)
def list_documents(
    store: LocalFileStore = Depends(get_file_store),
    db: Session = Depends(get_db),
):
    documents = crud.list_documents(db)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        files=store.list_pdfs(),
    )


@router.post("/parse", response_model=ParseResponse)
async def parse_document(
    file: UploadFile = File(...),
    parser: UnstructuredClient = Depends(get_parser),
):
    """
    Parse a PDF into ordered elements (no chunking, no embeddings, no DB writes).
    """
    filename = validate_filename(file.filename)
    result = await parser.parse(filename, await file.read())
    if isinstance(result, ParseErr):
        raise DocumentParseError(detail=result.reason)
    return ParseResponse(elements=result.elements, total_pages=result.total_pages)


@router.post("/{document_id}/index", response_model=IndexResponse)
async def index_document(
    document_id: str,
    store: LocalFileStore = Depends(get_file_store),
    parser: UnstructuredClient = Depends(get_parser),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
    db: Session = Depends(get_db),
):
    """
    Full pipeline for a stored document.

    Status ends as indexed, empty (nothing indexable) or failed.
    """
    document = crud.get_document(db, document_id)
    if document is None:
        raise NotFoundError("Document not found", document_id)

    content = store.read(document_id)
    parsed = await parser.parse(document.filename, content)
    if isinstance(parsed, ParseErr):
        crud.update_document_status(db, document_id, DocumentStatus.FAILED)
        raise DocumentParseError(detail=parsed.reason)

    try:
        result = await pipeline.ingest_elements(document_id, parsed.elements)
    except TutorError:
        crud.update_document_status(db, document_id, DocumentStatus.FAILED)
        raise

    status = DocumentStatus.INDEXED if result.chunks_processed else DocumentStatus.EMPTY
    crud.update_document_status(db, document_id, status, chunk_count=result.chunks_processed)
    log.info(f"[INGEST] doc={document_id}: {status.value} ({result.chunks_processed} chunks)")
    return IndexResponse(
        document_id=document_id,
        chunks_processed=result.chunks_processed,
        status=status.value,
    )


@router.delete("/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: str,
    store: LocalFileStore = Depends(get_file_store),
    index: QdrantManager = Depends(get_index),
    db: Session = Depends(get_db),
):
    """
    Remove a document from the index, the upload dir and the record store.

    Quiz attempts taken on it stay in the history.
    """
    if crud.get_document(db, document_id) is None:
        raise NotFoundError("Document not found", document_id)

    chunks_removed = await asyncio.to_thread(index.count, document_id)
    await asyncio.to_thread(index.delete_by_document, document_id)
    file_removed = store.delete(document_id)
    crud.delete_document(db, document_id)
    log.info(f"[INGEST] doc={document_id}: deleted ({chunks_removed} chunks)")
    return DeleteResponse(
        document_id=document_id,
        chunks_removed=chunks_removed,
        file_removed=file_removed,
    )

"""
Document Tutor API — Main Application
FastAPI application: PDF ingestion, grounded Q&A with page citations,
quiz generation, quiz progress and video recommendations.
"""

from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings
from database.database import Base, engine
from embeddings.generator import EmbeddingGenerator
from embeddings.qdrant_manager import QdrantManager
from errors import QuizGenerationError, TutorError, VectorStoreError
from generation.gpt_client import ChatClient
from generation.question_generator import QuizGenerator
from generation.retrieval_engine import RetrievalEngine
from ingestion.pipeline import IngestionPipeline
from parsing.parser import UnstructuredClient
from routers import documents, health, ingest, query, quiz, videos
from services.file_store import LocalFileStore
from services.video_search import YouTubeSearchClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s  %(levelname)s  %(message)s")
# request-level chatter from the provider SDKs
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables, build the shared adapters, ensure the vector collection."""
    settings = get_settings()
    Base.metadata.create_all(bind=engine)

    if not settings.openai_api_key:
        log.warning("OPENAI_API_KEY is not set; embedding and chat calls will fail")
    openai_client = AsyncOpenAI(api_key=settings.openai_api_key)

    embedder = EmbeddingGenerator(
        openai_client,
        model_name=settings.embedding_model,
        dimension=settings.embedding_dim,
        max_concurrency=settings.embed_concurrency,
    )
    index = QdrantManager.from_url(
        settings.qdrant_url,
        settings.qdrant_api_key,
        collection_name=settings.qdrant_collection,
        embedding_dim=settings.embedding_dim,
    )
    chat = ChatClient(openai_client, model=settings.gpt_model)

    try:
        index.ensure_collection()
    except VectorStoreError as e:
        # queries on a missing collection return no matches; /health/qdrant reports the outage
        log.error(f"Could not ensure Qdrant collection '{settings.qdrant_collection}': {e.detail}")

    app.state.embedder = embedder
    app.state.index = index
    app.state.ingestion_pipeline = IngestionPipeline(embedder, index, settings)
    app.state.retrieval_engine = RetrievalEngine(embedder, index, chat, settings)
    app.state.quiz_generator = QuizGenerator(chat, settings)
    app.state.parser = UnstructuredClient(
        settings.unstructured_api_url,
        settings.unstructured_api_key,
        timeout=settings.ingest_timeout_seconds,
    )
    app.state.file_store = LocalFileStore(settings.upload_dir, settings.max_upload_size)
    app.state.video_client = YouTubeSearchClient(settings.youtube_api_key)
    yield
    await openai_client.close()
    index.client.close()


app = FastAPI(
    title="Document Tutor API",
    description="PDF ingestion, grounded Q&A with page citations, and quiz generation",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Error envelope ────────────────────────────────────────────────────────────

def error_envelope(status_code: int, error: str, detail=None, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "detail": detail, **extra},
    )


@app.exception_handler(TutorError)
async def tutor_error_handler(request: Request, exc: TutorError):
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc}")
    extra = {"reason": exc.reason} if isinstance(exc, QuizGenerationError) else {}
    return error_envelope(exc.status_code, exc.error, exc.detail, **extra)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return error_envelope(400, "Invalid request", detail)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_envelope(exc.status_code, str(exc.detail))


# ─── Routers ───────────────────────────────────────────────────────────────────

app.include_router(ingest.router)       # /ingest
app.include_router(query.router)        # /query
app.include_router(quiz.router)         # /generate-quiz, /save-attempt, /get-progress
app.include_router(documents.router)    # /documents/*
app.include_router(videos.router)       # /youtube-search
app.include_router(health.router)       # /health, /health/qdrant


@app.get("/")
def root():
    return {
        "name": "Document Tutor API",
        "version": "1.0.0",
        "endpoints": {
            "docs": "/docs",
            "ingest": "/ingest",
            "query": "/query",
            "quiz": "/generate-quiz",
            "documents": "/documents",
            "health": "/health",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)

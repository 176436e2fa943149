"""
FastAPI dependencies for the shared adapters

main.py's lifespan builds one instance of each adapter on app.state;
routes depend on these functions so tests can swap them through
app.dependency_overrides.
"""

from fastapi import Request

from embeddings.generator import EmbeddingGenerator
from embeddings.qdrant_manager import QdrantManager
from generation.question_generator import QuizGenerator
from generation.retrieval_engine import RetrievalEngine
from ingestion.pipeline import IngestionPipeline
from parsing.parser import UnstructuredClient
from services.file_store import LocalFileStore
from services.video_search import YouTubeSearchClient


def get_embedder(request: Request) -> EmbeddingGenerator:
    return request.app.state.embedder


def get_index(request: Request) -> QdrantManager:
    return request.app.state.index


def get_ingestion_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.ingestion_pipeline


def get_retrieval_engine(request: Request) -> RetrievalEngine:
    return request.app.state.retrieval_engine


def get_quiz_generator(request: Request) -> QuizGenerator:
    return request.app.state.quiz_generator


def get_parser(request: Request) -> UnstructuredClient:
    return request.app.state.parser


def get_file_store(request: Request) -> LocalFileStore:
    return request.app.state.file_store


def get_video_client(request: Request) -> YouTubeSearchClient:
    return request.app.state.video_client

"""
Application configuration
All settings come from the environment (optionally a .env file).

Two distinct OpenAI models are used: one for embeddings, one for chat.
EMBEDDING_DIM must match the model that built the existing collection;
changing the embedding model invalidates the index.
"""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


def _get_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y"}


class Settings(BaseModel):
    """Runtime settings for the tutor API."""

    # ── Providers ─────────────────────────────────────────────────────────────
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536
    gpt_model: str = "gpt-4o-mini"

    # ── Vector index ──────────────────────────────────────────────────────────
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: Optional[str] = None
    qdrant_collection: str = "document_embeddings"

    # ── Record store / files ──────────────────────────────────────────────────
    database_url: str = "sqlite:///./tutor.db"
    upload_dir: str = "uploads"
    max_upload_size: int = 52428800  # 50MB

    # ── External services ─────────────────────────────────────────────────────
    unstructured_api_url: str = "https://api.unstructuredapp.io/general/v0/general"
    unstructured_api_key: str = ""
    youtube_api_key: str = ""

    # ── Chunking / retrieval ──────────────────────────────────────────────────
    chunk_window_size: int = 500
    min_chunk_length: int = 50
    top_k: int = 5
    embed_concurrency: int = 8

    # ── Generation ────────────────────────────────────────────────────────────
    answer_temperature: float = 0.3
    answer_max_tokens: int = 800
    quiz_temperature: float = 0.5
    quiz_max_tokens: int = 6000
    strict_quiz_validation: bool = True

    # ── Timeouts (seconds) ────────────────────────────────────────────────────
    ingest_timeout_seconds: float = 60.0
    query_timeout_seconds: float = 30.0
    quiz_timeout_seconds: float = 120.0

    @classmethod
    def from_env(cls, env_file: str = ".env") -> "Settings":
        """Load settings from environment variables, falling back to defaults."""
        if os.path.exists(env_file):
            load_dotenv(env_file)

        defaults = cls()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", defaults.openai_api_key),
            embedding_model=os.getenv("EMBEDDING_MODEL", defaults.embedding_model),
            embedding_dim=int(os.getenv("EMBEDDING_DIM", str(defaults.embedding_dim))),
            gpt_model=os.getenv("GPT_MODEL", defaults.gpt_model),
            qdrant_url=os.getenv("QDRANT_URL", defaults.qdrant_url),
            qdrant_api_key=os.getenv("QDRANT_API_KEY") or None,
            qdrant_collection=os.getenv("QDRANT_COLLECTION", defaults.qdrant_collection),
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            upload_dir=os.getenv("UPLOAD_DIR", defaults.upload_dir),
            max_upload_size=int(os.getenv("MAX_UPLOAD_SIZE", str(defaults.max_upload_size))),
            unstructured_api_url=os.getenv("UNSTRUCTURED_API_URL", defaults.unstructured_api_url),
            unstructured_api_key=os.getenv("UNSTRUCTURED_API_KEY", defaults.unstructured_api_key),
            youtube_api_key=os.getenv("YOUTUBE_API_KEY", defaults.youtube_api_key),
            chunk_window_size=int(os.getenv("CHUNK_WINDOW_SIZE", str(defaults.chunk_window_size))),
            min_chunk_length=int(os.getenv("MIN_CHUNK_LENGTH", str(defaults.min_chunk_length))),
            top_k=int(os.getenv("TOP_K", str(defaults.top_k))),
            embed_concurrency=int(os.getenv("EMBED_CONCURRENCY", str(defaults.embed_concurrency))),
            answer_temperature=float(os.getenv("ANSWER_TEMPERATURE", str(defaults.answer_temperature))),
            answer_max_tokens=int(os.getenv("ANSWER_MAX_TOKENS", str(defaults.answer_max_tokens))),
            quiz_temperature=float(os.getenv("QUIZ_TEMPERATURE", str(defaults.quiz_temperature))),
            quiz_max_tokens=int(os.getenv("QUIZ_MAX_TOKENS", str(defaults.quiz_max_tokens))),
            strict_quiz_validation=_get_bool(os.getenv("STRICT_QUIZ_VALIDATION"), defaults.strict_quiz_validation),
            ingest_timeout_seconds=float(os.getenv("INGEST_TIMEOUT_SECONDS", str(defaults.ingest_timeout_seconds))),
            query_timeout_seconds=float(os.getenv("QUERY_TIMEOUT_SECONDS", str(defaults.query_timeout_seconds))),
            quiz_timeout_seconds=float(os.getenv("QUIZ_TIMEOUT_SECONDS", str(defaults.quiz_timeout_seconds))),
        )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (FastAPI dependency)."""
    return Settings.from_env()

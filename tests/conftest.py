"""
Pytest configuration and fixtures for the tutor API tests.

Provider doubles:
- OpenAI: a Mock whose embeddings.create / chat.completions.create are
  AsyncMocks. Embeddings are keyword-count vectors (helpers.keyword_vector)
  so nearest-neighbour results are predictable.
- Qdrant: the real client in local in-memory mode.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from qdrant_client import QdrantClient

from config import Settings
from embeddings.generator import EmbeddingGenerator
from embeddings.qdrant_manager import QdrantManager
from generation.gpt_client import ChatClient
from helpers import TEST_DIM, chat_response, embedding_response, keyword_vector


@pytest.fixture
def settings(tmp_path):
    """Settings for tests: small vectors, short timeouts, temp upload dir."""
    return Settings(
        openai_api_key="test-key",
        embedding_dim=TEST_DIM,
        qdrant_collection="test_chunks",
        database_url="sqlite://",
        upload_dir=str(tmp_path / "uploads"),
        youtube_api_key="yt-key",
        embed_concurrency=4,
        ingest_timeout_seconds=5.0,
        query_timeout_seconds=5.0,
        quiz_timeout_seconds=5.0,
    )


@pytest.fixture
def fake_openai():
    """AsyncOpenAI stand-in with keyword embeddings and a canned chat reply."""
    client = Mock()

    async def _embed(input, model, **kwargs):
        return embedding_response(keyword_vector(input))

    client.embeddings.create = AsyncMock(side_effect=_embed)
    client.chat.completions.create = AsyncMock(
        return_value=chat_response("Mitochondria release energy for the cell (p. 2).")
    )
    return client


@pytest.fixture
def embedder(fake_openai, settings):
    return EmbeddingGenerator(
        fake_openai,
        dimension=settings.embedding_dim,
        max_concurrency=settings.embed_concurrency,
    )


@pytest.fixture
def index(settings):
    manager = QdrantManager(
        QdrantClient(":memory:"),
        collection_name=settings.qdrant_collection,
        embedding_dim=settings.embedding_dim,
    )
    manager.ensure_collection()
    yield manager
    manager.client.close()


@pytest.fixture
def chat(fake_openai):
    return ChatClient(fake_openai, model="gpt-4o-mini")

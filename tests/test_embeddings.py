"""
Tests for the OpenAI embedding adapter.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from embeddings.generator import EmbeddingGenerator
from errors import (
    EmbeddingInputError,
    EmbeddingProviderError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)

from helpers import embedding_response, keyword_vector

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/embeddings")


def _client(side_effect):
    client = Mock()
    client.embeddings.create = AsyncMock(side_effect=side_effect)
    return client


class TestEmbed:
    def test_returns_vector_and_uses_model(self, embedder, fake_openai):
        vector = asyncio.run(embedder.embed("light and chlorophyll"))
        assert vector == keyword_vector("light and chlorophyll")
        fake_openai.embeddings.create.assert_awaited_once_with(
            input="light and chlorophyll", model="text-embedding-3-small"
        )

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_rejected_without_call(self, embedder, fake_openai, text):
        with pytest.raises(EmbeddingInputError):
            asyncio.run(embedder.embed(text))
        fake_openai.embeddings.create.assert_not_awaited()

    def test_rate_limit_is_mapped(self):
        error = openai.RateLimitError(
            "slow down", response=httpx.Response(429, request=REQUEST), body=None
        )
        generator = EmbeddingGenerator(_client(error))
        with pytest.raises(EmbeddingRateLimitError) as exc_info:
            asyncio.run(generator.embed("text"))
        assert exc_info.value.status_code == 502

    def test_timeout_is_mapped(self):
        generator = EmbeddingGenerator(_client(openai.APITimeoutError(request=REQUEST)))
        with pytest.raises(EmbeddingTimeoutError) as exc_info:
            asyncio.run(generator.embed("text"))
        assert exc_info.value.status_code == 504

    def test_other_api_errors_are_provider_errors(self):
        generator = EmbeddingGenerator(_client(openai.APIConnectionError(request=REQUEST)))
        with pytest.raises(EmbeddingProviderError):
            asyncio.run(generator.embed("text"))

    def test_empty_response_data(self):
        generator = EmbeddingGenerator(_client([SimpleNamespace(data=[])]))
        with pytest.raises(EmbeddingProviderError):
            asyncio.run(generator.embed("text"))


class TestEmbedBatch:
    def test_preserves_input_order(self, embedder):
        texts = ["water history", "cell energy", "light"]
        vectors = asyncio.run(embedder.embed_batch(texts))
        assert vectors == [keyword_vector(t) for t in texts]

    def test_empty_batch(self, embedder, fake_openai):
        assert asyncio.run(embedder.embed_batch([])) == []
        fake_openai.embeddings.create.assert_not_awaited()

    def test_blank_text_rejects_whole_batch_before_any_call(self, embedder, fake_openai):
        with pytest.raises(EmbeddingInputError) as exc_info:
            asyncio.run(embedder.embed_batch(["fine", " ", "also fine"]))
        assert "position 1" in exc_info.value.detail
        fake_openai.embeddings.create.assert_not_awaited()

    def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def _slow(input, model, **kwargs):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return embedding_response([1.0])

        generator = EmbeddingGenerator(_client(_slow), max_concurrency=3)
        vectors = asyncio.run(generator.embed_batch([f"text {i}" for i in range(12)]))
        assert len(vectors) == 12
        assert peak == 3

    def test_per_call_concurrency_override(self):
        peak = 0
        in_flight = 0

        async def _slow(input, model, **kwargs):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return embedding_response([1.0])

        generator = EmbeddingGenerator(_client(_slow), max_concurrency=8)
        asyncio.run(generator.embed_batch([f"text {i}" for i in range(6)], max_concurrency=1))
        assert peak == 1

    def test_first_failure_cancels_pending_requests(self):
        finished = []

        async def _maybe_fail(input, model, **kwargs):
            if input == "bad":
                raise openai.APIConnectionError(request=REQUEST)
            await asyncio.sleep(5)
            finished.append(input)
            return embedding_response([1.0])

        generator = EmbeddingGenerator(_client(_maybe_fail), max_concurrency=8)
        with pytest.raises(EmbeddingProviderError):
            asyncio.run(generator.embed_batch(["a", "b", "bad", "c"]))
        assert finished == []


def test_model_info(embedder):
    info = embedder.get_model_info()
    assert info["provider"] == "openai"
    assert info["max_concurrency"] == 4
    assert info["embedding_dimension"] == 8

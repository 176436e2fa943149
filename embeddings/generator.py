"""
Embedding Generator
Converts text to vector embeddings using OpenAI text-embedding-3-small

Architecture:
- Model: text-embedding-3-small (OpenAI), 1536 dimensions
- One request per text; batches fan out with bounded concurrency
  (asyncio.Semaphore) to stay under provider rate limits
- No caching, no retry: failures surface as typed errors and the caller
  decides whether to resubmit. A failed text is never replaced by a
  zero vector.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from errors import (
    EmbeddingInputError,
    EmbeddingProviderError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)

log = logging.getLogger(__name__)


class EmbeddingGenerator:
    """
    Generate embeddings for text through an injected AsyncOpenAI client.

    Model: text-embedding-3-small
    - Dimensions: 1536
    - Cost: $0.02 per 1M tokens
    """

    DEFAULT_MODEL = "text-embedding-3-small"
    EMBEDDING_DIM = 1536
    DEFAULT_CONCURRENCY = 8

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str = DEFAULT_MODEL,
        dimension: int = EMBEDDING_DIM,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ):
        """
        Args:
            client: AsyncOpenAI client (or a compatible fake in tests)
            model_name: OpenAI embedding model name
            dimension: Expected vector size; must match the vector collection
            max_concurrency: Upper bound of in-flight requests in embed_batch
        """
        self.client = client
        self.model_name = model_name
        self.dimension = dimension
        self.max_concurrency = max(1, max_concurrency)

    async def embed(self, text: str) -> List[float]:
        """
        Generate the embedding for a single text.

        Raises:
            EmbeddingInputError: text is empty or whitespace-only
            EmbeddingRateLimitError / EmbeddingTimeoutError / EmbeddingProviderError
        """
        if not text or not text.strip():
            raise EmbeddingInputError()

        try:
            response = await self.client.embeddings.create(input=text, model=self.model_name)
        except openai.RateLimitError as e:
            raise EmbeddingRateLimitError(detail=str(e)) from e
        except openai.APITimeoutError as e:
            raise EmbeddingTimeoutError(detail=str(e)) from e
        except openai.APIError as e:
            raise EmbeddingProviderError(detail=str(e)) from e

        if not response.data:
            raise EmbeddingProviderError(detail="Provider returned no embedding data")
        return list(response.data[0].embedding)

    async def embed_batch(
        self,
        texts: Sequence[str],
        max_concurrency: Optional[int] = None,
    ) -> List[List[float]]:
        """
        Embed many texts concurrently, at most `max_concurrency` in flight.

        Results are returned in input order. The first failure cancels the
        requests still pending and is re-raised, so a batch either fully
        succeeds or fails as a whole.
        """
        if not texts:
            return []
        for position, text in enumerate(texts):
            if not text or not text.strip():
                raise EmbeddingInputError(detail=f"Text at position {position} is empty")

        semaphore = asyncio.Semaphore(max(1, max_concurrency or self.max_concurrency))

        async def _bounded(text: str) -> List[float]:
            async with semaphore:
                return await self.embed(text)

        tasks = [asyncio.create_task(_bounded(t)) for t in texts]
        try:
            vectors = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        log.info(f"[EMBED] {len(vectors)} embeddings generated ({self.model_name})")
        return list(vectors)

    def get_model_info(self) -> dict:
        """Get information about the configured model"""
        return {
            "model_name": self.model_name,
            "embedding_dimension": self.dimension,
            "provider": "openai",
            "max_concurrency": self.max_concurrency,
        }

"""
Shared OpenAI chat helper for the generation layer.

Used by:
  - retrieval_engine.py    (grounded answers)
  - question_generator.py  (quiz generation)

Model: gpt-4o-mini  (override with GPT_MODEL env var, e.g. "gpt-4o")
"""

import openai
from openai import AsyncOpenAI

from errors import ChatProviderError, UpstreamTimeoutError

DEFAULT_SYSTEM = "You are a helpful tutor. Output only what is asked."


class ChatClient:
    """Chat Completions wrapper around an injected AsyncOpenAI client."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini"):
        self.client = client
        self.model = model

    async def call_gpt(
        self,
        prompt: str,
        system: str = DEFAULT_SYSTEM,
        temperature: float = 0.4,
        max_tokens: int = 2048,
    ) -> str:
        """
        Call OpenAI Chat Completions and return the assistant message text.

        Args:
            prompt:      User-turn message (the actual instruction/question)
            system:      System prompt
            temperature: Sampling temperature (lower = more deterministic)
            max_tokens:  Max response tokens

        Returns:
            Raw string content of the model response ("" if the model sent none)
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as e:
            raise UpstreamTimeoutError("Chat model timed out", str(e)) from e
        except openai.APIError as e:
            raise ChatProviderError(detail=str(e)) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

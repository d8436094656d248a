"""
OpenAI Completion Provider

Implementation using OpenAI's Chat Completions API. Any OpenAI-compatible
gateway (OpenRouter included) works through OPENAI_BASE_URL.
"""
from typing import Optional, Sequence
import logging

from openai import AsyncOpenAI

from .base import LLMProvider, LLMError, LLMRateLimitError
from ..config import settings

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI (or OpenAI-compatible) chat completions."""

    def __init__(self):
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAI provider")
        self.client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )

    async def complete(
        self,
        messages: Sequence[dict],
        model: Optional[str] = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> str:
        """Complete a conversation using the Chat Completions API."""
        try:
            response = await self.client.chat.completions.create(
                model=model or settings.openai_chat_model,
                messages=[{"role": m["role"], "content": m["content"]} for m in messages],
                max_tokens=max_tokens,
                temperature=temperature,
            )

            return response.choices[0].message.content or ""

        except Exception as e:
            if "rate_limit" in str(e).lower():
                raise LLMRateLimitError(f"OpenAI rate limit: {e}")
            raise LLMError(f"OpenAI error: {e}")

"""
Google Gemini Completion Provider

Implementation using Google's Generative AI SDK.
"""
from typing import Optional, Sequence
import logging

import google.generativeai as genai

from .base import LLMProvider, LLMError, LLMRateLimitError
from ..config import settings

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Google Gemini API implementation.

    System messages become the model's system instruction; assistant
    turns are sent with Gemini's "model" role.
    """

    def __init__(self):
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required for Gemini provider")
        genai.configure(api_key=settings.gemini_api_key)

    @staticmethod
    def _split_messages(messages: Sequence[dict]) -> tuple[Optional[str], list[dict]]:
        system_parts = []
        contents = []
        for message in messages:
            if message["role"] == "system":
                system_parts.append(message["content"])
                continue
            role = "model" if message["role"] == "assistant" else "user"
            contents.append({"role": role, "parts": [message["content"]]})
        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    async def complete(
        self,
        messages: Sequence[dict],
        model: Optional[str] = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> str:
        """Complete a conversation using the Gemini Generative API."""
        system_instruction, contents = self._split_messages(messages)
        try:
            gen_model = genai.GenerativeModel(
                model_name=model or settings.gemini_chat_model,
                system_instruction=system_instruction,
            )

            generation_config = genai.GenerationConfig(
                max_output_tokens=max_tokens,
                temperature=temperature,
            )

            response = await gen_model.generate_content_async(
                contents,
                generation_config=generation_config,
            )

            return response.text or ""

        except Exception as e:
            error_str = str(e).lower()
            if "quota" in error_str or "rate" in error_str:
                raise LLMRateLimitError(f"Gemini rate limit: {e}")
            raise LLMError(f"Gemini error: {e}")

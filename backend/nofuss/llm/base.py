"""
Completion Service Base Class

Abstract interface every text-completion provider implements.
The rest of the system only ever calls `complete(messages)`, so a
deterministic stub can stand in for a real provider in tests.
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence
import logging

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for completion service errors."""
    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded."""
    pass


class LLMProvider(ABC):
    """
    Abstract base class for completion providers.

    Calls are made once: no retry loop lives here, retrying is
    the caller's decision.
    """

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[dict],
        model: Optional[str] = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> str:
        """
        Complete a conversation.

        Args:
            messages: Ordered {"role", "content"} dicts (system/assistant/user)
            model: Model name to use, provider default if omitted
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature

        Returns:
            The assistant's reply text
        """
        pass


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()

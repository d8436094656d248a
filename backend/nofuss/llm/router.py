"""
Completion Provider Router

Provider factory and task-to-model routing.
"""
from typing import Optional
import logging

from .base import LLMProvider
from ..config import settings

logger = logging.getLogger(__name__)


# Singleton provider instance
_provider_instance: Optional[LLMProvider] = None


def get_llm_provider() -> LLMProvider:
    """
    Get or create the completion provider instance.

    Provider is selected based on LLM_PROVIDER environment variable.
    Also used as a FastAPI dependency, so tests can override it.
    """
    global _provider_instance

    if _provider_instance is None:
        settings.validate_provider_key()

        if settings.llm_provider == "openai":
            from .openai_provider import OpenAIProvider
            logger.info("Initializing OpenAI provider")
            _provider_instance = OpenAIProvider()
        elif settings.llm_provider == "gemini":
            from .gemini_provider import GeminiProvider
            logger.info("Initializing Gemini provider")
            _provider_instance = GeminiProvider()
        else:
            raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")

    return _provider_instance


# Task to model mapping
TASK_MODELS = {
    "idea_chat": "chat",
    "spec_extraction": "extraction",
}


def get_model_for_task(task: str) -> str:
    """Get the model name for a given task."""
    return settings.get_model(TASK_MODELS.get(task, "chat"))

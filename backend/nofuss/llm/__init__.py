# Completion Providers
from .base import LLMProvider, LLMError, LLMRateLimitError, strip_code_fence
from .router import get_llm_provider, get_model_for_task

__all__ = [
    "LLMProvider",
    "LLMError",
    "LLMRateLimitError",
    "strip_code_fence",
    "get_llm_provider",
    "get_model_for_task",
]

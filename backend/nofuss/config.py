"""
NoFuss Configuration

Environment-based configuration with fail-fast validation.
API keys are required and must not be hardcoded.
"""
from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM Provider Selection
    llm_provider: Literal["openai", "gemini"] = "openai"

    # API Keys - Required based on provider
    openai_api_key: str = ""
    gemini_api_key: str = ""

    # OpenAI-compatible gateway (e.g. https://openrouter.ai/api/v1)
    openai_base_url: Optional[str] = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./nofuss.db"

    # Authentication provider (Supabase-style GET {auth_url}/user)
    auth_url: str = "http://localhost:54321/auth/v1"
    auth_api_key: str = ""
    auth_timeout_seconds: float = 10.0

    # Debug mode (verbose low-level logging)
    debug: bool = False

    # Follow-through mode (structured step-by-step execution tracing)
    follow_through: bool = False

    # Model configurations
    openai_chat_model: str = "gpt-4o"
    openai_extraction_model: str = "gpt-4o-mini"

    gemini_chat_model: str = "gemini-2.5-flash"
    gemini_extraction_model: str = "gemini-2.0-flash"

    # Workflow rules
    min_user_turns: int = 3
    history_window: int = 2
    deploy_chat_preview_chars: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @field_validator("openai_api_key", "gemini_api_key", "auth_api_key", mode="before")
    @classmethod
    def validate_not_placeholder(cls, v: str) -> str:
        """Ensure API keys are not placeholder values."""
        if v and "your-" in v.lower():
            return ""
        return v

    def validate_provider_key(self) -> None:
        """Validate that the required API key for the selected provider is set."""
        if self.llm_provider == "openai" and not self.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is required when LLM_PROVIDER=openai. "
                "Please set it in your .env file or environment."
            )
        if self.llm_provider == "gemini" and not self.gemini_api_key:
            raise ValueError(
                "GEMINI_API_KEY environment variable is required when LLM_PROVIDER=gemini. "
                "Please set it in your .env file or environment."
            )

    def get_model(self, task: Literal["chat", "extraction"]) -> str:
        """Get the model name for the specified task and current provider."""
        if self.llm_provider == "openai":
            return {
                "chat": self.openai_chat_model,
                "extraction": self.openai_extraction_model,
            }[task]
        else:
            return {
                "chat": self.gemini_chat_model,
                "extraction": self.gemini_extraction_model,
            }[task]


# Global settings instance
settings = Settings()

"""
Idea Schemas

The structured specification extracted from the idea conversation,
plus request/response models for the idea endpoints.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .base import CamelModel, CamelRequest


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class ConversationMessage(BaseModel):
    """A single chat message."""
    role: Literal["system", "assistant", "user"]
    content: str

    model_config = {"extra": "forbid"}


class DesignPreferences(BaseModel):
    """Look-and-feel preferences."""
    color_scheme: str
    style: str
    layout: str

    @field_validator("color_scheme", "style", "layout")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _require_text(v)


class IdeaSpecification(BaseModel):
    """
    Output of idea clarification.

    All-or-nothing: every field is required and non-blank.
    Keys stay snake_case on the wire and in storage.
    """
    purpose: str
    target_audience: str
    key_features: List[str] = Field(..., min_length=1)
    design_preferences: DesignPreferences
    content_sections: List[str] = Field(..., min_length=1)

    @field_validator("purpose", "target_audience")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("key_features", "content_sections")
    @classmethod
    def validate_entries(cls, v: List[str]) -> List[str]:
        for item in v:
            _require_text(item)
        return v


class IdeaChatRequest(CamelRequest):
    """POST /idea/chat body."""
    project_id: str = Field(..., min_length=1)
    messages: List[ConversationMessage] = Field(..., min_length=1)
    is_summary_request: bool = False


class IdeaChatResponse(BaseModel):
    """POST /idea/chat reply."""
    response: str


class FinalizeIdeaRequest(CamelRequest):
    """POST /idea/finalize body."""
    project_id: str = Field(..., min_length=1)
    messages: List[ConversationMessage] = Field(..., min_length=1)


class FinalizeIdeaResponse(CamelModel):
    """Stored specification and the project's new position."""
    summary: IdeaSpecification
    stage: str
    progress: int


class ExportedProject(CamelModel):
    """Project fields handed to the build stage."""
    id: str
    name: str
    description: Optional[str] = None
    external_build_handle: str


class IdeaExportResponse(CamelModel):
    """GET /idea/export/{projectId} reply."""
    summary: IdeaSpecification
    project: ExportedProject

"""
Build Schemas

Request/response models for the build stage endpoints.
"""
from typing import List
from pydantic import Field

from .base import CamelModel, CamelRequest
from .idea import ConversationMessage


class BuildRequest(CamelRequest):
    """POST /build/save and /build/proceed body."""
    project_id: str = Field(..., min_length=1)


class BuildContextResponse(CamelModel):
    """Opening conversation of the build assistant."""
    messages: List[ConversationMessage]


class BuildSaveResponse(CamelModel):
    success: bool
    stage: str
    progress: int


class BuildProceedResponse(CamelModel):
    stage: str
    progress: int

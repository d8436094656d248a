"""
Project Schemas

Pydantic models for project API requests and responses.
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import Field

from .base import CamelModel, CamelRequest
from .idea import IdeaSpecification


class ProjectCreate(CamelRequest):
    """Request to create a new project."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectUpdate(CamelRequest):
    """Request to update a project."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    specification: Optional[IdeaSpecification] = None


class ProjectResponse(CamelModel):
    """Project data returned from API."""
    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    external_build_handle: str
    specification: Optional[IdeaSpecification] = None
    deployment_status: str
    deployment_url: Optional[str] = None
    stage: str
    progress: int
    created_at: datetime
    updated_at: datetime


class ProjectEnvelope(CamelModel):
    """Single project wrapper: {project}."""
    project: ProjectResponse


class ProjectListResponse(CamelModel):
    """List of projects."""
    projects: list[ProjectResponse]


class StageResponse(CamelModel):
    """Derived workflow position."""
    stage: str
    progress: int


class HistoryEventResponse(CamelModel):
    """History log entry."""
    id: str
    project_id: str
    action: str
    sequence: int
    metadata: dict[str, Any] = {}
    created_at: datetime


class HistoryListResponse(CamelModel):
    """List of history entries."""
    events: list[HistoryEventResponse]
    total: int

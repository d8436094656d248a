"""
Deploy Schemas

Pydantic models for deployment status, options and instructions.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from .base import CamelModel, CamelRequest
from .idea import ConversationMessage


class DeployStatusUpdate(CamelRequest):
    """POST /deploy/status body. `status` is validated by the state machine."""
    project_id: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    deployment_url: Optional[str] = None


class DeployStatusUpdateResponse(CamelModel):
    success: bool
    status: str
    deployment_url: Optional[str] = None


class DeployStatusResponse(CamelModel):
    status: str
    deployment_url: Optional[str] = None


class DeploymentOption(BaseModel):
    """Catalogue entry (snake_case keys, as served to the deploy page)."""
    id: str
    name: str
    description: str
    beginner_friendly: bool
    free_tier: bool
    steps: List[str]


class DeploymentOptionsResponse(BaseModel):
    options: List[DeploymentOption]


class DeploymentStep(BaseModel):
    title: str
    description: str
    details: List[str]


class DeploymentResource(BaseModel):
    title: str
    url: str


class DeploymentInstructions(BaseModel):
    title: str
    description: str
    steps: List[DeploymentStep]
    resources: List[DeploymentResource]


class DeploymentInstructionsResponse(BaseModel):
    instructions: DeploymentInstructions


class DeployChatRequest(CamelRequest):
    """POST /deploy/chat body."""
    project_id: str = Field(..., min_length=1)
    messages: List[ConversationMessage] = Field(..., min_length=1)


class DeployChatResponse(BaseModel):
    role: str = "assistant"
    content: str

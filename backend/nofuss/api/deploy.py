"""
Deploy API

Deployment status, the option catalogue, per-platform instructions
and the deploy helper chat.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_current_user
from ..database import get_db
from ..engine.conversation import ConversationLog
from ..engine.deployment import DeploymentStatusMachine
from ..schemas.deploy import (
    DeployStatusUpdate,
    DeployStatusUpdateResponse,
    DeployStatusResponse,
    DeploymentOptionsResponse,
    DeploymentInstructionsResponse,
    DeployChatRequest,
    DeployChatResponse,
)
from ..services.deploy_catalog import get_deployment_options, get_deployment_instructions
from ..services.deploy_helper import DeployHelper
from ..services.project_store import ProjectStore

router = APIRouter(prefix="/deploy", tags=["deploy"])


@router.post("/status", response_model=DeployStatusUpdateResponse)
async def set_deployment_status(
    data: DeployStatusUpdate,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record a new deployment status (and the live URL once deployed)."""
    machine = DeploymentStatusMachine(ProjectStore(db))
    project = await machine.set_status(
        data.project_id,
        owner_id,
        data.status,
        url=data.deployment_url,
    )
    return DeployStatusUpdateResponse(
        success=True,
        status=project.deployment_status.value,
        deployment_url=project.deployment_url,
    )


@router.get("/status", response_model=DeployStatusResponse)
async def get_deployment_status(
    project_id: str = Query(..., alias="projectId", min_length=1),
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current deployment status of a project."""
    machine = DeploymentStatusMachine(ProjectStore(db))
    return DeployStatusResponse(**await machine.get_status(project_id, owner_id))


@router.get("/options", response_model=DeploymentOptionsResponse)
async def deployment_options(
    owner_id: str = Depends(get_current_user),
):
    """Static catalogue of deployment options."""
    return DeploymentOptionsResponse(options=get_deployment_options())


@router.get("/instructions/{platform}", response_model=DeploymentInstructionsResponse)
async def deployment_instructions(
    platform: str,
    project_id: str = Query(..., alias="projectId", min_length=1),
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Step-by-step instructions for one platform, personalized with the project name."""
    project = await ProjectStore(db).get(project_id, owner_id)
    return DeploymentInstructionsResponse(
        instructions=get_deployment_instructions(platform, project.name),
    )


@router.post("/chat", response_model=DeployChatResponse)
async def deploy_chat(
    data: DeployChatRequest,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Answer a deployment question."""
    helper = DeployHelper(ProjectStore(db))
    content = await helper.chat(
        data.project_id,
        owner_id,
        ConversationLog.from_messages(data.messages),
    )
    return DeployChatResponse(content=content)

"""
Projects API

Endpoints for project management, derived stage and history.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_current_user
from ..database import get_db
from ..engine.stage_machine import StageMachine, stored_specification
from ..errors import InvalidInput
from ..models.history import HistoryAction, HistoryEvent
from ..models.project import Project
from ..schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectEnvelope,
    ProjectListResponse,
    StageResponse,
    HistoryEventResponse,
    HistoryListResponse,
)
from ..services.build_environment import BuildEnvironment, get_build_environment
from ..services.project_store import ProjectStore

router = APIRouter(prefix="/projects", tags=["projects"])


async def project_to_response(project: Project, machine: StageMachine) -> ProjectResponse:
    """Convert Project model to response schema."""
    snapshot = await machine.snapshot(project)
    return ProjectResponse(
        id=project.id,
        owner_id=project.owner_id,
        name=project.name,
        description=project.description,
        external_build_handle=project.external_build_handle,
        specification=stored_specification(project),
        deployment_status=project.deployment_status.value,
        deployment_url=project.deployment_url,
        stage=snapshot["stage"],
        progress=snapshot["progress"],
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def _event_to_response(event: HistoryEvent) -> HistoryEventResponse:
    return HistoryEventResponse(
        id=event.id,
        project_id=event.project_id,
        action=event.action.value,
        sequence=event.sequence,
        metadata=event.payload,
        created_at=event.created_at,
    )


@router.post("", response_model=ProjectEnvelope)
async def create_project(
    data: ProjectCreate,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    build_env: BuildEnvironment = Depends(get_build_environment),
):
    """Create a new project and provision its build environment."""
    store = ProjectStore(db, build_env)
    project = await store.create(owner_id, data.name, data.description)
    return ProjectEnvelope(project=await project_to_response(project, StageMachine(store)))


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's projects, newest first."""
    store = ProjectStore(db)
    machine = StageMachine(store)
    projects = await store.list(owner_id)
    return ProjectListResponse(
        projects=[await project_to_response(p, machine) for p in projects],
    )


@router.get("/{project_id}", response_model=ProjectEnvelope)
async def get_project(
    project_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a project by ID."""
    store = ProjectStore(db)
    project = await store.get(project_id, owner_id)
    return ProjectEnvelope(project=await project_to_response(project, StageMachine(store)))


@router.put("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, description or the whole specification."""
    fields = data.model_dump(exclude_unset=True)
    if "specification" in fields:
        fields["specification"] = data.specification

    store = ProjectStore(db)
    project = await store.update(project_id, owner_id, **fields)
    return ProjectEnvelope(project=await project_to_response(project, StageMachine(store)))


@router.get("/{project_id}/stage", response_model=StageResponse)
async def get_stage(
    project_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Derived stage and progress of a project."""
    store = ProjectStore(db)
    project = await store.get(project_id, owner_id)
    return StageResponse(**await StageMachine(store).snapshot(project))


@router.get("/{project_id}/history", response_model=HistoryListResponse)
async def get_history(
    project_id: str,
    action: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Audit history in append order."""
    action_filter = None
    if action:
        try:
            action_filter = HistoryAction(action)
        except ValueError:
            raise InvalidInput(f"Unknown history action: {action}")

    events, total = await ProjectStore(db).history(
        project_id,
        owner_id,
        action=action_filter,
        limit=limit,
        offset=offset,
    )
    return HistoryListResponse(
        events=[_event_to_response(e) for e in events],
        total=total,
    )

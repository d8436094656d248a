"""
Build API

Build-assistant context, saving progress and moving on to deployment.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_current_user
from ..database import get_db
from ..engine.stage_machine import StageMachine, stored_specification
from ..prompts.build import build_initial_messages
from ..schemas.build import (
    BuildRequest,
    BuildContextResponse,
    BuildSaveResponse,
    BuildProceedResponse,
)
from ..schemas.idea import ConversationMessage
from ..services.build_environment import BuildEnvironment, get_build_environment
from ..services.project_store import ProjectStore

router = APIRouter(prefix="/build", tags=["build"])


@router.get("/context/{project_id}", response_model=BuildContextResponse)
async def build_context(
    project_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Opening messages of the build assistant, seeded from the specification."""
    project = await ProjectStore(db).get(project_id, owner_id)
    messages = build_initial_messages(stored_specification(project))
    return BuildContextResponse(messages=[ConversationMessage(**m) for m in messages])


@router.post("/save", response_model=BuildSaveResponse)
async def save_progress(
    data: BuildRequest,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    build_env: BuildEnvironment = Depends(get_build_environment),
):
    """Persist the build environment's current state."""
    store = ProjectStore(db, build_env)
    machine = StageMachine(store, build_env=build_env)
    project = await machine.save_progress(data.project_id, owner_id)
    return BuildSaveResponse(success=True, **await machine.snapshot(project))


@router.post("/proceed", response_model=BuildProceedResponse)
async def proceed_to_deployment(
    data: BuildRequest,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    build_env: BuildEnvironment = Depends(get_build_environment),
):
    """Save progress, then enter the deploy stage."""
    store = ProjectStore(db, build_env)
    machine = StageMachine(store, build_env=build_env)
    project = await machine.proceed_to_deployment(data.project_id, owner_id)
    return BuildProceedResponse(**await machine.snapshot(project))

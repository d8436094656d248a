"""
Idea API

Idea clarification chat, finalize, and export to the build stage.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_current_user
from ..database import get_db
from ..engine.conversation import ConversationLog
from ..engine.idea_chat import IdeaChat
from ..engine.spec_extractor import SpecExtractor
from ..engine.stage_machine import StageMachine, stored_specification
from ..errors import InvalidInput
from ..llm import LLMProvider, get_llm_provider
from ..schemas.idea import (
    IdeaChatRequest,
    IdeaChatResponse,
    FinalizeIdeaRequest,
    FinalizeIdeaResponse,
    ExportedProject,
    IdeaExportResponse,
)
from ..services.project_store import ProjectStore

router = APIRouter(prefix="/idea", tags=["idea"])


@router.post("/chat", response_model=IdeaChatResponse)
async def idea_chat(
    data: IdeaChatRequest,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    llm: LLMProvider = Depends(get_llm_provider),
):
    """
    Send the conversation to the idea consultant.

    With isSummaryRequest the reply is also parsed and, when it is a
    complete specification, stored on the project.
    """
    chat = IdeaChat(ProjectStore(db), llm)
    response = await chat.respond(
        data.project_id,
        owner_id,
        ConversationLog.from_messages(data.messages),
        is_summary_request=data.is_summary_request,
    )
    return IdeaChatResponse(response=response)


@router.post("/finalize", response_model=FinalizeIdeaResponse)
async def finalize_idea(
    data: FinalizeIdeaRequest,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    llm: LLMProvider = Depends(get_llm_provider),
):
    """Extract the specification and move the project to build."""
    store = ProjectStore(db)
    machine = StageMachine(store, extractor=SpecExtractor(llm))

    spec = await machine.finalize_idea(
        data.project_id,
        owner_id,
        ConversationLog.from_messages(data.messages),
    )
    project = await store.get(data.project_id, owner_id)
    snapshot = await machine.snapshot(project)

    return FinalizeIdeaResponse(
        summary=spec,
        stage=snapshot["stage"],
        progress=snapshot["progress"],
    )


@router.get("/export/{project_id}", response_model=IdeaExportResponse)
async def export_idea(
    project_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Specification and project identity for the build stage. Read-only."""
    project = await ProjectStore(db).get(project_id, owner_id)

    spec = stored_specification(project)
    if spec is None:
        raise InvalidInput("Project has no idea summary")

    return IdeaExportResponse(
        summary=spec,
        project=ExportedProject(
            id=project.id,
            name=project.name,
            description=project.description,
            external_build_handle=project.external_build_handle,
        ),
    )

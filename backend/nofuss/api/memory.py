"""
Memory API

Memory bank views, pinning, deletion and collections.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_current_user
from ..database import get_db
from ..errors import InvalidInput
from ..memory.bank import MemoryBank
from ..memory.content import decode_content, render_content
from ..memory.views import MemoryFilter, toggle_tag
from ..models.memory import Memory, MemoryCollection, MemoryType
from ..models.project import ProjectStage
from ..schemas.memory import (
    MemoryResponse,
    MemoryEnvelope,
    MemoryGroup,
    MemoryViewResponse,
    MemoryPinUpdate,
    MemoryCollectionCreate,
    MemoryCollectionAdd,
    MemoryCollectionResponse,
    MemoryCollectionListResponse,
    MemoryCollectionDetailResponse,
)

router = APIRouter(prefix="/projects/{project_id}", tags=["memory"])


def _memory_to_response(memory: Memory) -> MemoryResponse:
    """Convert Memory to response schema with a rendered preview."""
    content = decode_content(memory.content)
    return MemoryResponse(
        id=memory.id,
        project_id=memory.project_id,
        title=memory.title,
        content=content,
        preview=render_content(content),
        memory_type=memory.memory_type.value,
        stage=memory.stage.value,
        tags=memory.tag_list,
        is_pinned=memory.is_pinned,
        created_at=memory.created_at,
    )


def _collection_to_response(collection: MemoryCollection) -> MemoryCollectionResponse:
    return MemoryCollectionResponse(
        id=collection.id,
        project_id=collection.project_id,
        name=collection.name,
        description=collection.description,
        memory_ids=[item.memory_id for item in collection.items],
        created_at=collection.created_at,
    )


def _parse_enum(enum_cls, value: Optional[str], label: str):
    if not value or value == "all":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidInput(f"Unknown {label}: {value}")


@router.get("/memories", response_model=MemoryViewResponse)
async def list_memories(
    project_id: str,
    type: Optional[str] = None,
    stage: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    clicked_tag: Optional[str] = Query(None, alias="toggleTag"),
    view: str = Query("timeline", pattern="^(timeline|category|stage)$"),
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Memory bank for a project.

    Filters are conjunctive. Pinned memories come first in their own
    section and are also listed in their group. toggleTag applies a tag
    click to the active tag filter.
    """
    active_tag = tag or None
    if clicked_tag:
        active_tag = toggle_tag(active_tag, clicked_tag)

    memory_filter = MemoryFilter(
        project_id=project_id,
        memory_type=_parse_enum(MemoryType, type, "memory type"),
        stage=_parse_enum(ProjectStage, stage, "stage"),
        tag=active_tag,
        search=search or None,
    )
    result = await MemoryBank(db).view(owner_id, memory_filter, grouping=view)

    return MemoryViewResponse(
        view=result["view"],
        pinned=[_memory_to_response(m) for m in result["pinned"]],
        groups=[
            MemoryGroup(key=key, memories=[_memory_to_response(m) for m in memories])
            for key, memories in result["groups"]
        ],
        total=result["total"],
        active_tag=memory_filter.tag,
    )


@router.patch("/memories/{memory_id}", response_model=MemoryEnvelope)
async def update_memory(
    project_id: str,
    memory_id: str,
    data: MemoryPinUpdate,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pin or unpin a memory."""
    memory = await MemoryBank(db).toggle_pin(project_id, owner_id, memory_id, data.is_pinned)
    return MemoryEnvelope(memory=_memory_to_response(memory))


@router.delete("/memories/{memory_id}")
async def delete_memory(
    project_id: str,
    memory_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a memory. The history event it came from is kept."""
    await MemoryBank(db).delete(project_id, owner_id, memory_id)
    return {"success": True}


@router.get("/memory-collections", response_model=MemoryCollectionListResponse)
async def list_collections(
    project_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    collections = await MemoryBank(db).list_collections(project_id, owner_id)
    return MemoryCollectionListResponse(
        collections=[_collection_to_response(c) for c in collections],
    )


@router.post("/memory-collections", response_model=MemoryCollectionResponse)
async def create_collection(
    project_id: str,
    data: MemoryCollectionCreate,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    collection = await MemoryBank(db).create_collection(
        project_id,
        owner_id,
        data.name,
        data.description,
    )
    return _collection_to_response(collection)


@router.get("/memory-collections/{collection_id}", response_model=MemoryCollectionDetailResponse)
async def get_collection(
    project_id: str,
    collection_id: str,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """A collection and its memories in insertion order."""
    bank = MemoryBank(db)
    collection = await bank.get_collection(project_id, owner_id, collection_id)
    memories = await bank.collection_memories(collection)
    return MemoryCollectionDetailResponse(
        collection=_collection_to_response(collection),
        memories=[_memory_to_response(m) for m in memories],
    )


@router.post("/memory-collections/{collection_id}/items", response_model=MemoryCollectionResponse)
async def add_to_collection(
    project_id: str,
    collection_id: str,
    data: MemoryCollectionAdd,
    owner_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    collection = await MemoryBank(db).add_to_collection(
        project_id,
        owner_id,
        collection_id,
        data.memory_id,
    )
    return _collection_to_response(collection)

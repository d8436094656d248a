"""
Memory Schemas

Pydantic models for memory content, memory API requests and responses.
"""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter

from .base import CamelModel, CamelRequest
from .idea import ConversationMessage, IdeaSpecification


class TextContent(BaseModel):
    """Plain-text memory content."""
    kind: Literal["text"] = "text"
    text: str


class ChatContent(BaseModel):
    """A chat exchange, or a single (truncated) chat message."""
    kind: Literal["chat"] = "chat"
    messages: List[ConversationMessage] = []
    message: Optional[str] = None


class SpecificationContent(BaseModel):
    """Snapshot of an idea specification."""
    kind: Literal["specification"] = "specification"
    summary: IdeaSpecification


MemoryContent = Annotated[
    Union[TextContent, ChatContent, SpecificationContent],
    Field(discriminator="kind"),
]

memory_content_adapter = TypeAdapter(MemoryContent)


class MemoryResponse(CamelModel):
    """Memory data returned from API."""
    id: str
    project_id: str
    title: str
    content: MemoryContent
    preview: str
    memory_type: str
    stage: str
    tags: List[str] = []
    is_pinned: bool = False
    created_at: datetime


class MemoryEnvelope(CamelModel):
    memory: MemoryResponse


class MemoryGroup(CamelModel):
    """One section of a grouped memory view."""
    key: str
    memories: List[MemoryResponse]


class MemoryViewResponse(CamelModel):
    """Pinned section first, then the groups of the active view."""
    view: str
    pinned: List[MemoryResponse]
    groups: List[MemoryGroup]
    total: int
    active_tag: Optional[str] = None


class MemoryPinUpdate(CamelRequest):
    """PATCH body: pinning is the only mutable field."""
    is_pinned: bool


class MemoryCollectionCreate(CamelRequest):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class MemoryCollectionAdd(CamelRequest):
    memory_id: str = Field(..., min_length=1)


class MemoryCollectionResponse(CamelModel):
    id: str
    project_id: str
    name: str
    description: Optional[str] = None
    memory_ids: List[str] = []
    created_at: datetime


class MemoryCollectionListResponse(CamelModel):
    collections: List[MemoryCollectionResponse]


class MemoryCollectionDetailResponse(CamelModel):
    collection: MemoryCollectionResponse
    memories: List[MemoryResponse]

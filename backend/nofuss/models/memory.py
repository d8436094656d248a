"""
Memory Models

User-facing annotations derived from project history.
Memories are a view layer: pinning and deleting them never
touches the history events they came from.
"""
from datetime import datetime
from sqlalchemy import (
    String, Text, Boolean, DateTime, Integer,
    ForeignKey, Enum as SQLEnum, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List
import enum
import json
import uuid

from ..database import Base, utcnow
from .project import ProjectStage


class MemoryType(str, enum.Enum):
    """Types of memories."""
    IDEA = "idea"
    BUILD = "build"
    DEPLOY = "deploy"
    USER_PREFERENCE = "user_preference"
    PROJECT_EVOLUTION = "project_evolution"


class Memory(Base):
    """
    A single browsable memory.

    `content` holds a JSON-encoded tagged union (see schemas.memory):
    plain text, a chat payload or a specification snapshot.
    """
    __tablename__ = "memories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # History event this memory was derived from. No FK cascade:
    # memory rows come and go, history stays.
    source_event_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    memory_type: Mapped[MemoryType] = mapped_column(
        SQLEnum(MemoryType),
        nullable=False,
        index=True
    )
    stage: Mapped[ProjectStage] = mapped_column(
        SQLEnum(ProjectStage),
        nullable=False,
        index=True
    )

    # Tags (JSON array as string for SQLite)
    tags: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False
    )

    # Relationships
    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="memories"
    )
    collection_items: Mapped[List["MemoryCollectionItem"]] = relationship(
        "MemoryCollectionItem",
        back_populates="memory",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_memory_project_type", "project_id", "memory_type"),
        Index("idx_memory_project_stage", "project_id", "stage"),
    )

    @property
    def tag_list(self) -> List[str]:
        return json.loads(self.tags) if self.tags else []

    @property
    def content_data(self) -> dict:
        return json.loads(self.content)

    def __repr__(self) -> str:
        return f"<Memory(id={self.id}, type={self.memory_type}, pinned={self.is_pinned})>"


class MemoryCollection(Base):
    """Named, purely organizational grouping of memories."""
    __tablename__ = "memory_collections"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False
    )

    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="memory_collections"
    )
    items: Mapped[List["MemoryCollectionItem"]] = relationship(
        "MemoryCollectionItem",
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="MemoryCollectionItem.position"
    )

    def __repr__(self) -> str:
        return f"<MemoryCollection(id={self.id}, name={self.name})>"


class MemoryCollectionItem(Base):
    """Membership of a memory in a collection, in insertion order."""
    __tablename__ = "memory_collection_items"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    collection_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("memory_collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    memory_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("memories.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    collection: Mapped["MemoryCollection"] = relationship(
        "MemoryCollection",
        back_populates="items"
    )
    memory: Mapped["Memory"] = relationship(
        "Memory",
        back_populates="collection_items"
    )

    __table_args__ = (
        Index("idx_collection_memory", "collection_id", "memory_id", unique=True),
    )

"""
Project Model

Projects are the top-level container for a website being produced.
All reads and writes are scoped by owner_id to prevent cross-owner access.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Integer, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List
import enum
import json
import uuid

from ..database import Base, utcnow


class ProjectStage(str, enum.Enum):
    """Position of a project in the guided workflow."""
    IDEA = "idea"
    BUILD = "build"
    DEPLOY = "deploy"


class DeploymentStatus(str, enum.Enum):
    """Publishing status of a project."""
    NOT_DEPLOYED = "not_deployed"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    FAILED = "failed"


class Project(Base):
    """
    A website project owned by a single user.

    The stage is not stored: it is derived from the specification,
    the recorded transition events and the deployment status
    (see engine.stage_machine.derive_stage).
    """
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Provisioned once at creation, never changed
    external_build_handle: Mapped[str] = mapped_column(String(255), nullable=False)

    # IdeaSpecification as a JSON string (snake_case keys, stored verbatim)
    specification: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    deployment_status: Mapped[DeploymentStatus] = mapped_column(
        SQLEnum(DeploymentStatus),
        default=DeploymentStatus.NOT_DEPLOYED,
        nullable=False
    )
    deployment_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Optimistic concurrency guard for per-row updates
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    history: Mapped[List["HistoryEvent"]] = relationship(
        "HistoryEvent",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="HistoryEvent.sequence"
    )
    memories: Mapped[List["Memory"]] = relationship(
        "Memory",
        back_populates="project",
        cascade="all, delete-orphan"
    )
    memory_collections: Mapped[List["MemoryCollection"]] = relationship(
        "MemoryCollection",
        back_populates="project",
        cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_project_owner_created", "owner_id", "created_at"),
    )

    @property
    def specification_data(self) -> Optional[dict]:
        """Decoded specification, or None while the idea is open."""
        if not self.specification:
            return None
        return json.loads(self.specification)

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name})>"

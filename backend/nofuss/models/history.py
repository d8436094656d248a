"""
Project History Model

Append-only audit log for everything that happens to a project.
Rows are never updated or deleted by the application.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Integer, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional
import enum
import json
import uuid

from ..database import Base, utcnow


class HistoryAction(str, enum.Enum):
    """Actions recorded in project history."""
    CHAT_MESSAGE = "chat_message"
    GENERATE_SUMMARY = "generate_summary"
    EXPORT_TO_BUILD = "export_to_build"
    SAVE_BUILD_PROGRESS = "save_build_progress"
    DEPLOYMENT_STATUS_CHANGE = "deployment_status_change"
    DEPLOY_CHAT_MESSAGE = "deploy_chat_message"
    # Explicit forward-transition marker, metadata {from_stage, to_stage}
    STAGE_TRANSITION = "stage_transition"


class HistoryEvent(Base):
    """
    A single audit record.

    `sequence` is monotonic per project so replay order is exact
    even when two events share a timestamp.
    """
    __tablename__ = "project_history"

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

    action: Mapped[HistoryAction] = mapped_column(
        SQLEnum(HistoryAction),
        nullable=False,
        index=True
    )

    # Action-specific payload as JSON string (can't use 'metadata' - reserved by SQLAlchemy)
    extra_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True
    )

    # Relationship
    project: Mapped["Project"] = relationship(
        "Project",
        back_populates="history"
    )

    __table_args__ = (
        Index("idx_history_project_sequence", "project_id", "sequence", unique=True),
        Index("idx_history_project_action", "project_id", "action"),
    )

    @property
    def payload(self) -> dict:
        """Decoded metadata."""
        return json.loads(self.extra_data) if self.extra_data else {}

    def __repr__(self) -> str:
        return f"<HistoryEvent(id={self.id}, action={self.action}, seq={self.sequence})>"

"""
Project Store

Owner-scoped persistence for projects and their append-only history.
Every history append also materializes the event's memories.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..database import utcnow
from ..errors import ConcurrentModification, InvalidInput, NotFound, UpstreamUnavailable
from ..memory.materializer import derive_memories
from ..models.history import HistoryAction, HistoryEvent
from ..models.project import Project, ProjectStage
from ..schemas.idea import IdeaSpecification
from .build_environment import BuildEnvironment

logger = logging.getLogger(__name__)

# Actions that move the derived stage forward
STAGE_ACTIONS = (HistoryAction.EXPORT_TO_BUILD, HistoryAction.STAGE_TRANSITION)


class ProjectStore:
    """
    CRUD for projects plus the history log.

    Every query filters by owner. A project that exists but belongs to
    someone else is reported exactly like a missing one.
    """

    def __init__(self, db: AsyncSession, build_env: Optional[BuildEnvironment] = None):
        self.db = db
        self.build_env = build_env

    async def commit(self) -> None:
        """Commit, mapping stale writes and storage failures to domain errors."""
        try:
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"Stale project write rejected: {e}")
            raise ConcurrentModification("Project was modified by another request")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Storage failure: {e}")
            raise UpstreamUnavailable(f"Storage failure: {e}")

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create(self, owner_id: str, name: str, description: Optional[str] = None) -> Project:
        """Provision a build environment and insert the project."""
        if not name or not name.strip():
            raise InvalidInput("Project name is required")
        if self.build_env is None:
            raise UpstreamUnavailable("No build environment configured")

        try:
            handle = await self.build_env.provision(name, description)
        except Exception as e:
            logger.error(f"Build environment provisioning failed: {e}")
            raise UpstreamUnavailable(f"Build environment provisioning failed: {e}")
        if not handle:
            raise UpstreamUnavailable("Build environment returned an empty handle")

        project = Project(
            owner_id=owner_id,
            name=name.strip(),
            description=description,
            external_build_handle=handle,
        )
        self.db.add(project)
        await self.commit()

        logger.info(f"Created project {project.id} for owner {owner_id}")
        return project

    async def list(self, owner_id: str) -> List[Project]:
        """Owner's projects, newest first."""
        stmt = (
            select(Project)
            .where(Project.owner_id == owner_id)
            .order_by(Project.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, project_id: str, owner_id: str) -> Project:
        stmt = select(Project).where(
            Project.id == project_id,
            Project.owner_id == owner_id,
        )
        result = await self.db.execute(stmt)
        project = result.scalar_one_or_none()

        if not project:
            raise NotFound("Project not found")
        return project

    async def update(self, project_id: str, owner_id: str, **fields: Any) -> Project:
        """
        Update mutable project fields.

        The build handle is fixed at creation. A specification is replaced
        as a whole and must validate on its own.
        """
        project = await self.get(project_id, owner_id)

        handle = fields.pop("external_build_handle", None)
        if handle is not None and handle != project.external_build_handle:
            raise InvalidInput("external_build_handle cannot be changed")

        if "name" in fields:
            name = fields.pop("name")
            if name is None or not str(name).strip():
                raise InvalidInput("Project name is required")
            project.name = str(name).strip()

        if "description" in fields:
            project.description = fields.pop("description")

        if "specification" in fields:
            spec = fields.pop("specification")
            if spec is None:
                raise InvalidInput("specification cannot be removed")
            if not isinstance(spec, IdeaSpecification):
                try:
                    spec = IdeaSpecification.model_validate(spec)
                except ValidationError as e:
                    raise InvalidInput(f"Invalid specification: {e.error_count()} problem(s)")
            project.specification = json.dumps(spec.model_dump())

        if fields:
            raise InvalidInput(f"Unknown project fields: {', '.join(sorted(fields))}")

        project.updated_at = utcnow()
        await self.commit()
        return project

    async def touch(self, project: Project) -> Project:
        """Bump updated_at."""
        project.updated_at = utcnow()
        await self.commit()
        return project

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def _next_sequence(self, project_id: str) -> int:
        stmt = select(func.coalesce(func.max(HistoryEvent.sequence), 0)).where(
            HistoryEvent.project_id == project_id
        )
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) + 1

    async def _insert_event(
        self,
        project_id: str,
        action: HistoryAction,
        metadata: Dict[str, Any],
    ) -> HistoryEvent:
        payload = dict(metadata)
        payload.setdefault("timestamp", utcnow().isoformat())

        event = HistoryEvent(
            project_id=project_id,
            action=action,
            extra_data=json.dumps(payload),
            sequence=await self._next_sequence(project_id),
            created_at=utcnow(),
        )
        self.db.add(event)
        await self.db.flush()

        memories = derive_memories(event)
        self.db.add_all(memories)
        await self.db.flush()
        return event

    async def append_history(
        self,
        project_id: str,
        action: HistoryAction,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[HistoryEvent]:
        """
        Best-effort audit append.

        Runs in a savepoint after the primary mutation has committed.
        Failures are logged and swallowed; None is returned.
        """
        try:
            async with self.db.begin_nested():
                event = await self._insert_event(project_id, action, metadata or {})
        except (SQLAlchemyError, ValueError, KeyError) as e:
            logger.warning(f"Failed to record {action.value} for project {project_id}: {e}")
            return None

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"Failed to commit {action.value} for project {project_id}: {e}")
            return None

        logger.debug(f"History {action.value} #{event.sequence} for project {project_id}")
        return event

    async def record_transition(
        self,
        project_id: str,
        from_stage: ProjectStage,
        to_stage: ProjectStage,
    ) -> HistoryEvent:
        """Append the stage_transition marker. Failures propagate."""
        try:
            event = await self._insert_event(
                project_id,
                HistoryAction.STAGE_TRANSITION,
                {"from_stage": from_stage.value, "to_stage": to_stage.value},
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to record transition for project {project_id}: {e}")
            raise UpstreamUnavailable(f"Failed to record stage transition: {e}")
        await self.commit()

        logger.info(f"Project {project_id} moved {from_stage.value} -> {to_stage.value}")
        return event

    async def stage_events(self, project_id: str) -> List[HistoryEvent]:
        """Events that the derived stage depends on."""
        stmt = (
            select(HistoryEvent)
            .where(
                HistoryEvent.project_id == project_id,
                HistoryEvent.action.in_(STAGE_ACTIONS),
            )
            .order_by(HistoryEvent.sequence)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def history(
        self,
        project_id: str,
        owner_id: str,
        action: Optional[HistoryAction] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[HistoryEvent], int]:
        """Ordered history page and the total matching count."""
        await self.get(project_id, owner_id)

        conditions = [HistoryEvent.project_id == project_id]
        if action is not None:
            conditions.append(HistoryEvent.action == action)

        count_stmt = select(func.count()).select_from(HistoryEvent).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(HistoryEvent)
            .where(*conditions)
            .order_by(HistoryEvent.sequence)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

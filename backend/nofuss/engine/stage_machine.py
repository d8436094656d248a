"""
Stage Machine

Idea -> Build -> Deploy. The stage is never stored; it is derived from
the specification, the recorded forward-transition events and the
deployment status, so it can never disagree with the history log.
"""
import logging
from typing import Dict, Iterable, Optional

from ..config import settings
from ..errors import InsufficientConversation, InvalidInput, UpstreamUnavailable
from ..models.history import HistoryAction, HistoryEvent
from ..models.project import DeploymentStatus, Project, ProjectStage
from ..schemas.idea import IdeaSpecification
from ..services.build_environment import BuildEnvironment
from ..services.project_store import ProjectStore
from ..tracer import trace_section, trace_step, trace_call, trace_result, trace_transition
from .conversation import ConversationLog
from .spec_extractor import SpecExtractor

logger = logging.getLogger(__name__)

STAGE_ORDER = [ProjectStage.IDEA, ProjectStage.BUILD, ProjectStage.DEPLOY]

STAGE_PROGRESS = {
    ProjectStage.IDEA: 25,
    ProjectStage.BUILD: 50,
    ProjectStage.DEPLOY: 75,
}


def derive_stage(
    has_specification: bool,
    actions: Iterable[HistoryEvent],
    deployment_status: DeploymentStatus,
) -> ProjectStage:
    """Current stage of a project from its persisted facts."""
    exported = False
    for event in actions:
        if event.action == HistoryAction.STAGE_TRANSITION:
            if event.payload.get("to_stage") == ProjectStage.DEPLOY.value:
                return ProjectStage.DEPLOY
        elif event.action == HistoryAction.EXPORT_TO_BUILD:
            exported = True

    # A deployment in any state means the build was handed over
    if deployment_status != DeploymentStatus.NOT_DEPLOYED:
        return ProjectStage.DEPLOY

    if has_specification or exported:
        return ProjectStage.BUILD
    return ProjectStage.IDEA


def progress_percent(stage: ProjectStage, deployment_status: DeploymentStatus) -> int:
    if stage == ProjectStage.DEPLOY and deployment_status == DeploymentStatus.DEPLOYED:
        return 100
    return STAGE_PROGRESS[stage]


def stage_at_least(stage: ProjectStage, minimum: ProjectStage) -> bool:
    return STAGE_ORDER.index(stage) >= STAGE_ORDER.index(minimum)


class StageMachine:
    """
    Enforces the legal stage sequence and its side effects.

    Transitions only move forward. Each one either completes fully
    (state written, history appended) or leaves the project unchanged.
    """

    def __init__(
        self,
        store: ProjectStore,
        extractor: Optional[SpecExtractor] = None,
        build_env: Optional[BuildEnvironment] = None,
    ):
        self.store = store
        self.extractor = extractor
        self.build_env = build_env

    async def stage_of(self, project: Project) -> ProjectStage:
        events = await self.store.stage_events(project.id)
        return derive_stage(
            project.specification is not None,
            events,
            project.deployment_status,
        )

    async def snapshot(self, project: Project) -> Dict[str, object]:
        """{stage, progress} for a project."""
        stage = await self.stage_of(project)
        return {
            "stage": stage.value,
            "progress": progress_percent(stage, project.deployment_status),
        }

    async def finalize_idea(
        self,
        project_id: str,
        owner_id: str,
        log: ConversationLog,
    ) -> IdeaSpecification:
        """
        Extract the specification and hand the project to the build stage.

        Refuses to run before the user has taken enough turns. A failed
        extraction leaves the project exactly as it was.
        """
        trace_section("Finalize Idea")
        project = await self.store.get(project_id, owner_id)

        turns = log.user_turns()
        if turns < settings.min_user_turns:
            raise InsufficientConversation(
                f"At least {settings.min_user_turns} user messages are needed "
                f"before the idea can be finalized ({turns} so far)"
            )
        if self.extractor is None:
            raise UpstreamUnavailable("No specification extractor configured")

        from_stage = await self.stage_of(project)
        spec = await self.extractor.extract(log)

        trace_step("engine.stage_machine", "Storing specification")
        project = await self.store.update(project_id, owner_id, specification=spec)

        await self.store.append_history(
            project.id,
            HistoryAction.EXPORT_TO_BUILD,
            {"specification": spec.model_dump()},
        )

        to_stage = await self.stage_of(project)
        trace_transition("engine.stage_machine", from_stage.value, to_stage.value)
        return spec

    async def save_progress(self, project_id: str, owner_id: str) -> Project:
        """Ask the build environment to persist its state."""
        project = await self.store.get(project_id, owner_id)

        stage = await self.stage_of(project)
        if not stage_at_least(stage, ProjectStage.BUILD):
            raise InvalidInput("Build progress can only be saved once the idea is finalized")
        if self.build_env is None:
            raise UpstreamUnavailable("No build environment configured")

        trace_call("engine.stage_machine", "build_env.save_state", project.external_build_handle)
        try:
            saved = await self.build_env.save_state(project.external_build_handle)
        except Exception as e:
            trace_result("engine.stage_machine", "build_env.save_state", False, str(e))
            logger.error(f"Build environment save failed for {project.id}: {e}")
            raise UpstreamUnavailable(f"Build environment save failed: {e}")
        trace_result("engine.stage_machine", "build_env.save_state", saved)

        if not saved:
            raise UpstreamUnavailable("Build environment could not save progress")

        project = await self.store.touch(project)
        await self.store.append_history(
            project.id,
            HistoryAction.SAVE_BUILD_PROGRESS,
            {"external_build_handle": project.external_build_handle},
        )
        return project

    async def proceed_to_deployment(self, project_id: str, owner_id: str) -> Project:
        """
        Save build progress, then move to the deploy stage.

        Idempotent once in deploy: progress is saved again but no second
        transition is recorded.
        """
        trace_section("Proceed To Deployment")
        project = await self.store.get(project_id, owner_id)

        stage = await self.stage_of(project)
        if stage == ProjectStage.IDEA:
            raise InvalidInput("Finalize the idea before proceeding to deployment")

        project = await self.save_progress(project_id, owner_id)

        if stage == ProjectStage.BUILD:
            await self.store.record_transition(project.id, ProjectStage.BUILD, ProjectStage.DEPLOY)
            trace_transition("engine.stage_machine", ProjectStage.BUILD.value, ProjectStage.DEPLOY.value)
        return project


def stored_specification(project: Project) -> Optional[IdeaSpecification]:
    """The project's specification as a model, or None."""
    data = project.specification_data
    if data is None:
        return None
    return IdeaSpecification.model_validate(data)

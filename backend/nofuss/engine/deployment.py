"""
Deployment Status Machine

Publishing status of a project: not_deployed -> deploying -> deployed | failed.
"""
import logging
from typing import Dict, Optional, Set, Tuple

from ..errors import InvalidStatus
from ..models.history import HistoryAction
from ..models.project import DeploymentStatus, Project
from ..services.project_store import ProjectStore
from ..tracer import trace_transition

logger = logging.getLogger(__name__)

# Documented graph. Other moves between valid values are accepted but logged.
EXPECTED_TRANSITIONS: Set[Tuple[DeploymentStatus, DeploymentStatus]] = {
    (DeploymentStatus.NOT_DEPLOYED, DeploymentStatus.DEPLOYING),
    (DeploymentStatus.DEPLOYING, DeploymentStatus.DEPLOYED),
    (DeploymentStatus.DEPLOYING, DeploymentStatus.FAILED),
    (DeploymentStatus.FAILED, DeploymentStatus.DEPLOYING),
    (DeploymentStatus.DEPLOYED, DeploymentStatus.DEPLOYING),
}


def parse_status(value: str) -> DeploymentStatus:
    try:
        return DeploymentStatus(value)
    except ValueError:
        raise InvalidStatus(f"Invalid status: {value}")


class DeploymentStatusMachine:
    """
    Sets and reads deployment status.

    deployment_url is kept only while the status is deployed, and cleared
    on every other status.
    """

    def __init__(self, store: ProjectStore):
        self.store = store

    async def set_status(
        self,
        project_id: str,
        owner_id: str,
        new_status: str,
        url: Optional[str] = None,
    ) -> Project:
        # Validated before anything is read or written
        status = parse_status(new_status)

        project = await self.store.get(project_id, owner_id)
        previous = project.deployment_status

        if previous != status and (previous, status) not in EXPECTED_TRANSITIONS:
            logger.info(
                f"Project {project.id}: deployment status {previous.value} -> "
                f"{status.value} is outside the usual flow"
            )

        project.deployment_status = status
        project.deployment_url = url if status == DeploymentStatus.DEPLOYED else None
        project = await self.store.touch(project)

        trace_transition("engine.deployment", previous.value, status.value)

        await self.store.append_history(
            project.id,
            HistoryAction.DEPLOYMENT_STATUS_CHANGE,
            {"status": status.value, "deployment_url": project.deployment_url},
        )
        return project

    async def get_status(self, project_id: str, owner_id: str) -> Dict[str, Optional[str]]:
        project = await self.store.get(project_id, owner_id)
        return {
            "status": project.deployment_status.value,
            "deployment_url": project.deployment_url,
        }

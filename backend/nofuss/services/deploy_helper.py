"""
Deploy Helper

Keyword-routed assistant for the deploy stage. Each question is logged
to project history with a shortened preview of the message.
"""
import logging

from ..config import settings
from ..errors import InvalidInput
from ..models.history import HistoryAction
from ..prompts.deploy import deploy_helper_reply
from ..engine.conversation import ConversationLog
from .project_store import ProjectStore

logger = logging.getLogger(__name__)


def message_preview(content: str, limit: int) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


class DeployHelper:
    """Answers deployment questions for one project."""

    def __init__(self, store: ProjectStore):
        self.store = store

    async def chat(self, project_id: str, owner_id: str, log: ConversationLog) -> str:
        last = log.last_user_message()
        if last is None:
            raise InvalidInput("No user message found")

        project = await self.store.get(project_id, owner_id)

        await self.store.append_history(
            project.id,
            HistoryAction.DEPLOY_CHAT_MESSAGE,
            {"message": message_preview(last.content, settings.deploy_chat_preview_chars)},
        )
        return deploy_helper_reply(last.content, project.name)

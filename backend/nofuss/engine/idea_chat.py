"""
Idea Chat

One turn of the idea-clarification conversation.
"""
import logging

from ..config import settings
from ..errors import NoFussError, UpstreamUnavailable
from ..llm import LLMProvider, LLMError, get_model_for_task
from ..models.history import HistoryAction
from ..schemas.idea import ConversationMessage
from ..services.project_store import ProjectStore
from ..tracer import trace_section, trace_input, trace_call, trace_result, trace_step
from .conversation import ConversationLog
from .spec_extractor import SpecExtractor

logger = logging.getLogger(__name__)


class IdeaChat:
    """
    Relays the conversation to the completion service and records it.

    Nothing is written until the completion call has returned. A summary
    request additionally tries to store the reply as the specification;
    an unparsable reply is logged and the chat answer is still returned.
    """

    def __init__(self, store: ProjectStore, llm: LLMProvider):
        self.store = store
        self.llm = llm

    async def respond(
        self,
        project_id: str,
        owner_id: str,
        log: ConversationLog,
        is_summary_request: bool = False,
    ) -> str:
        trace_section("Idea Chat")
        trace_input("engine.idea_chat", "messages", len(log))

        project = await self.store.get(project_id, owner_id)

        trace_call("engine.idea_chat", "llm.complete", "chat model")
        try:
            response = await self.llm.complete(
                log.as_payload(),
                model=get_model_for_task("idea_chat"),
            )
        except LLMError as e:
            trace_result("engine.idea_chat", "llm.complete", False, str(e))
            logger.error(f"Idea chat completion failed: {e}")
            raise UpstreamUnavailable(str(e))
        trace_result("engine.idea_chat", "llm.complete", True, response)

        transcript = log.copy()
        transcript.append(ConversationMessage(role="assistant", content=response))

        action = HistoryAction.GENERATE_SUMMARY if is_summary_request else HistoryAction.CHAT_MESSAGE
        await self.store.append_history(
            project.id,
            action,
            {"messages": [m.model_dump() for m in transcript.tail(settings.history_window)]},
        )

        if is_summary_request:
            await self._store_summary(project_id, owner_id, response)

        return response

    async def _store_summary(self, project_id: str, owner_id: str, response: str) -> None:
        trace_step("engine.idea_chat", "Storing summary reply as specification")
        try:
            spec = SpecExtractor.parse(response)
            await self.store.update(project_id, owner_id, specification=spec)
        except NoFussError as e:
            logger.warning(f"Summary reply for project {project_id} not stored: {e.message}")

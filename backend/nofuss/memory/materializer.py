"""
Memory Materializer

Derives browsable memories from history events at append time.
"""
import json
from typing import Callable, Dict, List

from ..models.history import HistoryAction, HistoryEvent
from ..models.memory import Memory, MemoryType
from ..models.project import ProjectStage
from ..schemas.idea import ConversationMessage, IdeaSpecification
from ..schemas.memory import ChatContent, MemoryContent, SpecificationContent, TextContent
from .content import encode_content


def _memory(
    event: HistoryEvent,
    title: str,
    content: MemoryContent,
    memory_type: MemoryType,
    stage: ProjectStage,
    tags: List[str],
) -> Memory:
    return Memory(
        project_id=event.project_id,
        source_event_id=event.id,
        title=title[:255],
        content=encode_content(content),
        memory_type=memory_type,
        stage=stage,
        tags=json.dumps(list(dict.fromkeys(tags))),
        created_at=event.created_at,
    )


def _chat_messages(payload: dict) -> List[ConversationMessage]:
    return [ConversationMessage.model_validate(m) for m in payload.get("messages", [])]


def _from_chat(event: HistoryEvent, payload: dict) -> List[Memory]:
    return [_memory(
        event,
        "Idea conversation",
        ChatContent(messages=_chat_messages(payload)),
        MemoryType.IDEA,
        ProjectStage.IDEA,
        ["chat", "idea"],
    )]


def _from_summary(event: HistoryEvent, payload: dict) -> List[Memory]:
    return [_memory(
        event,
        "Specification requested",
        ChatContent(messages=_chat_messages(payload)),
        MemoryType.IDEA,
        ProjectStage.IDEA,
        ["summary", "idea"],
    )]


def _from_export(event: HistoryEvent, payload: dict) -> List[Memory]:
    spec = IdeaSpecification.model_validate(payload["specification"])
    prefs = spec.design_preferences
    return [
        _memory(
            event,
            "Website specification",
            SpecificationContent(summary=spec),
            MemoryType.IDEA,
            ProjectStage.BUILD,
            ["specification", "milestone"],
        ),
        _memory(
            event,
            "Design preferences",
            TextContent(text=(
                f"Color scheme: {prefs.color_scheme}\n"
                f"Style: {prefs.style}\n"
                f"Layout: {prefs.layout}"
            )),
            MemoryType.USER_PREFERENCE,
            ProjectStage.IDEA,
            ["design"],
        ),
    ]


def _from_save(event: HistoryEvent, payload: dict) -> List[Memory]:
    return [_memory(
        event,
        "Build progress saved",
        TextContent(text="Saved the current state of the build environment."),
        MemoryType.BUILD,
        ProjectStage.BUILD,
        ["build"],
    )]


def _from_transition(event: HistoryEvent, payload: dict) -> List[Memory]:
    to_stage = ProjectStage(payload["to_stage"])
    return [_memory(
        event,
        f"Moved to {to_stage.value} stage",
        TextContent(text=f"Project moved from {payload.get('from_stage')} to {to_stage.value}."),
        MemoryType.PROJECT_EVOLUTION,
        to_stage,
        ["milestone", to_stage.value],
    )]


def _from_status(event: HistoryEvent, payload: dict) -> List[Memory]:
    status = payload["status"]
    text = f"Deployment status changed to {status}."
    if payload.get("deployment_url"):
        text += f" Live at {payload['deployment_url']}"
    return [_memory(
        event,
        f"Deployment {status.replace('_', ' ')}",
        TextContent(text=text),
        MemoryType.DEPLOY,
        ProjectStage.DEPLOY,
        ["deployment", status],
    )]


def _from_deploy_chat(event: HistoryEvent, payload: dict) -> List[Memory]:
    return [_memory(
        event,
        "Deployment question",
        ChatContent(message=payload.get("message", "")),
        MemoryType.DEPLOY,
        ProjectStage.DEPLOY,
        ["chat", "deployment"],
    )]


MATERIALIZERS: Dict[HistoryAction, Callable[[HistoryEvent, dict], List[Memory]]] = {
    HistoryAction.CHAT_MESSAGE: _from_chat,
    HistoryAction.GENERATE_SUMMARY: _from_summary,
    HistoryAction.EXPORT_TO_BUILD: _from_export,
    HistoryAction.SAVE_BUILD_PROGRESS: _from_save,
    HistoryAction.STAGE_TRANSITION: _from_transition,
    HistoryAction.DEPLOYMENT_STATUS_CHANGE: _from_status,
    HistoryAction.DEPLOY_CHAT_MESSAGE: _from_deploy_chat,
}


def derive_memories(event: HistoryEvent) -> List[Memory]:
    """Memories for one history event (unsaved)."""
    return MATERIALIZERS[event.action](event, event.payload)

# Engine Modules
from .conversation import ConversationLog
from .spec_extractor import SpecExtractor
from .idea_chat import IdeaChat
from .stage_machine import StageMachine, derive_stage, progress_percent
from .deployment import DeploymentStatusMachine

__all__ = [
    "ConversationLog",
    "SpecExtractor",
    "IdeaChat",
    "StageMachine",
    "derive_stage",
    "progress_percent",
    "DeploymentStatusMachine",
]

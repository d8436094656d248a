# NoFuss Models
from .project import Project, ProjectStage, DeploymentStatus
from .history import HistoryEvent, HistoryAction
from .memory import Memory, MemoryType, MemoryCollection, MemoryCollectionItem

__all__ = [
    "Project",
    "ProjectStage",
    "DeploymentStatus",
    "HistoryEvent",
    "HistoryAction",
    "Memory",
    "MemoryType",
    "MemoryCollection",
    "MemoryCollectionItem",
]

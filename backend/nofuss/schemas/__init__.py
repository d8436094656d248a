# NoFuss Schemas
from .idea import ConversationMessage, DesignPreferences, IdeaSpecification
from .memory import MemoryContent, TextContent, ChatContent, SpecificationContent

__all__ = [
    "ConversationMessage",
    "DesignPreferences",
    "IdeaSpecification",
    "MemoryContent",
    "TextContent",
    "ChatContent",
    "SpecificationContent",
]

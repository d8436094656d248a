"""
Conversation Log

Ordered, append-only chat transcript for one session.
"""
from typing import Iterable, List, Optional

from ..prompts.idea import IDEA_CONSULTANT_SYSTEM, IDEA_GREETING
from ..schemas.idea import ConversationMessage


class ConversationLog:
    """
    Role-tagged message sequence.

    An idea conversation always opens with a fixed system instruction
    and a fixed assistant greeting. That preamble is configuration, not
    user data: `visible()` hides it, `as_payload()` still sends it to
    the completion service.
    """

    PREAMBLE = (
        ConversationMessage(role="system", content=IDEA_CONSULTANT_SYSTEM),
        ConversationMessage(role="assistant", content=IDEA_GREETING),
    )

    def __init__(self, messages: Optional[Iterable[ConversationMessage]] = None):
        self._messages: List[ConversationMessage] = list(messages or [])

    @classmethod
    def start_idea(cls) -> "ConversationLog":
        """New idea conversation seeded with the fixed preamble."""
        return cls(cls.PREAMBLE)

    @classmethod
    def from_messages(cls, messages: Iterable[ConversationMessage]) -> "ConversationLog":
        """Rebuild a log from a client payload."""
        return cls(messages)

    def append(self, message: ConversationMessage) -> None:
        self._messages.append(message)

    def copy(self) -> "ConversationLog":
        return ConversationLog(self._messages)

    def tail(self, n: int) -> List[ConversationMessage]:
        """Last n non-system messages."""
        if n <= 0:
            return []
        non_system = [m for m in self._messages if m.role != "system"]
        return non_system[-n:]

    def user_turns(self) -> int:
        return sum(1 for m in self._messages if m.role == "user")

    def last_user_message(self) -> Optional[ConversationMessage]:
        for message in reversed(self._messages):
            if message.role == "user":
                return message
        return None

    def _has_preamble(self) -> bool:
        return tuple(self._messages[:len(self.PREAMBLE)]) == self.PREAMBLE

    def visible(self) -> List[ConversationMessage]:
        """Messages to render: system messages and the fixed greeting are dropped."""
        start = len(self.PREAMBLE) if self._has_preamble() else 0
        return [m for m in self._messages[start:] if m.role != "system"]

    def as_payload(self) -> List[dict]:
        """Everything, preamble included, for the completion service."""
        return [m.model_dump() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
    role: str  # "user" | "assistant"
    text: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {"role": self.role, "text": self.text, "timestamp": self.timestamp.isoformat()}


def format_turns(turns: List[Turn], max_turns: int) -> str:
    if max_turns <= 0:
        return ""
    return "\n".join(f"{t.role}: {t.text}" for t in turns[-max_turns:])


class ConversationStore(ABC):
    """Session id -> ordered turns."""

    @abstractmethod
    def append(self, session_id: str, role: str, text: str) -> Turn:
        ...

    @abstractmethod
    def turns(self, session_id: str) -> List[Turn]:
        ...

    @abstractmethod
    def clear(self, session_id: str) -> None:
        ...

    def formatted_history(self, session_id: str, max_turns: int = 10) -> str:
        """
        Last max_turns turns as "role: text" lines, oldest first.
        Empty string for unknown sessions.
        """
        return format_turns(self.turns(session_id), max_turns)


class InMemoryConversationStore(ConversationStore):
    """Process-lifetime store. Nothing survives a restart."""

    def __init__(self):
        self._sessions: Dict[str, List[Turn]] = {}
        self._lock = threading.Lock()

    def append(self, session_id: str, role: str, text: str) -> Turn:
        turn = Turn(role=role, text=text)
        with self._lock:
            self._sessions.setdefault(session_id, []).append(turn)
        return turn

    def turns(self, session_id: str) -> List[Turn]:
        with self._lock:
            return list(self._sessions.get(session_id, ()))

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

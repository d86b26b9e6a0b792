"""Conversation history kept for the active document."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    role: Role
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "text": self.text}


class ConversationHistory:
    """Append-only list of turns; only ``clear`` removes entries."""

    def __init__(self) -> None:
        self._turns: List[ConversationTurn] = []

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(list(self._turns))

    def append_user(self, text: str) -> ConversationTurn:
        turn = ConversationTurn(role=Role.USER, text=text)
        self._turns.append(turn)
        return turn

    def append_assistant(self, text: str) -> ConversationTurn:
        turn = ConversationTurn(role=Role.ASSISTANT, text=text)
        self._turns.append(turn)
        return turn

    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def clear(self) -> None:
        self._turns.clear()

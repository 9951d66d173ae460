"""Intents produced by the command resolver."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IntentType(str, Enum):
    START = "start"
    END = "end"
    ADD_ENTRY = "add_entry"
    CANCEL = "cancel"
    PROVIDE_FIELD = "provide_field"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Intent:
    """Classified user input. ``text`` is set only for PROVIDE_FIELD."""

    type: IntentType
    text: Optional[str] = None

    @classmethod
    def provide_field(cls, text: str) -> "Intent":
        return cls(IntentType.PROVIDE_FIELD, text)

    @classmethod
    def of(cls, intent_type: IntentType) -> "Intent":
        return cls(intent_type)

"""
Command resolver: classifies an inbound event into an intent.

Button postbacks and typed keywords map to the same intents, so every
command can be issued either way. Free text only becomes field input while
the wizard is waiting for a field.
"""

import logging
from typing import Dict
from urllib.parse import parse_qs

from flows.text import normalize_text
from models.conversation import ConversationPhase
from models.events import EventType, InboundEvent
from models.intents import Intent, IntentType

logger = logging.getLogger(__name__)

# Keywords are stored already normalized (see normalize_text)
KEYWORDS: Dict[IntentType, frozenset] = {
    IntentType.START: frozenset({"開始", "start"}),
    IntentType.END: frozenset({"終了", "end", "finish"}),
    IntentType.ADD_ENTRY: frozenset({"追加", "add"}),
    IntentType.CANCEL: frozenset({"キャンセル", "取消", "cancel"}),
}

POSTBACK_ACTIONS: Dict[str, IntentType] = {
    "start": IntentType.START,
    "end": IntentType.END,
    "add": IntentType.ADD_ENTRY,
    "cancel": IntentType.CANCEL,
}

_KEYWORD_INDEX: Dict[str, IntentType] = {
    keyword: intent for intent, words in KEYWORDS.items() for keyword in words
}


def resolve_keyword(text: str) -> IntentType:
    """Maps typed text to a command intent, or UNKNOWN."""
    return _KEYWORD_INDEX.get(normalize_text(text), IntentType.UNKNOWN)


def resolve_postback(data: str) -> IntentType:
    """Maps postback data such as ``action=start`` to a command intent."""
    values = parse_qs(data or "").get("action")
    if not values:
        return IntentType.UNKNOWN
    return POSTBACK_ACTIONS.get(normalize_text(values[0]), IntentType.UNKNOWN)


def resolve_intent(event: InboundEvent, phase: ConversationPhase) -> Intent:
    """
    Resolves the intent of a message or postback event.

    Args:
        event: Parsed inbound event
        phase: Phase loaded from the store (idle when missing)

    Returns:
        Intent; keywords take precedence over field input
    """
    if event.type == EventType.POSTBACK:
        intent = Intent.of(resolve_postback(event.postback_data or ""))
        if intent.type == IntentType.UNKNOWN:
            logger.info("Unknown postback", extra={"postback_data": event.postback_data})
        return intent

    if event.type != EventType.MESSAGE:
        return Intent.of(IntentType.UNKNOWN)

    text = event.text or ""
    command = resolve_keyword(text)
    if command != IntentType.UNKNOWN:
        return Intent.of(command)

    if phase.collects_field and text.strip():
        return Intent.provide_field(text.strip())

    return Intent.of(IntentType.UNKNOWN)

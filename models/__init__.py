"""
Data models for the logbook-line service.
Pydantic models for the conversation state and inbound LINE events.
"""

from models.conversation import (
    ConversationPhase,
    ConversationState,
    PendingEntry,
    VALID_TRANSITIONS,
    can_transition,
)
from models.events import EventType, InboundEvent, parse_webhook_body
from models.intents import Intent, IntentType

__all__ = [
    # From models.conversation
    "ConversationPhase",
    "ConversationState",
    "PendingEntry",
    "VALID_TRANSITIONS",
    "can_transition",
    # From models.events
    "EventType",
    "InboundEvent",
    "parse_webhook_body",
    # From models.intents
    "Intent",
    "IntentType",
]

"""
Conversation state model and phase graph for the set-entry wizard.
"""

from .conversation_state import ConversationPhase, ConversationState, PendingEntry
from .transitions import VALID_TRANSITIONS, can_transition, valid_targets

__all__ = [
    "ConversationPhase",
    "ConversationState",
    "PendingEntry",
    "VALID_TRANSITIONS",
    "can_transition",
    "valid_targets",
]

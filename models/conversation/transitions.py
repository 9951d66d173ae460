"""
Valid transitions between conversation phases.

Implements the phase graph of the set-entry wizard: which phases may follow
each phase when a transition is accepted. Staying in the same phase (a
re-prompt after bad input) is not a transition and is never checked here.
"""

from typing import FrozenSet, List

from .conversation_state import ConversationPhase


VALID_TRANSITIONS: dict[ConversationPhase, FrozenSet[ConversationPhase]] = {
    # From idle: AddEntry opens the wizard
    ConversationPhase.IDLE: frozenset({
        ConversationPhase.AWAITING_EXERCISE,
    }),

    ConversationPhase.AWAITING_EXERCISE: frozenset({
        ConversationPhase.AWAITING_WEIGHT,     # Exercise accepted
        ConversationPhase.AWAITING_EXERCISE,   # AddEntry restarts the wizard
        ConversationPhase.IDLE,                # Cancel
    }),

    ConversationPhase.AWAITING_WEIGHT: frozenset({
        ConversationPhase.AWAITING_REPS,       # Weight accepted
        ConversationPhase.AWAITING_EXERCISE,   # Restart
        ConversationPhase.IDLE,                # Cancel
    }),

    ConversationPhase.AWAITING_REPS: frozenset({
        ConversationPhase.READY_TO_COMMIT,     # Reps accepted
        ConversationPhase.AWAITING_EXERCISE,   # Restart
        ConversationPhase.IDLE,                # Cancel
    }),

    # Consumed by the commit in the same delivery
    ConversationPhase.READY_TO_COMMIT: frozenset({
        ConversationPhase.IDLE,
    }),
}


def can_transition(
    current: ConversationPhase,
    target: ConversationPhase,
) -> bool:
    """
    Checks whether a transition between phases is allowed.

    Args:
        current: Source phase
        target: Destination phase

    Returns:
        True if the transition is in the graph
    """
    return target in VALID_TRANSITIONS.get(current, frozenset())


def valid_targets(current: ConversationPhase) -> List[ConversationPhase]:
    """Lists the phases reachable from ``current``, sorted by value."""
    return sorted(VALID_TRANSITIONS.get(current, frozenset()), key=lambda p: p.value)


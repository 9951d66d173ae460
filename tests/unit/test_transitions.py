"""
Unit tests for phase transitions.

Tests the transition graph and its lookup helpers.
"""

from models.conversation import ConversationPhase
from models.conversation.transitions import (
    VALID_TRANSITIONS,
    can_transition,
    valid_targets,
)


class TestValidTransitions:
    """Tests for the transition graph."""

    def test_every_phase_has_entry(self):
        missing = [phase for phase in ConversationPhase if phase not in VALID_TRANSITIONS]

        assert missing == []

    def test_idle_only_opens_wizard(self):
        assert valid_targets(ConversationPhase.IDLE) == [ConversationPhase.AWAITING_EXERCISE]

    def test_every_wizard_phase_can_cancel(self):
        for phase in (
            ConversationPhase.AWAITING_EXERCISE,
            ConversationPhase.AWAITING_WEIGHT,
            ConversationPhase.AWAITING_REPS,
        ):
            assert can_transition(phase, ConversationPhase.IDLE)

    def test_fields_cannot_be_skipped(self):
        assert not can_transition(ConversationPhase.AWAITING_EXERCISE, ConversationPhase.AWAITING_REPS)
        assert not can_transition(ConversationPhase.AWAITING_WEIGHT, ConversationPhase.READY_TO_COMMIT)
        assert not can_transition(ConversationPhase.IDLE, ConversationPhase.READY_TO_COMMIT)

    def test_ready_only_returns_to_idle(self):
        assert valid_targets(ConversationPhase.READY_TO_COMMIT) == [ConversationPhase.IDLE]


"""
Results of a state machine step.

A step yields the next ConversationState, an Outcome naming what happened
(used to pick the reply) and optionally a side effect the orchestrator
must execute against the domain services.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from models.conversation import ConversationState


class Outcome(str, Enum):
    # Wizard progress
    WIZARD_STARTED = "wizard_started"
    EXERCISE_ACCEPTED = "exercise_accepted"
    WEIGHT_ACCEPTED = "weight_accepted"
    READY_TO_COMMIT = "ready_to_commit"

    # Validation failures (phase unchanged)
    INVALID_EXERCISE = "invalid_exercise"
    UNKNOWN_EXERCISE = "unknown_exercise"
    INVALID_WEIGHT = "invalid_weight"
    INVALID_REPS = "invalid_reps"

    # Cancel
    CANCELLED = "cancelled"
    NOTHING_TO_CANCEL = "nothing_to_cancel"

    # Preconditions
    START_FIRST = "start_first"
    FINISH_ENTRY_FIRST = "finish_entry_first"

    # Requests resolved by the orchestrator
    START_REQUESTED = "start_requested"
    END_REQUESTED = "end_requested"

    UNKNOWN_INPUT = "unknown_input"

    # Final outcomes set by the orchestrator after side effects
    SET_RECORDED = "set_recorded"
    SET_FAILED = "set_failed"
    WORKOUT_STARTED = "workout_started"
    WORKOUT_ENDED = "workout_ended"
    NOTHING_TO_END = "nothing_to_end"
    DOMAIN_FAILURE = "domain_failure"
    REGISTERED = "registered"
    REGISTRATION_FAILED = "registration_failed"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class CreateWorkout:
    """Start a new workout for the user."""


@dataclass(frozen=True)
class EndWorkout:
    """End the user's current workout; the orchestrator finds which one."""


@dataclass(frozen=True)
class AddSet:
    """Record one set with the values collected by the wizard."""

    workout_id: str
    exercise_id: str
    weight_kg: float
    reps: int

    @classmethod
    def from_state(cls, state: ConversationState) -> "AddSet":
        if not state.is_ready():
            raise ValueError("AddSet requires a ready conversation state")
        return cls(
            workout_id=state.workout_id,
            exercise_id=state.pending.exercise_id,
            weight_kg=state.pending.weight_kg,
            reps=state.pending.reps,
        )


SideEffect = Union[CreateWorkout, EndWorkout, AddSet]


@dataclass(frozen=True)
class TransitionFacts:
    """
    External facts gathered before a step.

    ``exercise_known`` is None when no lookup was made; the engine then
    accepts any well-formed id.
    """

    open_workout_id: Optional[str] = None
    exercise_known: Optional[bool] = None


@dataclass(frozen=True)
class Transition:
    state: ConversationState
    outcome: Outcome
    side_effect: Optional[SideEffect] = None

    @classmethod
    def stay(cls, state: ConversationState, outcome: Outcome) -> "Transition":
        """Keeps ``state`` untouched (validation failure, re-prompt)."""
        return cls(state=state, outcome=outcome)

"""
Handler for the exercise prompt.

Accepts an exercise id that is long enough and, when a lookup was made,
known to the catalogue.
"""

from flows.validators import validate_exercise_id
from models.conversation import ConversationPhase

from ..context import StepContext
from ..outcomes import Outcome, Transition
from .base import PhaseHandler


class AwaitingExerciseHandler(PhaseHandler):

    @property
    def name(self) -> str:
        return "Awaiting Exercise"

    def accept_field(self, ctx: StepContext, text: str) -> Transition:
        is_valid, exercise_id = validate_exercise_id(
            text, ctx.rules.min_exercise_id_length
        )
        if not is_valid:
            return Transition.stay(ctx.state, Outcome.INVALID_EXERCISE)
        if ctx.facts.exercise_known is False:
            return Transition.stay(ctx.state, Outcome.UNKNOWN_EXERCISE)

        return Transition(
            ctx.state.with_pending(ConversationPhase.AWAITING_WEIGHT, exercise_id=exercise_id),
            Outcome.EXERCISE_ACCEPTED,
        )

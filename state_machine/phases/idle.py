"""
Handler for the idle phase.

Outside the wizard the user can start or end a workout and open the
wizard; field input is never expected here.
"""

from models.conversation import ConversationState

from ..context import StepContext
from ..outcomes import CreateWorkout, EndWorkout, Outcome, Transition
from .base import PhaseHandler


class IdleHandler(PhaseHandler):

    @property
    def name(self) -> str:
        return "Idle"

    def accept_field(self, ctx: StepContext, text: str) -> Transition:
        return Transition.stay(ctx.state, Outcome.UNKNOWN_INPUT)

    def on_cancel(self, ctx: StepContext) -> Transition:
        return Transition.stay(ctx.state, Outcome.NOTHING_TO_CANCEL)

    def on_add_entry(self, ctx: StepContext) -> Transition:
        workout_id = ctx.facts.open_workout_id
        if not workout_id:
            return Transition.stay(ctx.state, Outcome.START_FIRST)
        return Transition(ConversationState.start_entry(workout_id), Outcome.WIZARD_STARTED)

    def on_start(self, ctx: StepContext) -> Transition:
        return Transition(ctx.state, Outcome.START_REQUESTED, CreateWorkout())

    def on_end(self, ctx: StepContext) -> Transition:
        return Transition(ctx.state, Outcome.END_REQUESTED, EndWorkout())

"""
Handler for the reps prompt.

Valid reps complete the entry: the state moves to ready_to_commit and an
AddSet side effect carries the collected values to the orchestrator.
"""

from flows.validators import parse_reps
from models.conversation import ConversationPhase

from ..context import StepContext
from ..outcomes import AddSet, Outcome, Transition
from .base import PhaseHandler


class AwaitingRepsHandler(PhaseHandler):

    @property
    def name(self) -> str:
        return "Awaiting Reps"

    def accept_field(self, ctx: StepContext, text: str) -> Transition:
        is_valid, reps = parse_reps(text)
        if not is_valid:
            return Transition.stay(ctx.state, Outcome.INVALID_REPS)

        ready = ctx.state.with_pending(ConversationPhase.READY_TO_COMMIT, reps=reps)
        return Transition(ready, Outcome.READY_TO_COMMIT, AddSet.from_state(ready))

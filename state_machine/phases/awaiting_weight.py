"""Handler for the weight prompt."""

from flows.validators import parse_weight
from models.conversation import ConversationPhase

from ..context import StepContext
from ..outcomes import Outcome, Transition
from .base import PhaseHandler


class AwaitingWeightHandler(PhaseHandler):

    @property
    def name(self) -> str:
        return "Awaiting Weight"

    def accept_field(self, ctx: StepContext, text: str) -> Transition:
        is_valid, weight_kg = parse_weight(text)
        if not is_valid:
            return Transition.stay(ctx.state, Outcome.INVALID_WEIGHT)
        return Transition(
            ctx.state.with_pending(ConversationPhase.AWAITING_REPS, weight_kg=weight_kg),
            Outcome.WEIGHT_ACCEPTED,
        )

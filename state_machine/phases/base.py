"""
Base class for phase handlers.

Each conversation phase has a handler that decides the next state for an
intent, following the State pattern. Handlers are pure: they never touch
the store or the domain services.
"""

from abc import ABC, abstractmethod

from models.conversation import ConversationState
from models.intents import IntentType

from ..context import StepContext
from ..outcomes import Outcome, Transition


class PhaseHandler(ABC):
    """
    Abstract base class for phase handlers.

    The default dispatch covers the commands that behave the same in every
    wizard phase (Cancel, AddEntry, Start, End, Unknown). Subclasses
    implement ``accept_field`` for their own field.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        pass

    def handle(self, ctx: StepContext) -> Transition:
        """Routes the intent to the matching method."""
        intent_type = ctx.intent.type
        if intent_type == IntentType.PROVIDE_FIELD:
            return self.accept_field(ctx, ctx.intent.text or "")
        if intent_type == IntentType.CANCEL:
            return self.on_cancel(ctx)
        if intent_type == IntentType.ADD_ENTRY:
            return self.on_add_entry(ctx)
        if intent_type == IntentType.START:
            return self.on_start(ctx)
        if intent_type == IntentType.END:
            return self.on_end(ctx)
        return Transition.stay(ctx.state, Outcome.UNKNOWN_INPUT)

    @abstractmethod
    def accept_field(self, ctx: StepContext, text: str) -> Transition:
        """
        Validates field input and advances the wizard.

        On invalid input the handler must return ``Transition.stay`` so the
        fields collected so far are kept.
        """
        pass

    def on_cancel(self, ctx: StepContext) -> Transition:
        return Transition(ConversationState.idle(), Outcome.CANCELLED)

    def on_add_entry(self, ctx: StepContext) -> Transition:
        """Restarts the wizard from the exercise prompt."""
        workout_id = ctx.facts.open_workout_id
        if not workout_id:
            # The wizard's workout is no longer open
            return Transition(ConversationState.idle(), Outcome.START_FIRST)
        return Transition(ConversationState.start_entry(workout_id), Outcome.WIZARD_STARTED)

    def on_start(self, ctx: StepContext) -> Transition:
        return Transition.stay(ctx.state, Outcome.FINISH_ENTRY_FIRST)

    def on_end(self, ctx: StepContext) -> Transition:
        return Transition.stay(ctx.state, Outcome.FINISH_ENTRY_FIRST)

"""
State machine engine for the set-entry wizard.

A pure function of (state, intent, facts): it picks the handler for the
current phase, lets it compute the transition and checks the result
against the phase graph. It performs no I/O.
"""

import logging
from typing import Dict, Optional

from core.exceptions import InvalidTransitionError
from models.conversation import (
    ConversationPhase,
    ConversationState,
    can_transition,
    valid_targets,
)
from models.intents import Intent

from .context import StepContext, StepRules
from .outcomes import Transition, TransitionFacts
from .phases import PhaseHandler, get_handler_class

logger = logging.getLogger(__name__)


class StateMachineEngine:
    """
    Computes the next conversation state.

    Usage:
        engine = StateMachineEngine(min_exercise_id_length=4)
        transition = engine.step(state, Intent.provide_field("60"))
    """

    def __init__(self, min_exercise_id_length: int = 4):
        self.rules = StepRules(min_exercise_id_length=min_exercise_id_length)
        self._handlers: Dict[str, PhaseHandler] = {}

    def handler_for(self, phase: ConversationPhase) -> PhaseHandler:
        """Returns the cached handler instance for ``phase``."""
        handler = self._handlers.get(phase.value)
        if handler is None:
            handler = get_handler_class(phase.value)()
            self._handlers[phase.value] = handler
        return handler

    def step(
        self,
        state: ConversationState,
        intent: Intent,
        facts: Optional[TransitionFacts] = None,
    ) -> Transition:
        """
        Runs one transition.

        Args:
            state: Current state (use ConversationState.idle() when missing)
            intent: Resolved intent
            facts: Lookups gathered by the caller

        Returns:
            Transition with the next state, outcome and optional side effect

        Raises:
            InvalidTransitionError: If the resulting phase change is not in
                the phase graph, or ``state`` is a transient ready_to_commit
        """
        if state.phase == ConversationPhase.READY_TO_COMMIT:
            raise InvalidTransitionError(state.phase, "step")

        ctx = StepContext(
            state=state,
            intent=intent,
            facts=facts or TransitionFacts(),
            rules=self.rules,
        )
        handler = self.handler_for(state.phase)
        transition = handler.handle(ctx)

        target = transition.state.phase
        if target != state.phase and not can_transition(state.phase, target):
            allowed = [p.value for p in valid_targets(state.phase)]
            logger.error(
                f"❌ {handler.name} tried {state.phase.value} -> {target.value}",
                extra={"allowed_targets": allowed},
            )
            raise InvalidTransitionError(state.phase, target)

        logger.debug(
            f"🔄 {handler.name}: {state.phase.value} -> {target.value}",
            extra={"intent": intent.type.value, "outcome": transition.outcome.value},
        )
        return transition

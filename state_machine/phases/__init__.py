"""
Phase handler implementations for the set-entry wizard.

Each handler is self-contained and decides, for its phase:
- How field input is validated
- Which phase comes next
- Which side effect, if any, the orchestrator must run
"""

from .base import PhaseHandler
from .idle import IdleHandler
from .awaiting_exercise import AwaitingExerciseHandler
from .awaiting_weight import AwaitingWeightHandler
from .awaiting_reps import AwaitingRepsHandler

__all__ = [
    "PhaseHandler",
    "IdleHandler",
    "AwaitingExerciseHandler",
    "AwaitingWeightHandler",
    "AwaitingRepsHandler",
]

# Registry mapping phase values to handler classes
PHASE_REGISTRY = {
    "idle": IdleHandler,
    "awaiting_exercise": AwaitingExerciseHandler,
    "awaiting_weight": AwaitingWeightHandler,
    "awaiting_reps": AwaitingRepsHandler,
}


def get_handler_class(phase_name: str) -> type:
    """
    Gets the handler class for a phase.

    ready_to_commit has no handler: it is consumed in the step that
    reaches it. Unknown names fall back to IdleHandler.
    """
    return PHASE_REGISTRY.get(phase_name, IdleHandler)

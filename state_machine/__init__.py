"""
State machine for the set-entry wizard.

Implements the State pattern: each phase handler decides its own
transitions and the engine validates them against the phase graph.

Components:
- StateMachineEngine: Pure step function
- StepContext: Input of a step
- PhaseHandler (base): Abstract base class for phase handlers
- Outcomes and side effects returned to the orchestrator
"""

from .context import StepContext, StepRules
from .engine import StateMachineEngine
from .outcomes import (
    AddSet,
    CreateWorkout,
    EndWorkout,
    Outcome,
    SideEffect,
    Transition,
    TransitionFacts,
)

__all__ = [
    "StateMachineEngine",
    "StepContext",
    "StepRules",
    "AddSet",
    "CreateWorkout",
    "EndWorkout",
    "Outcome",
    "SideEffect",
    "Transition",
    "TransitionFacts",
]

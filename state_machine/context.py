"""
Context for one state machine step.

Bundles the loaded state, the resolved intent and the facts gathered by
the orchestrator, so phase handlers stay pure functions of their input.
"""

from dataclasses import dataclass, field

from models.conversation import ConversationState
from models.intents import Intent

from .outcomes import TransitionFacts


@dataclass(frozen=True)
class StepRules:
    """Tunable validation rules."""

    min_exercise_id_length: int = 4


@dataclass(frozen=True)
class StepContext:
    """
    Input of a single step.

    Attributes:
        state: Current conversation state (idle default when missing)
        intent: Classified user input
        facts: Open workout and exercise lookups done beforehand
        rules: Validation rules
    """

    state: ConversationState
    intent: Intent
    facts: TransitionFacts = field(default_factory=TransitionFacts)
    rules: StepRules = field(default_factory=StepRules)

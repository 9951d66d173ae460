"""
Validated schema for the per-user conversation state.

ConversationState is the record persisted under ``conv:<user_id>`` between
webhook deliveries. Illegal combinations (reps collected before the weight,
a workout attached to an idle conversation) fail validation, so a record
that loads is always one the state machine can act on.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utcnow() -> datetime:
    """Returns the current UTC timestamp."""
    return datetime.now(timezone.utc)


class ConversationPhase(str, Enum):
    """
    Phases of the set-entry wizard.

    Main flow:
    idle -> awaiting_exercise -> awaiting_weight -> awaiting_reps ->
    ready_to_commit -> idle
    """

    IDLE = "idle"

    # Field collection
    AWAITING_EXERCISE = "awaiting_exercise"
    AWAITING_WEIGHT = "awaiting_weight"
    AWAITING_REPS = "awaiting_reps"

    # Reached and consumed within a single delivery
    READY_TO_COMMIT = "ready_to_commit"

    @property
    def collects_field(self) -> bool:
        return self in _FIELD_PHASES


_FIELD_PHASES = frozenset({
    ConversationPhase.AWAITING_EXERCISE,
    ConversationPhase.AWAITING_WEIGHT,
    ConversationPhase.AWAITING_REPS,
})

# Pending fields a phase is allowed to carry
_ALLOWED_FIELDS = {
    ConversationPhase.IDLE: frozenset(),
    ConversationPhase.AWAITING_EXERCISE: frozenset(),
    ConversationPhase.AWAITING_WEIGHT: frozenset({"exercise_id"}),
    ConversationPhase.AWAITING_REPS: frozenset({"exercise_id", "weight_kg"}),
    ConversationPhase.READY_TO_COMMIT: frozenset({"exercise_id", "weight_kg", "reps"}),
}


class PendingEntry(BaseModel):
    """Fields accumulated so far for the set being entered."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    exercise_id: Optional[str] = Field(default=None, alias="exerciseId", min_length=1)
    weight_kg: Optional[float] = Field(default=None, alias="weight", ge=0)
    reps: Optional[int] = Field(default=None, gt=0)

    def filled(self) -> frozenset:
        """Names of the fields that hold a value."""
        return frozenset(
            name for name in ("exercise_id", "weight_kg", "reps")
            if getattr(self, name) is not None
        )

    def is_empty(self) -> bool:
        return not self.filled()


class ConversationState(BaseModel):
    """
    Conversation state for one LINE user.

    The wire format uses camelCase keys and omits absent fields:

        {"phase": "awaiting_reps", "workoutId": "w-1",
         "pending": {"exerciseId": "ex-123", "weight": 60.0},
         "updatedAt": "2024-05-01T10:00:00+00:00"}
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    phase: ConversationPhase = Field(default=ConversationPhase.IDLE)
    workout_id: Optional[str] = Field(default=None, alias="workoutId", min_length=1)
    pending: PendingEntry = Field(default_factory=PendingEntry)
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @field_validator("updated_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def validate_consistency(self) -> "ConversationState":
        """Checks that the phase and the collected fields agree."""
        if self.phase == ConversationPhase.IDLE:
            if self.workout_id is not None:
                raise ValueError("Idle conversation cannot reference a workout")
        elif self.workout_id is None:
            raise ValueError(f"Phase {self.phase.value} requires a workout id")

        filled = self.pending.filled()
        allowed = _ALLOWED_FIELDS[self.phase]
        if not filled <= allowed:
            extra = ", ".join(sorted(filled - allowed))
            raise ValueError(f"Phase {self.phase.value} cannot carry: {extra}")

        if self.phase == ConversationPhase.READY_TO_COMMIT and filled != allowed:
            raise ValueError("ready_to_commit requires exercise, weight and reps")

        return self

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_ready(self) -> bool:
        """True when every field needed to record a set is present."""
        return (
            self.workout_id is not None
            and self.pending.exercise_id is not None
            and self.pending.weight_kg is not None
            and self.pending.reps is not None
        )

    def is_idle(self) -> bool:
        return self.phase == ConversationPhase.IDLE

    def is_expired(self, ttl_seconds: int, now: Optional[datetime] = None) -> bool:
        """True when the last transition is older than ``ttl_seconds``."""
        now = now or _utcnow()
        return now - self.updated_at > timedelta(seconds=ttl_seconds)

    # ------------------------------------------------------------------
    # Immutable updates
    # ------------------------------------------------------------------

    def update(self, **kwargs: Any) -> "ConversationState":
        """
        Returns a revalidated copy with the given fields replaced.

        ``updated_at`` is refreshed unless passed explicitly.
        """
        data = self.model_dump()
        data["updated_at"] = kwargs.pop("updated_at", None) or _utcnow()
        if isinstance(kwargs.get("pending"), PendingEntry):
            kwargs["pending"] = kwargs["pending"].model_dump()
        data.update(kwargs)
        return ConversationState.model_validate(data)

    def with_pending(self, phase: ConversationPhase, **fields: Any) -> "ConversationState":
        """Moves to ``phase`` adding ``fields`` to the pending entry."""
        pending = self.pending.model_dump()
        pending.update(fields)
        return self.update(phase=phase, pending=pending)

    @classmethod
    def idle(cls) -> "ConversationState":
        """The default state used for a missing or unreadable record."""
        return cls(phase=ConversationPhase.IDLE)

    @classmethod
    def start_entry(cls, workout_id: str) -> "ConversationState":
        """A fresh wizard waiting for the exercise id."""
        return cls(phase=ConversationPhase.AWAITING_EXERCISE, workout_id=workout_id)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> "ConversationState":
        """
        Parses a stored record.

        Raises:
            pydantic.ValidationError: If the payload is not valid JSON or
                violates the phase rules.
        """
        return cls.model_validate_json(raw)

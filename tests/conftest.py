"""
Shared pytest fixtures for logbook-line tests.

This module provides:
- Test data factories for ConversationState and LINE events
- Fake domain services that record their calls
- An orchestrator wired to an in-memory state backend
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from core.exceptions import (
    DomainServiceError,
    ExerciseNotFoundError,
    IdentityResolutionError,
    WorkoutNotFoundError,
)
from infrastructure.persistence import ActiveWorkoutStore, ConversationStateStore, MemoryClient
from models.conversation import ConversationPhase, ConversationState
from models.events import EventType, InboundEvent
from services.dialogue_orchestrator import DialogueOrchestrator

LINE_USER = "U1234567890abcdef"
FIXED_NOW = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


# ============================================================
# TEST DATA FACTORIES
# ============================================================


@dataclass
class StateFactory:
    """Factory for ConversationState instances in each phase."""

    @staticmethod
    def awaiting_exercise(workout_id: str = "w-1") -> ConversationState:
        return ConversationState.start_entry(workout_id)

    @staticmethod
    def awaiting_weight(workout_id: str = "w-1", exercise_id: str = "ex-123") -> ConversationState:
        return ConversationState(
            phase=ConversationPhase.AWAITING_WEIGHT,
            workout_id=workout_id,
            pending={"exercise_id": exercise_id},
        )

    @staticmethod
    def awaiting_reps(
        workout_id: str = "w-1",
        exercise_id: str = "ex-123",
        weight_kg: float = 60.0,
    ) -> ConversationState:
        return ConversationState(
            phase=ConversationPhase.AWAITING_REPS,
            workout_id=workout_id,
            pending={"exercise_id": exercise_id, "weight_kg": weight_kg},
        )


@dataclass
class EventFactory:
    """Factory for inbound LINE events."""

    @staticmethod
    def text(text: str, user_id: str = LINE_USER, reply_token: str = "rt-1") -> InboundEvent:
        return InboundEvent(
            type=EventType.MESSAGE,
            external_user_id=user_id,
            reply_token=reply_token,
            text=text,
        )

    @staticmethod
    def postback(data: str, user_id: str = LINE_USER, reply_token: str = "rt-1") -> InboundEvent:
        return InboundEvent(
            type=EventType.POSTBACK,
            external_user_id=user_id,
            reply_token=reply_token,
            postback_data=data,
        )

    @staticmethod
    def follow(user_id: str = LINE_USER) -> InboundEvent:
        return InboundEvent(type=EventType.FOLLOW, external_user_id=user_id, reply_token="rt-f")


# ============================================================
# FAKE DOMAIN SERVICES
# ============================================================


class FakeWorkoutService:
    """In-memory WorkoutService recording every call."""

    def __init__(self):
        self.workouts: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_create = False
        self.fail_lookup = False
        self._next_id = 1

    def add_open_workout(self, user_id: str, from_line: bool = True) -> str:
        workout_id = f"w-{self._next_id}"
        self._next_id += 1
        self.workouts[workout_id] = {
            "user_id": user_id,
            "ended_at": None,
            "from_line": from_line,
            "started_at": FIXED_NOW,
        }
        return workout_id

    async def create_workout(self, user_id: str, started_at: datetime) -> str:
        self.calls.append(("create_workout", user_id))
        if self.fail_create:
            raise DomainServiceError("insert failed")
        workout_id = self.add_open_workout(user_id)
        self.workouts[workout_id]["started_at"] = started_at
        return workout_id

    async def end_workout(self, workout_id: str, user_id: str, ended_at: datetime) -> None:
        self.calls.append(("end_workout", workout_id))
        workout = self.workouts.get(workout_id)
        if not workout or workout["user_id"] != user_id or workout["ended_at"]:
            raise WorkoutNotFoundError(workout_id=workout_id)
        workout["ended_at"] = ended_at

    async def latest_open_workout_id(self, user_id: str, source: Optional[str] = None) -> Optional[str]:
        self.calls.append(("latest_open_workout_id", user_id))
        if self.fail_lookup:
            raise DomainServiceError("lookup failed")
        open_ids = [
            wid for wid, w in self.workouts.items()
            if w["user_id"] == user_id and w["ended_at"] is None
            and (source != "line" or w["from_line"])
        ]
        return open_ids[-1] if open_ids else None

    @property
    def mutations(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("create_workout", "end_workout")]

    def open_ids(self) -> List[str]:
        return [wid for wid, w in self.workouts.items() if w["ended_at"] is None]


class FakeSetService:
    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.fail = False

    async def add_set(self, user_id, workout_id, exercise_id, reps, weight_kg) -> str:
        self.calls.append({
            "user_id": user_id,
            "workout_id": workout_id,
            "exercise_id": exercise_id,
            "reps": reps,
            "weight_kg": weight_kg,
        })
        if self.fail:
            raise ExerciseNotFoundError(exercise_id)
        return f"set-{len(self.calls)}"


class FakeExerciseLookup:
    def __init__(self, known: Optional[set] = None):
        self.known = known if known is not None else {"ex-123", "bench-press"}
        self.calls: List[str] = []

    async def exercise_exists(self, exercise_id: str) -> bool:
        self.calls.append(exercise_id)
        return exercise_id in self.known


class FakeIdentityResolver:
    def __init__(self):
        self.calls: List[str] = []
        self.fail = False

    async def resolve_user(self, external_user_id: str) -> str:
        self.calls.append(external_user_id)
        if self.fail:
            raise IdentityResolutionError(external_user_id, "db down")
        return f"user-{external_user_id}"


# ============================================================
# FIXTURES
# ============================================================


@pytest.fixture
def state_factory() -> StateFactory:
    return StateFactory()


@pytest.fixture
def event_factory() -> EventFactory:
    return EventFactory()


@pytest.fixture
def memory_client() -> MemoryClient:
    return MemoryClient()


@pytest.fixture
def conversation_store(memory_client) -> ConversationStateStore:
    return ConversationStateStore(memory_client, ttl_seconds=2700)


@pytest.fixture
def active_workouts(memory_client) -> ActiveWorkoutStore:
    return ActiveWorkoutStore(memory_client, ttl_seconds=7200)


@pytest.fixture
def workouts() -> FakeWorkoutService:
    return FakeWorkoutService()


@pytest.fixture
def sets() -> FakeSetService:
    return FakeSetService()


@pytest.fixture
def exercises() -> FakeExerciseLookup:
    return FakeExerciseLookup()


@pytest.fixture
def identity() -> FakeIdentityResolver:
    return FakeIdentityResolver()


@pytest.fixture
def orchestrator(conversation_store, active_workouts, identity, workouts, sets, exercises):
    """Orchestrator wired to fakes and an in-memory state backend."""
    return DialogueOrchestrator(
        store=conversation_store,
        active_workouts=active_workouts,
        identity_resolver=identity,
        workouts=workouts,
        sets=sets,
        exercises=exercises,
        clock=lambda: FIXED_NOW,
    )

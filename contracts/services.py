"""
Contracts for the domain collaborators of the dialogue.

The workout, set, exercise and identity services live outside the
conversation logic; the orchestrator only sees these interfaces.
Implementations translate backend failures into DomainServiceError
subclasses or IdentityResolutionError.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class WorkoutService(Protocol):
    """
    Interface for workout records.

    Implementations:
    - WorkoutRepositorySupabase
    """

    async def create_workout(self, user_id: str, started_at: datetime) -> str:
        """Creates an open workout and returns its id."""
        ...

    async def end_workout(self, workout_id: str, user_id: str, ended_at: datetime) -> None:
        """
        Ends a workout owned by ``user_id``.

        Raises:
            WorkoutNotFoundError: If the workout does not exist or is not owned
            DomainServiceError: On backend failure
        """
        ...

    async def latest_open_workout_id(
        self, user_id: str, source: Optional[str] = None
    ) -> Optional[str]:
        """
        Returns the most recent open workout, optionally filtered by the
        channel it was created from, or None.
        """
        ...


@runtime_checkable
class ExerciseLookup(Protocol):
    """Interface for checking exercise ids."""

    async def exercise_exists(self, exercise_id: str) -> bool:
        ...


@runtime_checkable
class SetService(Protocol):
    """Interface for recording sets."""

    async def add_set(
        self,
        user_id: str,
        workout_id: str,
        exercise_id: str,
        reps: int,
        weight_kg: float,
    ) -> str:
        """
        Records one set and returns its id.

        Raises:
            WorkoutNotFoundError: If the workout is missing or not owned
            ExerciseNotFoundError: If the exercise is unknown
            DomainServiceError: On backend failure
        """
        ...


@runtime_checkable
class IdentityResolver(Protocol):
    """Maps a LINE user id to an internal user id (idempotent upsert)."""

    async def resolve_user(self, external_user_id: str) -> str:
        """
        Raises:
            IdentityResolutionError: If the user cannot be resolved
        """
        ...

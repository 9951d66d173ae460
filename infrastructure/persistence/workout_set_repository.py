"""Workout set repository using Supabase."""
from typing import Any, Dict

from core.exceptions import DomainServiceError, ExerciseNotFoundError
from infrastructure.persistence.exercise_repository import ExerciseRepositorySupabase
from infrastructure.persistence.supabase_base import SupabaseRepository
from infrastructure.persistence.workout_repository import WorkoutRepositorySupabase


class WorkoutSetRepositorySupabase(SupabaseRepository):
    """
    Repository for the `workout_sets` table.

    A set is only inserted after confirming that the workout belongs to the
    user and that the exercise exists, so the caller gets a typed error
    instead of a foreign-key violation.
    """

    def __init__(
        self,
        supabase_client,
        workouts: WorkoutRepositorySupabase,
        exercises: ExerciseRepositorySupabase,
        timeout_seconds: float = 5.0,
        slow_query_ms: int = 2000,
    ):
        super().__init__(supabase_client, timeout_seconds, slow_query_ms)
        self.workouts = workouts
        self.exercises = exercises

    async def _next_set_index(self, workout_id: str) -> int:
        result = await self._run(
            lambda: self.supabase.table("workout_sets")
            .select("set_index")
            .eq("workout_id", workout_id)
            .order("set_index", desc=True)
            .limit(1)
            .execute(),
            label="workout_sets.max_index",
        )
        if not result.data:
            return 1
        return int(result.data[0].get("set_index") or 0) + 1

    async def add_set(
        self,
        user_id: str,
        workout_id: str,
        exercise_id: str,
        reps: int,
        weight_kg: float,
    ) -> str:
        await self.workouts.find_owned(workout_id, user_id)
        if not await self.exercises.exercise_exists(exercise_id):
            raise ExerciseNotFoundError(exercise_id)

        payload: Dict[str, Any] = {
            "workout_id": workout_id,
            "exercise_id": exercise_id,
            "set_index": await self._next_set_index(workout_id),
            "reps": reps,
            "weight_kg": weight_kg,
        }
        result = await self._run(
            lambda: self.supabase.table("workout_sets").insert(payload).execute(),
            label="workout_sets.insert",
        )
        if not result.data:
            raise DomainServiceError("Set insert returned no row")
        set_id = str(result.data[0]["id"])
        self.logger.info(
            f"✅ Set recorded: {set_id}",
            extra={"workout_id": workout_id, "set_index": payload["set_index"]},
        )
        return set_id

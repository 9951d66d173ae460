"""Workout repository using Supabase."""
from datetime import datetime
from typing import Any, Dict, Optional

from core.exceptions import DomainServiceError, WorkoutNotFoundError
from infrastructure.persistence.supabase_base import SupabaseRepository


class WorkoutRepositorySupabase(SupabaseRepository):
    """Repository for the `workouts` table."""

    async def find_owned(self, workout_id: str, user_id: str) -> Dict[str, Any]:
        """
        Loads a workout that belongs to ``user_id``.

        Raises:
            WorkoutNotFoundError: If it does not exist or has another owner
        """
        result = await self._run(
            lambda: self.supabase.table("workouts")
            .select("id, user_id, started_at, ended_at, is_from_line")
            .eq("id", workout_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute(),
            label="workouts.by_id_and_user",
        )
        if not result.data:
            raise WorkoutNotFoundError(workout_id=workout_id)
        return result.data[0]

    async def create_workout(self, user_id: str, started_at: datetime) -> str:
        payload = {
            "user_id": user_id,
            "started_at": started_at.isoformat(),
            "is_from_line": True,
        }
        result = await self._run(
            lambda: self.supabase.table("workouts").insert(payload).execute(),
            label="workouts.insert",
        )
        if not result.data:
            raise DomainServiceError("Workout insert returned no row")
        workout_id = str(result.data[0]["id"])
        self.logger.info(f"🏋️ Workout created: {workout_id}", extra={"user_id": user_id})
        return workout_id

    async def end_workout(self, workout_id: str, user_id: str, ended_at: datetime) -> None:
        """
        Sets ``ended_at`` on an open workout owned by the user.

        Raises:
            WorkoutNotFoundError: If the workout is missing, not owned or
                already ended
        """
        workout = await self.find_owned(workout_id, user_id)
        if workout.get("ended_at"):
            raise WorkoutNotFoundError(workout_id=workout_id)
        await self._run(
            lambda: self.supabase.table("workouts")
            .update({"ended_at": ended_at.isoformat()})
            .eq("id", workout_id)
            .eq("user_id", user_id)
            .is_("ended_at", "null")
            .execute(),
            label="workouts.end",
        )
        self.logger.info(f"🏁 Workout ended: {workout_id}", extra={"user_id": user_id})

    async def latest_open_workout_id(
        self, user_id: str, source: Optional[str] = None
    ) -> Optional[str]:
        def query():
            builder = (
                self.supabase.table("workouts")
                .select("id")
                .eq("user_id", user_id)
                .is_("ended_at", "null")
            )
            if source == "line":
                builder = builder.eq("is_from_line", True)
            return builder.order("started_at", desc=True).limit(1).execute()

        result = await self._run(query, label="workouts.latest_open")
        if not result.data:
            return None
        return str(result.data[0]["id"])

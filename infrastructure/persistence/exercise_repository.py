"""Exercise lookups using Supabase."""
from infrastructure.persistence.supabase_base import SupabaseRepository


class ExerciseRepositorySupabase(SupabaseRepository):
    """Read-only access to the `exercises` catalogue."""

    async def exercise_exists(self, exercise_id: str) -> bool:
        """True when ``exercise_id`` names an active exercise."""
        result = await self._run(
            lambda: self.supabase.table("exercises")
            .select("id")
            .eq("id", exercise_id)
            .eq("is_active", True)
            .limit(1)
            .execute(),
            label="exercises.exists",
        )
        return bool(result.data)

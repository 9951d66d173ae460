"""
Persistence adapters: key-value backends for conversation state and
Supabase repositories for the domain tables.
"""

from .active_workout_store import ActiveWorkoutStore
from .conversation_store import ConversationStateStore
from .exercise_repository import ExerciseRepositorySupabase
from .memory_client import MemoryClient
from .redis_client import RedisClient
from .user_repository import UserRepositorySupabase
from .workout_repository import WorkoutRepositorySupabase
from .workout_set_repository import WorkoutSetRepositorySupabase

__all__ = [
    "ActiveWorkoutStore",
    "ConversationStateStore",
    "ExerciseRepositorySupabase",
    "MemoryClient",
    "RedisClient",
    "UserRepositorySupabase",
    "WorkoutRepositorySupabase",
    "WorkoutSetRepositorySupabase",
]

"""Marker for the workout most recently started through LINE."""
import json
from typing import Optional

from contracts import KeyValueClient
from core.exceptions import StoreError


class ActiveWorkoutStore:
    """
    Remembers the workout a user started so End can find it directly.

    The marker is a hint, not a source of truth: a missing or unreadable
    marker just sends End to the latest-open-workout lookup.
    """

    KEY_TEMPLATE = "workout:{}"  # internal user id

    def __init__(self, client: KeyValueClient, ttl_seconds: int = 7200):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.logger = __import__("logging").getLogger(__name__)

    def key_for(self, user_id: str) -> str:
        return self.KEY_TEMPLATE.format(user_id)

    async def get(self, user_id: str) -> Optional[str]:
        """Returns the remembered workout id, or None."""
        key = self.key_for(user_id)
        try:
            raw = await self.client.get(key)
        except StoreError as e:
            self.logger.warning(f"⚠️ Could not read active workout for {user_id}: {e}")
            return None
        if not raw:
            return None
        try:
            workout_id = json.loads(raw).get("workoutId")
        except (json.JSONDecodeError, AttributeError):
            self.logger.warning(f"⚠️ Corrupt active workout marker for {user_id}")
            return None
        return workout_id if isinstance(workout_id, str) and workout_id else None

    async def remember(self, user_id: str, workout_id: str) -> None:
        """
        Raises:
            StoreError: If the write fails
        """
        await self.client.set(
            self.key_for(user_id),
            json.dumps({"workoutId": workout_id}),
            expire=self.ttl_seconds,
        )

    async def forget(self, user_id: str) -> None:
        """
        Raises:
            StoreError: If the delete fails
        """
        await self.client.delete(self.key_for(user_id))

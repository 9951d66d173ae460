"""Conversation state store on top of a key-value backend, with Pydantic validation."""
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from pydantic import ValidationError

from contracts import KeyValueClient
from core.exceptions import StoreError
from models.conversation import ConversationPhase, ConversationState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStateStore:
    """
    Store for the per-user conversation state.

    Every record is validated with the ConversationState schema on read.
    Unreadable records are treated as missing so the conversation falls
    back to idle instead of failing.
    """

    KEY_TEMPLATE = "{prefix}:{user_id}"

    def __init__(
        self,
        client: KeyValueClient,
        ttl_seconds: int = 2700,
        key_prefix: str = "conv",
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            client: KeyValueClient (RedisClient or MemoryClient)
            ttl_seconds: Store-level TTL, also used for the read-time check
            key_prefix: Namespace of the keys
            clock: Source of the current UTC time
        """
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._clock = clock
        self.logger = __import__("logging").getLogger(__name__)

    def key_for(self, external_user_id: str) -> str:
        return self.KEY_TEMPLATE.format(prefix=self.key_prefix, user_id=external_user_id)

    async def get(self, external_user_id: str) -> Tuple[Optional[ConversationState], bool]:
        """
        Loads the state of a user.

        Returns:
            ``(state, True)`` for a valid live record, ``(None, False)`` when
            the key is missing, unreadable, corrupt or logically expired
        """
        key = self.key_for(external_user_id)
        try:
            raw = await self.client.get(key)
        except StoreError as e:
            self.logger.error(f"❌ Error reading state for {external_user_id}: {e}")
            return None, False

        if not raw:
            return None, False

        try:
            state = ConversationState.from_json(raw)
        except ValidationError as e:
            self.logger.warning(
                f"⚠️ Corrupt state for {external_user_id}, treating as idle",
                extra={"key": key, "errors": e.error_count()},
            )
            return None, False

        if state.phase == ConversationPhase.READY_TO_COMMIT:
            # Only ever exists inside a single delivery
            self.logger.warning(f"⚠️ Persisted ready_to_commit for {external_user_id}, treating as idle")
            return None, False

        if state.is_expired(self.ttl_seconds, now=self._clock()):
            self.logger.info(
                f"⌛ Expired state for {external_user_id}",
                extra={"key": key, "updated_at": state.updated_at.isoformat()},
            )
            return None, False

        self.logger.debug(f"📖 Get state for {external_user_id}: phase={state.phase.value}")
        return state, True

    async def set(
        self,
        external_user_id: str,
        state: ConversationState,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """
        Saves the state with a refreshed TTL.

        Raises:
            StoreError: If the backend write fails
        """
        key = self.key_for(external_user_id)
        ttl = ttl_seconds or self.ttl_seconds
        self.logger.info(f"💾 Set state for {external_user_id}: phase={state.phase.value}")
        await self.client.set(key, state.to_json(), expire=ttl)

    async def delete(self, external_user_id: str) -> None:
        """
        Removes the state of a user.

        Raises:
            StoreError: If the backend delete fails
        """
        key = self.key_for(external_user_id)
        self.logger.info(f"🗑️ Reset state for {external_user_id}")
        await self.client.delete(key)

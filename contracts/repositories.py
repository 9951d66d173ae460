"""
Contracts for the state persistence layer.

Defines the interfaces the key-value backends and the conversation store
implement, so Redis and the in-process store can be swapped without
touching the dialogue logic.
"""

from typing import Optional, Protocol, Tuple, runtime_checkable

from models.conversation import ConversationState


@runtime_checkable
class KeyValueClient(Protocol):
    """
    Minimal key-value backend holding string values with a TTL.

    Implementations:
    - RedisClient: redis.asyncio, production default
    - MemoryClient: in-process dictionary with expiry
    """

    async def get(self, key: str) -> Optional[str]:
        """
        Reads a raw value.

        Returns:
            The stored string, or None when missing or expired
        """
        ...

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> None:
        """
        Stores a raw value, replacing any previous one and its TTL.

        Raises:
            StoreError: If the backend rejects the write
        """
        ...

    async def delete(self, key: str) -> None:
        """
        Removes a key. Deleting a missing key is not an error.

        Raises:
            StoreError: If the backend rejects the delete
        """
        ...

    async def ping(self) -> bool:
        """Returns True when the backend is reachable."""
        ...


@runtime_checkable
class ConversationStore(Protocol):
    """
    Interface for the per-user conversation state store.

    Implementations:
    - ConversationStateStore: JSON records over a KeyValueClient
    """

    def key_for(self, external_user_id: str) -> str:
        """Store key for a LINE user id (``conv:<user_id>``)."""
        ...

    async def get(self, external_user_id: str) -> Tuple[Optional[ConversationState], bool]:
        """
        Loads the state of a user.

        Never raises for missing, corrupt or expired records: those all
        return ``(None, False)``.
        """
        ...

    async def set(
        self,
        external_user_id: str,
        state: ConversationState,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """
        Saves the state with a refreshed TTL.

        Raises:
            StoreError: If the write fails
        """
        ...

    async def delete(self, external_user_id: str) -> None:
        """
        Removes the state of a user.

        Raises:
            StoreError: If the delete fails
        """
        ...

"""User repository using Supabase."""
from typing import Any, Dict, Optional

from core.exceptions import DomainServiceError, IdentityResolutionError
from infrastructure.persistence.supabase_base import SupabaseRepository


class UserRepositorySupabase(SupabaseRepository):
    """Repository for the `users` table, keyed by `line_user_id`."""

    async def upsert_line_user(
        self,
        line_user_id: str,
        *,
        name: Optional[str] = None,
        picture_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Gets or creates the user row for a LINE user.

        Profile fields are only written when provided, so a profile fetch
        failure never blanks out stored values.

        Raises:
            IdentityResolutionError: If Supabase is unavailable or fails
        """
        payload: Dict[str, Any] = {"line_user_id": line_user_id}
        if name:
            payload["name"] = name
        if picture_url:
            payload["picture_url"] = picture_url

        try:
            result = await self._run(
                lambda: self.supabase.table("users")
                .upsert(payload, on_conflict="line_user_id")
                .execute(),
                label="users.upsert_line",
            )
        except DomainServiceError as exc:
            raise IdentityResolutionError(line_user_id, str(exc)) from exc

        if not result.data:
            raise IdentityResolutionError(line_user_id, "upsert returned no row")
        return result.data[0]

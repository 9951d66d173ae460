"""Resolution of LINE users to internal user ids."""

import logging
from typing import Optional

from core.exceptions import IdentityResolutionError

logger = logging.getLogger(__name__)


class LineIdentityResolver:
    """
    Upserts the user row for a LINE user id.

    The LINE profile is fetched first for the display name and picture; a
    profile failure only leaves those fields empty.
    """

    def __init__(self, user_repository, line_client: Optional[object] = None):
        """
        Args:
            user_repository: UserRepositorySupabase
            line_client: LineClient used for profile lookups (optional)
        """
        self.user_repository = user_repository
        self.line_client = line_client

    async def resolve_user(self, external_user_id: str) -> str:
        """
        Raises:
            IdentityResolutionError: If the user row cannot be created or read
        """
        if not external_user_id:
            raise IdentityResolutionError(external_user_id, "empty LINE user id")

        profile = None
        if self.line_client is not None:
            profile = await self.line_client.get_profile(external_user_id)

        user = await self.user_repository.upsert_line_user(
            external_user_id,
            name=(profile or {}).get("displayName"),
            picture_url=(profile or {}).get("pictureUrl"),
        )
        user_id = user.get("id")
        if not user_id:
            raise IdentityResolutionError(external_user_id, "user row has no id")
        logger.debug(f"👤 Resolved {external_user_id} -> {user_id}")
        return str(user_id)

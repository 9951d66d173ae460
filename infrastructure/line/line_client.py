"""
HTTP client for the LINE Messaging API.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class LineClient:
    """Client for the reply and profile endpoints of the Messaging API."""

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.line.me",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Authorization": f"Bearer {access_token}"},
            transport=transport,
        )

    async def reply(self, reply_token: str, messages: List[Dict[str, Any]]) -> bool:
        """
        Sends messages with a reply token.

        LINE accepts at most five messages per reply; extra ones are dropped.

        Returns:
            True when LINE accepted the reply
        """
        if not reply_token:
            logger.warning("⚠️ Reply skipped: no reply token")
            return False
        try:
            response = await self._client.post(
                "/v2/bot/message/reply",
                json={"replyToken": reply_token, "messages": messages[:5]},
            )
        except httpx.HTTPError as exc:
            logger.error(f"❌ LINE reply failed: {exc}")
            return False

        if response.status_code != 200:
            logger.warning(
                f"⚠️ LINE reply rejected: status={response.status_code}",
                extra={"body": response.text[:200]},
            )
            return False
        return True

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetches the display name and picture of a user.

        Returns:
            Profile dict (displayName, pictureUrl, ...) or None on failure
        """
        try:
            response = await self._client.get(f"/v2/bot/profile/{user_id}")
        except httpx.HTTPError as exc:
            logger.warning(f"⚠️ LINE profile request failed for {user_id}: {exc}")
            return None

        if response.status_code != 200:
            logger.warning(
                f"⚠️ LINE profile unavailable for {user_id}: status={response.status_code}"
            )
            return None
        return response.json()

    async def close(self) -> None:
        await self._client.aclose()

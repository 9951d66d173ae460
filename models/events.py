"""Inbound LINE webhook events."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    FOLLOW = "follow"
    MESSAGE = "message"
    POSTBACK = "postback"


class InboundEvent(BaseModel):
    """
    One chat event, reduced to what the dialogue needs.

    Only follow events, text messages and postbacks become InboundEvents;
    everything else in a delivery is skipped by ``parse_webhook_body``.
    """

    type: EventType
    external_user_id: str = Field(..., min_length=1)
    reply_token: Optional[str] = None
    text: Optional[str] = None
    postback_data: Optional[str] = None
    webhook_event_id: Optional[str] = None
    is_redelivery: bool = False

    @classmethod
    def from_line_event(cls, raw: Dict[str, Any]) -> Optional["InboundEvent"]:
        """
        Builds an event from one entry of the webhook ``events`` array.

        Returns:
            InboundEvent, or None for unsupported event or message types and
            events without a user source.
        """
        user_id = (raw.get("source") or {}).get("userId")
        if not user_id:
            return None

        event_type = raw.get("type")
        text = None
        postback_data = None

        if event_type == EventType.MESSAGE.value:
            message = raw.get("message") or {}
            if message.get("type") != "text":
                return None
            text = message.get("text") or ""
        elif event_type == EventType.POSTBACK.value:
            postback_data = (raw.get("postback") or {}).get("data") or ""
        elif event_type != EventType.FOLLOW.value:
            return None

        delivery = raw.get("deliveryContext") or {}
        return cls(
            type=EventType(event_type),
            external_user_id=user_id,
            reply_token=raw.get("replyToken"),
            text=text,
            postback_data=postback_data,
            webhook_event_id=raw.get("webhookEventId"),
            is_redelivery=bool(delivery.get("isRedelivery", False)),
        )


def parse_webhook_body(body: Dict[str, Any]) -> List[InboundEvent]:
    """Extracts the supported events of a webhook delivery, in order."""
    events = []
    for raw in body.get("events") or []:
        if not isinstance(raw, dict):
            continue
        event = InboundEvent.from_line_event(raw)
        if event is not None:
            events.append(event)
    return events

"""
LINE webhook endpoint.

Verifies the delivery signature, hands the events to the dialogue
orchestrator and sends each reply through the Messaging API.
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from config import settings
from core.exceptions import SignatureVerificationError
from infrastructure.line import LineClient, verify_signature
from models.events import parse_webhook_body
from services.dialogue_orchestrator import DialogueOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])

_orchestrator: Optional[DialogueOrchestrator] = None
_line_client: Optional[LineClient] = None


def configure(orchestrator: DialogueOrchestrator, line_client: LineClient) -> None:
    """Registers the collaborators used by the endpoint."""
    global _orchestrator, _line_client
    _orchestrator = orchestrator
    _line_client = line_client


def get_dialogue_orchestrator() -> DialogueOrchestrator:
    if _orchestrator is None:
        raise HTTPException(status_code=503, detail="Dialogue orchestrator not configured")
    return _orchestrator


def get_line_client() -> LineClient:
    if _line_client is None:
        raise HTTPException(status_code=503, detail="LINE client not configured")
    return _line_client


def get_channel_secret() -> str:
    return settings.line_channel_secret


@router.post("/line")
async def line_webhook(
    request: Request,
    x_line_signature: Optional[str] = Header(default=None),
    orchestrator: DialogueOrchestrator = Depends(get_dialogue_orchestrator),
    line_client: LineClient = Depends(get_line_client),
    channel_secret: str = Depends(get_channel_secret),
) -> Dict[str, Any]:
    """
    Handles a LINE webhook delivery.

    Returns 401 on a bad signature and 400 on a malformed body. Every
    event is processed even if an earlier one fails.
    """
    body = await request.body()

    if channel_secret:
        try:
            verify_signature(channel_secret, body, x_line_signature or "")
        except SignatureVerificationError as e:
            logger.warning(f"⚠️ Rejected webhook: {e}")
            raise HTTPException(status_code=401, detail=str(e))
    else:
        logger.warning("⚠️ LINE_CHANNEL_SECRET not set, signature not verified")

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Webhook body must be an object")

    events = parse_webhook_body(payload)
    results = await orchestrator.handle_events(events)

    for result in results:
        if result.event.reply_token and result.messages:
            await line_client.reply(result.event.reply_token, result.messages)

    return {"status": "ok", "processed": len(results)}

"""Webhook signature verification (X-Line-Signature)."""

import base64
import hashlib
import hmac

from core.exceptions import SignatureVerificationError


def compute_signature(channel_secret: str, body: bytes) -> str:
    """Base64 HMAC-SHA256 of the raw request body."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(channel_secret: str, body: bytes, signature: str) -> None:
    """
    Checks a webhook body against its signature header.

    Raises:
        SignatureVerificationError: If the signature is missing or does not match
    """
    if not signature:
        raise SignatureVerificationError("Missing X-Line-Signature")
    expected = compute_signature(channel_secret, body)
    if not hmac.compare_digest(expected, signature):
        raise SignatureVerificationError("Invalid X-Line-Signature")

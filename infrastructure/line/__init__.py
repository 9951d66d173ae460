"""LINE Messaging API adapters."""

from .line_client import LineClient
from .signature import compute_signature, verify_signature

__all__ = ["LineClient", "compute_signature", "verify_signature"]

"""Application services: dialogue orchestration, identity and replies."""

from .dialogue_orchestrator import DialogueOrchestrator, DialogueResult
from .identity_resolver import LineIdentityResolver
from .reply_composer import Reply, ReplyComposer

__all__ = [
    "DialogueOrchestrator",
    "DialogueResult",
    "LineIdentityResolver",
    "Reply",
    "ReplyComposer",
]

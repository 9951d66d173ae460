"""
Interfaces (Protocols) for the persistence layer and domain collaborators.
"""

from .repositories import ConversationStore, KeyValueClient
from .services import ExerciseLookup, IdentityResolver, SetService, WorkoutService

__all__ = [
    "ConversationStore",
    "KeyValueClient",
    "ExerciseLookup",
    "IdentityResolver",
    "SetService",
    "WorkoutService",
]

"""Domain exceptions for logbook-line."""

from typing import Optional


class LogbookBotError(Exception):
    """Base class for errors raised by this service."""
    pass


class StoreError(LogbookBotError):
    """Error writing to or deleting from the conversation state store."""

    def __init__(self, operation: str, key: str, cause: Optional[Exception] = None):
        super().__init__(f"Store {operation} failed for key {key}: {cause}")
        self.operation = operation
        self.key = key
        self.cause = cause


class IdentityResolutionError(LogbookBotError):
    """Error when a LINE user cannot be mapped to an internal user."""

    def __init__(self, external_user_id: str, reason: str = ""):
        super().__init__(
            f"Could not resolve user for {external_user_id}"
            + (f": {reason}" if reason else "")
        )
        self.external_user_id = external_user_id


class DomainServiceError(LogbookBotError):
    """Error reported by a workout, set or exercise collaborator."""
    pass


class WorkoutNotFoundError(DomainServiceError):
    """Error when a workout does not exist or belongs to another user."""

    def __init__(self, workout_id: Optional[str] = None, user_id: Optional[str] = None):
        if workout_id:
            super().__init__(f"Workout not found: {workout_id}")
        else:
            super().__init__(f"No open workout for user: {user_id}")
        self.workout_id = workout_id
        self.user_id = user_id


class ExerciseNotFoundError(DomainServiceError):
    """Error when an exercise id is unknown or inactive."""

    def __init__(self, exercise_id: str):
        super().__init__(f"Exercise not found: {exercise_id}")
        self.exercise_id = exercise_id


class InvalidTransitionError(LogbookBotError):
    """Error in an invalid phase transition."""

    def __init__(self, from_phase, to_phase):
        super().__init__(f"Invalid transition from {from_phase} to {to_phase}")
        self.from_phase = from_phase
        self.to_phase = to_phase


class SignatureVerificationError(LogbookBotError):
    """Webhook body does not match X-Line-Signature."""
    pass

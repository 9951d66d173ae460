from .field_validators import parse_reps, parse_weight, validate_exercise_id

__all__ = ["parse_reps", "parse_weight", "validate_exercise_id"]

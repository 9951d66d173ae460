"""Validation of the fields typed during set entry."""

import math
import re
from typing import Optional

from flows.text import normalize_text

_WEIGHT_UNIT = re.compile(r"\s*(kg|キロ)$")
_DECIMAL = re.compile(r"\+?[0-9]+(?:\.[0-9]+)?")


def validate_exercise_id(text: str, min_length: int = 4) -> tuple[bool, str]:
    """
    Checks the shape of an exercise id.

    Returns: (is_valid, exercise_id)

    The id is compared as typed apart from surrounding whitespace; ids are
    case sensitive in the catalogue, so no case folding is applied.
    """
    cleaned = (text or "").strip()
    if not cleaned or len(cleaned) < min_length:
        return False, cleaned
    if any(ch.isspace() for ch in cleaned):
        return False, cleaned
    return True, cleaned


def parse_weight(text: str) -> tuple[bool, Optional[float]]:
    """
    Parses a weight in kilograms.

    Accepts plain decimals with full-width digits and an optional ``kg``
    suffix ("60", "６０", "62.5kg"). Exponents, digit separators, negatives
    and NaN are rejected.

    Returns: (is_valid, weight_kg)
    """
    cleaned = _WEIGHT_UNIT.sub("", normalize_text(text))
    if not _DECIMAL.fullmatch(cleaned):
        return False, None
    weight = float(cleaned)
    if not math.isfinite(weight) or weight < 0:
        return False, None
    return True, weight


def parse_reps(text: str) -> tuple[bool, Optional[int]]:
    """
    Parses a repetition count: a positive integer, full-width digits allowed.

    Returns: (is_valid, reps)
    """
    cleaned = normalize_text(text)
    if cleaned.endswith("回"):
        cleaned = cleaned[:-1].strip()
    if not re.fullmatch(r"\+?\d+", cleaned):
        return False, None
    reps = int(cleaned)
    if reps <= 0:
        return False, None
    return True, reps

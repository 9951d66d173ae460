"""Text normalization shared by the resolver and the validators."""

import unicodedata


def normalize_text(text: str) -> str:
    """
    Normalizes chat input for comparison.

    NFKC folds full-width letters and digits ("ＳＴＡＲＴ", "６０") to
    their ASCII forms; the result is stripped and case-folded.
    """
    return unicodedata.normalize("NFKC", text or "").strip().casefold()

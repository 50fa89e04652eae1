"""Text normalization - Pure functions.

Folds Turkish characters and case into a canonical ASCII-lowercase form so
that a city typed by a subscriber and a locality returned by the geocoder
compare equal.
"""

# Applied before lowercasing: str.lower() turns "İ" into "i" plus a combining dot.
_CHARACTER_MAP = str.maketrans({
    "İ": "i",
    "I": "i",
    "ı": "i",
    "Ş": "s",
    "ş": "s",
    "Ğ": "g",
    "ğ": "g",
    "Ü": "u",
    "ü": "u",
    "Ö": "o",
    "ö": "o",
    "Ç": "c",
    "ç": "c",
})


def normalize_text(text: str | None) -> str:
    """Normalize a place name for matching.

    Pure function.

    Example: "İstanbul" -> "istanbul", "Çanakkale" -> "canakkale"

    Args:
        text: The text to normalize

    Returns:
        Normalized string, or "" for empty input
    """
    if not text:
        return ""

    return text.translate(_CHARACTER_MAP).lower().strip()

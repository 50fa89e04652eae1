"""Location resolution logic - Pure functions.

Turns a reverse-geocoding response into a display name and a list of
normalized candidate names used for subscriber matching.
"""

from dataclasses import dataclass, field
from typing import Any

from quake_notifier.core.text import normalize_text


# Display name when geocoding fails or returns nothing usable
UNKNOWN_LOCATION = "Unknown"

# Response fields in priority order, finest granularity first
LOCALITY_FIELDS = ("locality", "city", "principalSubdivision")


@dataclass(frozen=True)
class GeoLocation:
    """Resolved location of an event.

    Attributes:
        display: Human-readable name, None if nothing was resolved
        candidates: Normalized names for subscriber matching, in priority order
    """
    display: str | None = None
    candidates: tuple[str, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        """Display name with the unknown-location fallback applied."""
        return self.display or UNKNOWN_LOCATION


def resolve_location(response: dict[str, Any]) -> GeoLocation:
    """Build a GeoLocation from a reverse-geocode response.

    Pure function.

    Args:
        response: JSON body with optional locality/city/principalSubdivision

    Returns:
        GeoLocation with the first non-empty field as display and every
        non-empty field, normalized, as a candidate
    """
    names = []
    for key in LOCALITY_FIELDS:
        value = response.get(key)
        if isinstance(value, str) and value.strip():
            names.append(value.strip())

    candidates: list[str] = []
    for name in names:
        normalized = normalize_text(name)
        if normalized and normalized not in candidates:
            candidates.append(normalized)

    return GeoLocation(
        display=names[0] if names else None,
        candidates=tuple(candidates),
    )


def unknown_location() -> GeoLocation:
    """Location used when the lookup failed: no display, no candidates."""
    return GeoLocation()


def is_city_result(results: list[dict[str, Any]]) -> bool:
    """Check whether a place search classified any match as a city.

    Pure function.

    Args:
        results: Nominatim search results

    Returns:
        True if at least one result has addresstype 'city'
    """
    return any(
        isinstance(item, dict) and item.get("addresstype") == "city"
        for item in results
    )

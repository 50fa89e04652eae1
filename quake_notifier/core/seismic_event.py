"""Seismic event models and parsing - Pure functions.

This module handles parsing Seismic Portal GeoJSON features into typed
SeismicEvent objects. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class SeismicEvent:
    """Immutable seismic event data model.

    Attributes:
        source_id: Unique event ID within the feed (Seismic Portal unid)
        time: Event origin time (UTC)
        magnitude: Event magnitude
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        authority: Agency that reported the event (e.g. 'EMSC', 'KOERI')
    """
    source_id: str
    time: datetime
    magnitude: float
    latitude: float
    longitude: float
    authority: str

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


def parse_event_time(value: Any) -> datetime:
    """Parse a feed timestamp into an aware UTC datetime.

    Pure function. Accepts ISO 8601 strings (with or without 'Z') and
    milliseconds since epoch.

    Raises:
        ValueError: If the value cannot be interpreted as a time
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid event time: {value!r}")

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

    text = str(value).strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        # Some agencies report sub-second precision fromisoformat rejects
        parsed = datetime.fromisoformat(text.split(".")[0])

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def parse_event(
    feature: dict[str, Any],
    fallback_time: datetime | None = None,
) -> SeismicEvent | None:
    """Parse a single GeoJSON feature into a SeismicEvent.

    Pure function: takes raw dict, returns typed SeismicEvent or None if invalid.
    The origin time is only displayed, so a missing or unparseable time falls
    back to ``fallback_time`` when one is given.

    Args:
        feature: GeoJSON feature dict from the Seismic Portal API
        fallback_time: Time used when the feature's time is unusable

    Returns:
        SeismicEvent object or None if parsing fails
    """
    try:
        source_id = feature.get("id")
        if not source_id:
            return None

        props = feature.get("properties") or {}

        magnitude = props.get("mag")
        latitude = props.get("lat")
        longitude = props.get("lon")
        if magnitude is None or latitude is None or longitude is None:
            return None

        try:
            time = parse_event_time(props["time"])
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            if fallback_time is None:
                return None
            time = fallback_time

        return SeismicEvent(
            source_id=str(source_id),
            time=time,
            magnitude=float(magnitude),
            latitude=float(latitude),
            longitude=float(longitude),
            authority=str(props.get("auth") or "Unknown"),
        )
    except (AttributeError, TypeError, ValueError):
        return None


def parse_events(
    geojson: dict[str, Any],
    fallback_time: datetime | None = None,
) -> list[SeismicEvent]:
    """Parse a Seismic Portal response into a list of SeismicEvents.

    Pure function: drops invalid features and keeps feed order, which the
    Seismic Portal returns newest first.

    Args:
        geojson: Full GeoJSON FeatureCollection
        fallback_time: Time used for features without a usable time

    Returns:
        List of valid SeismicEvent objects in feed order
    """
    events = []

    for feature in geojson.get("features", []):
        event = parse_event(feature, fallback_time) if isinstance(feature, dict) else None
        if event is not None:
            events.append(event)

    return events

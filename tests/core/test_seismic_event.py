"""Unit tests for seismic event parsing.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone

import pytest

from quake_notifier.core.seismic_event import (
    SeismicEvent,
    parse_event,
    parse_event_time,
    parse_events,
)


@pytest.fixture
def sample_feature():
    """Create a sample Seismic Portal GeoJSON feature."""
    return {
        "type": "Feature",
        "id": "20240206_0000012",
        "geometry": {"type": "Point", "coordinates": [37.04, 37.17, -10.0]},
        "properties": {
            "time": "2024-02-06T01:17:35.0Z",
            "mag": 7.8,
            "lat": 37.17,
            "lon": 37.04,
            "auth": "KOERI",
            "flynn_region": "CENTRAL TURKEY",
        },
    }


class TestParseEventTime:
    """Tests for parse_event_time() function."""

    def test_iso_with_z(self):
        """ISO string with Z suffix is parsed as UTC."""
        result = parse_event_time("2024-02-06T01:17:35.0Z")
        assert result == datetime(2024, 2, 6, 1, 17, 35, tzinfo=timezone.utc)

    def test_iso_with_offset(self):
        """Offsets are converted to UTC."""
        result = parse_event_time("2024-02-06T04:17:35+03:00")
        assert result == datetime(2024, 2, 6, 1, 17, 35, tzinfo=timezone.utc)

    def test_naive_iso_assumed_utc(self):
        """Strings without zone are treated as UTC."""
        result = parse_event_time("2024-02-06T01:17:35")
        assert result.tzinfo is not None
        assert result.hour == 1

    def test_epoch_milliseconds(self):
        """Numbers are milliseconds since epoch."""
        result = parse_event_time(1707182255000)
        assert result == datetime(2024, 2, 6, 1, 17, 35, tzinfo=timezone.utc)

    def test_invalid_raises(self):
        """Garbage raises ValueError."""
        with pytest.raises(ValueError):
            parse_event_time("yesterday")


class TestParseEvent:
    """Tests for parse_event() function."""

    def test_valid_feature(self, sample_feature):
        """Parses all fields from a valid feature."""
        event = parse_event(sample_feature)

        assert event is not None
        assert event.source_id == "20240206_0000012"
        assert event.magnitude == 7.8
        assert event.latitude == 37.17
        assert event.longitude == 37.04
        assert event.authority == "KOERI"
        assert event.time.year == 2024

    def test_missing_id(self, sample_feature):
        """Feature without id is rejected."""
        del sample_feature["id"]
        assert parse_event(sample_feature) is None

    def test_missing_magnitude(self, sample_feature):
        """Feature without magnitude is rejected."""
        del sample_feature["properties"]["mag"]
        assert parse_event(sample_feature) is None

    def test_missing_coordinates(self, sample_feature):
        """Feature without lat/lon is rejected."""
        del sample_feature["properties"]["lat"]
        assert parse_event(sample_feature) is None

    def test_bad_time(self, sample_feature):
        """Feature with unparseable time is rejected without a fallback."""
        sample_feature["properties"]["time"] = "not a time"
        assert parse_event(sample_feature) is None

    def test_bad_time_uses_fallback(self, sample_feature):
        """The time is display-only, so a fallback keeps the event."""
        fallback = datetime(2024, 2, 6, 2, 0, 0, tzinfo=timezone.utc)
        sample_feature["properties"]["time"] = "not a time"

        event = parse_event(sample_feature, fallback_time=fallback)

        assert event.time == fallback
        assert event.source_id == "20240206_0000012"

    def test_missing_time_uses_fallback(self, sample_feature):
        fallback = datetime(2024, 2, 6, 2, 0, 0, tzinfo=timezone.utc)
        del sample_feature["properties"]["time"]

        assert parse_event(sample_feature, fallback_time=fallback).time == fallback

    def test_missing_authority_defaults(self, sample_feature):
        """Missing authority becomes 'Unknown'."""
        del sample_feature["properties"]["auth"]
        assert parse_event(sample_feature).authority == "Unknown"

    def test_coordinates_property(self, sample_feature):
        """coordinates returns (lat, lon)."""
        assert parse_event(sample_feature).coordinates == (37.17, 37.04)


class TestParseEvents:
    """Tests for parse_events() function."""

    def test_keeps_feed_order(self, sample_feature):
        """Events are returned in feed order, not re-sorted."""
        older_first = [
            {**sample_feature, "id": "a", "properties": {**sample_feature["properties"], "time": "2024-01-01T00:00:00Z"}},
            {**sample_feature, "id": "b", "properties": {**sample_feature["properties"], "time": "2024-03-01T00:00:00Z"}},
        ]

        events = parse_events({"features": older_first})

        assert [e.source_id for e in events] == ["a", "b"]

    def test_skips_invalid_features(self, sample_feature):
        """Invalid features are dropped, valid ones kept."""
        events = parse_events({"features": [sample_feature, {"id": "x"}, "junk"]})
        assert len(events) == 1
        assert isinstance(events[0], SeismicEvent)

    def test_empty(self):
        """No features yields no events."""
        assert parse_events({"features": []}) == []
        assert parse_events({}) == []

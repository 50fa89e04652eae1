"""Unit tests for message formatting.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone

import pytest

from quake_notifier.core.config import TenantConfig
from quake_notifier.core.seismic_event import SeismicEvent
from quake_notifier.core.formatter import (
    ALERT_COLOR,
    OTHER_EVENTS_URL,
    build_alert_content,
    format_alert_embed,
    format_channel_message,
    format_direct_message,
    format_event_summary,
    get_severity_label,
    should_ping_everyone,
)


@pytest.fixture
def sample_event():
    """Create a sample event for testing."""
    return SeismicEvent(
        source_id="20240206_0000012",
        time=datetime(2024, 2, 6, 1, 17, 35, tzinfo=timezone.utc),
        magnitude=6.4,
        latitude=37.17,
        longitude=37.04,
        authority="KOERI",
    )


@pytest.fixture
def tenant():
    """Create a tenant with no escalation configured."""
    return TenantConfig(tenant_id="guild1", channel_id="100", feed_url="https://www.seismicportal.eu/fdsnws/event/1/query")


class TestBuildAlertContent:
    """Tests for build_alert_content() function."""

    def test_no_mentions(self, sample_event, tenant):
        """Nothing configured gives empty content."""
        assert build_alert_content(sample_event, tenant) == ""

    def test_role_mention(self, sample_event, tenant):
        """Configured role is mentioned."""
        config = TenantConfig(tenant_id="guild1", ping_role_id="777")
        assert build_alert_content(sample_event, config) == "<@&777>"

    def test_everyone_at_threshold(self, sample_event):
        """@everyone is added at the threshold (inclusive)."""
        config = TenantConfig(tenant_id="guild1", everyone_threshold=6.4)
        assert build_alert_content(sample_event, config) == "@everyone"

    def test_everyone_below_threshold(self, sample_event):
        """@everyone is not added below the threshold."""
        config = TenantConfig(tenant_id="guild1", everyone_threshold=6.5)
        assert build_alert_content(sample_event, config) == ""

    def test_role_and_everyone_combine(self, sample_event):
        """Role mention and @everyone are combined."""
        config = TenantConfig(tenant_id="guild1", ping_role_id="777", everyone_threshold=6.0)
        assert build_alert_content(sample_event, config) == "<@&777> @everyone"

    def test_should_ping_everyone_unset(self, sample_event, tenant):
        """No threshold never escalates."""
        assert should_ping_everyone(sample_event, tenant) is False


class TestFormatAlertEmbed:
    """Tests for format_alert_embed() function."""

    def test_contains_event_fields(self, sample_event):
        """Embed carries every alert field."""
        embed = format_alert_embed(sample_event, "Pazarcık")
        fields = {f["name"]: f["value"] for f in embed["fields"]}

        assert fields["Time"] == "2024-02-06 01:17:35 UTC"
        assert fields["ID"] == "20240206_0000012"
        assert fields["Location"] == "Pazarcık"
        assert fields["Source"] == "KOERI"
        assert fields["Magnitude"].startswith("6.4")
        assert fields["Coordinates"] == "Lat: 37.17\nLon: 37.04"
        assert fields["Link"] == (
            "https://www.seismicportal.eu/eventdetails.html?unid=20240206_0000012"
        )
        assert fields["Other Earthquakes"] == OTHER_EVENTS_URL

    def test_style(self, sample_event):
        """Embed has title, color and timestamp."""
        embed = format_alert_embed(sample_event, "Unknown")

        assert "Earthquake" in embed["title"]
        assert embed["color"] == ALERT_COLOR
        assert embed["timestamp"] == "2024-02-06T01:17:35+00:00"


class TestFormatChannelMessage:
    """Tests for format_channel_message() function."""

    def test_without_mentions(self, sample_event, tenant):
        """No content key and no allowed mentions when nobody is pinged."""
        embed = format_alert_embed(sample_event, "Unknown")

        payload = format_channel_message(sample_event, tenant, embed)

        assert "content" not in payload
        assert payload["embeds"] == [embed]
        assert payload["allowed_mentions"] == {"parse": [], "roles": []}

    def test_with_mentions(self, sample_event):
        """Mentioned role and @everyone are allowed to ping."""
        config = TenantConfig(tenant_id="guild1", ping_role_id="777", everyone_threshold=5.0)
        embed = format_alert_embed(sample_event, "Unknown")

        payload = format_channel_message(sample_event, config, embed)

        assert payload["content"] == "<@&777> @everyone"
        assert payload["allowed_mentions"] == {"parse": ["everyone"], "roles": ["777"]}


class TestFormatDirectMessage:
    """Tests for format_direct_message() function."""

    def test_embed_only(self, sample_event):
        """Direct messages carry the same embed and no content."""
        embed = format_alert_embed(sample_event, "Unknown")
        assert format_direct_message(embed) == {"embeds": [embed]}


class TestSummaries:
    """Tests for summary helpers."""

    @pytest.mark.parametrize("magnitude,label", [
        (8.1, "Great"),
        (7.0, "Major"),
        (6.4, "Strong"),
        (5.0, "Moderate"),
        (4.2, "Light"),
        (3.0, "Minor"),
        (2.1, "Micro"),
    ])
    def test_severity_label(self, magnitude, label):
        """Severity boundaries are inclusive."""
        assert get_severity_label(magnitude) == label

    def test_event_summary(self, sample_event):
        """Summary names magnitude, place and ID."""
        summary = format_event_summary(sample_event, "Pazarcık")
        assert summary.startswith("M6.4 - Pazarcık")
        assert "20240206_0000012" in summary

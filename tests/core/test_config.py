"""Unit tests for configuration models and settings validation.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone

import pytest

from quake_notifier.core.config import (
    AppConfig,
    TenantConfig,
    apply_setting,
    parse_magnitude,
    validate_app_config,
    validate_feed_url,
    validate_region_code,
)
from quake_notifier.core.errors import InvalidConfigValue


NOW = datetime(2024, 2, 6, 12, 0, 0, tzinfo=timezone.utc)
FEED_URL = "https://www.seismicportal.eu/fdsnws/event/1/query?limit=10&format=json"


@pytest.fixture
def tenant():
    return TenantConfig(tenant_id="guild1")


class TestTenantConfig:
    """Tests for TenantConfig defaults."""

    def test_defaults(self, tenant):
        """New tenants are disabled and unconfigured."""
        assert tenant.enabled is False
        assert tenant.channel_id is None
        assert tenant.feed_url is None
        assert tenant.everyone_threshold is None
        assert tenant.is_ready is False

    def test_ready_needs_channel_and_feed(self):
        """Both channel and feed URL are required."""
        assert TenantConfig(tenant_id="g", channel_id="1").is_ready is False
        assert TenantConfig(tenant_id="g", feed_url=FEED_URL).is_ready is False
        assert TenantConfig(tenant_id="g", channel_id="1", feed_url=FEED_URL).is_ready is True


class TestParseMagnitude:
    """Tests for parse_magnitude() function."""

    def test_dot_decimal(self):
        assert parse_magnitude("magnitude_threshold", "4.5") == 4.5

    def test_comma_decimal(self):
        """Locale decimal comma is accepted."""
        assert parse_magnitude("magnitude_threshold", "4,5") == 4.5

    def test_number(self):
        assert parse_magnitude("magnitude_threshold", 5) == 5.0

    @pytest.mark.parametrize("value", ["abc", "", "nan", "inf", True])
    def test_rejected(self, value):
        """Non-numeric and non-finite values are rejected."""
        with pytest.raises(InvalidConfigValue):
            parse_magnitude("magnitude_threshold", value)


class TestValidateFeedUrl:
    """Tests for validate_feed_url() function."""

    @pytest.mark.parametrize("url", [
        FEED_URL,
        "http://seismicportal.eu/fdsnws/event/1/query",
        "https://seismicportal.eu/fdsnws/event/1/query?minmag=4",
    ])
    def test_accepted(self, url):
        assert validate_feed_url(url) == url

    @pytest.mark.parametrize("url", [
        "https://earthquake.usgs.gov/fdsnws/event/1/query",
        "https://www.seismicportal.eu/",
        "ftp://seismicportal.eu/fdsnws/event/1/query",
        "",
    ])
    def test_rejected(self, url):
        with pytest.raises(InvalidConfigValue):
            validate_feed_url(url)

    def test_too_long(self):
        with pytest.raises(InvalidConfigValue):
            validate_feed_url(FEED_URL + "&x=" + "a" * 300)


class TestValidateRegionCode:
    """Tests for validate_region_code() function."""

    def test_accepted(self):
        assert validate_region_code(" tr ") == "tr"

    @pytest.mark.parametrize("code", ["", "   ", "toolong"])
    def test_rejected(self, code):
        with pytest.raises(InvalidConfigValue):
            validate_region_code(code)


class TestApplySetting:
    """Tests for apply_setting() function."""

    def test_records_actor_and_time(self, tenant):
        """Every change records who made it and when."""
        updated = apply_setting(tenant, "channel_id", "123", "42", NOW)

        assert updated.channel_id == "123"
        assert updated.modified_by == "42"
        assert updated.modified_at == NOW

    def test_does_not_mutate_input(self, tenant):
        """The original config is untouched."""
        apply_setting(tenant, "region_code", "tr", "42", NOW)
        assert tenant.region_code == "en"

    def test_toggle(self, tenant):
        """'toggle' flips enabled."""
        enabled = apply_setting(tenant, "enabled", "toggle", "42", NOW)
        disabled = apply_setting(enabled, "enabled", "toggle", "42", NOW)

        assert enabled.enabled is True
        assert disabled.enabled is False

    def test_enable_explicitly(self, tenant):
        assert apply_setting(tenant, "enabled", True, "42", NOW).enabled is True

    def test_magnitude_threshold_comma(self, tenant):
        updated = apply_setting(tenant, "magnitude_threshold", "5,5", "42", NOW)
        assert updated.magnitude_threshold == 5.5

    def test_clear_everyone_threshold(self):
        config = TenantConfig(tenant_id="g", everyone_threshold=6.3)
        assert apply_setting(config, "everyone_threshold", None, "42", NOW).everyone_threshold is None

    def test_clear_ping_role(self):
        config = TenantConfig(tenant_id="g", ping_role_id="777")
        assert apply_setting(config, "ping_role_id", None, "42", NOW).ping_role_id is None

    def test_cannot_clear_threshold(self, tenant):
        """The magnitude threshold is not clearable."""
        with pytest.raises(InvalidConfigValue):
            apply_setting(tenant, "magnitude_threshold", None, "42", NOW)

    def test_unknown_field(self, tenant):
        with pytest.raises(InvalidConfigValue):
            apply_setting(tenant, "tenant_id", "other", "42", NOW)

    def test_invalid_channel_id(self, tenant):
        """Channel and role IDs must be numeric snowflakes."""
        with pytest.raises(InvalidConfigValue):
            apply_setting(tenant, "channel_id", "#general", "42", NOW)

    def test_invalid_feed_url(self, tenant):
        with pytest.raises(InvalidConfigValue):
            apply_setting(tenant, "feed_url", "https://example.com", "42", NOW)


class TestValidateAppConfig:
    """Tests for validate_app_config() function."""

    def test_valid(self):
        result = validate_app_config(AppConfig(
            discord_bot_token="token", admin_api_key="key", service_api_key="service"
        ))
        assert result.valid is True
        assert result.errors == []

    def test_missing_token(self):
        result = validate_app_config(AppConfig(admin_api_key="key"))
        assert result.valid is False
        assert result.critical_errors[0].field == "discord_bot_token"

    def test_unresolved_token(self):
        result = validate_app_config(AppConfig(discord_bot_token="${secret:discord}"))
        assert result.valid is False

    def test_bad_interval(self):
        result = validate_app_config(AppConfig(discord_bot_token="t", poll_interval_seconds=0))
        assert result.valid is False

    def test_missing_admin_key_is_warning(self):
        result = validate_app_config(AppConfig(discord_bot_token="token"))
        assert result.valid is True
        assert result.warnings[0].field == "admin_api_key"

    def test_missing_service_key_is_warning(self):
        result = validate_app_config(AppConfig(discord_bot_token="token", admin_api_key="key"))
        assert result.valid is True
        assert [w.field for w in result.warnings] == ["service_api_key"]

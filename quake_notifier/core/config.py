"""Configuration models - Pure data structures.

These are domain models for application and per-tenant configuration, plus
the pure validation applied to settings changes. The actual loading and
persistence (I/O) is handled by the shell layer.
"""

import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from quake_notifier.core.errors import InvalidConfigValue


# Subscriber ID recorded on configs created by the system itself
SYSTEM_SUBSCRIBER_ID = "0"

DEFAULT_MAGNITUDE_THRESHOLD = 3.0
DEFAULT_REGION_CODE = "en"

# Feed URLs must point at the Seismic Portal FDSN event query endpoint
FEED_URL_PATTERN = re.compile(r"^https?://(www\.)?seismicportal\.eu/fdsnws/event/1/query.*")
MAX_FEED_URL_LENGTH = 300
MAX_REGION_CODE_LENGTH = 5

SETTING_FIELDS = (
    "enabled",
    "channel_id",
    "ping_role_id",
    "magnitude_threshold",
    "everyone_threshold",
    "feed_url",
    "region_code",
)

# Fields that accept None to clear the value
CLEARABLE_FIELDS = ("ping_role_id", "everyone_threshold")


@dataclass(frozen=True)
class TenantConfig:
    """Notifier settings of one tenant.

    Attributes:
        tenant_id: Tenant (guild) identifier
        enabled: Whether the tenant is polled
        channel_id: Broadcast channel for alerts
        feed_url: Seismic Portal query URL
        magnitude_threshold: Minimum magnitude to alert on (inclusive)
        ping_role_id: Role mentioned on every alert
        everyone_threshold: Magnitude at which @everyone is added
        region_code: Language hint for reverse geocoding
        modified_by: Subscriber who last changed the settings
        modified_at: When the settings were last changed
    """
    tenant_id: str
    enabled: bool = False
    channel_id: str | None = None
    feed_url: str | None = None
    magnitude_threshold: float = DEFAULT_MAGNITUDE_THRESHOLD
    ping_role_id: str | None = None
    everyone_threshold: float | None = None
    region_code: str = DEFAULT_REGION_CODE
    modified_by: str = SYSTEM_SUBSCRIBER_ID
    modified_at: datetime | None = None

    @property
    def is_ready(self) -> bool:
        """Returns True if a channel and a feed URL are configured."""
        return bool(self.channel_id) and bool(self.feed_url)


@dataclass
class AppConfig:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        discord_bot_token: Bot token used for the Discord REST API
        poll_interval_seconds: How often a poll cycle is fired
        firestore_database: Firestore database name (None for default)
        tenants_collection: Collection holding tenant settings
        ledger_collection: Collection holding delivery records
        subscriptions_collection: Collection holding city subscriptions
        geocode_url: Reverse geocoding endpoint
        admin_api_key: Key granting administrator rights on the HTTP API
        service_api_key: Key the bot front end presents to act for subscribers
    """
    discord_bot_token: str | None = None
    poll_interval_seconds: int = 300
    firestore_database: str | None = None
    tenants_collection: str = "earthquake_tenants"
    ledger_collection: str = "earthquake_logs"
    subscriptions_collection: str = "earthquake_subscriptions"
    geocode_url: str = "https://api-bdc.net/data/reverse-geocode-client"
    admin_api_key: str | None = None
    service_api_key: str | None = None


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_app_config(config: AppConfig) -> ValidationResult:
    """Validate application configuration.

    Pure function.
    """
    errors: list[ValidationError] = []

    if not config.discord_bot_token or config.discord_bot_token.startswith("${"):
        errors.append(ValidationError(
            field="discord_bot_token",
            message="Discord bot token not resolved",
        ))

    if config.poll_interval_seconds <= 0:
        errors.append(ValidationError(
            field="poll_interval_seconds",
            message=f"Poll interval must be positive, got {config.poll_interval_seconds}",
        ))

    if not config.admin_api_key:
        errors.append(ValidationError(
            field="admin_api_key",
            message="No admin API key configured, settings API is read-only",
            severity="warning",
        ))

    if not config.service_api_key:
        errors.append(ValidationError(
            field="service_api_key",
            message="No service API key configured, only administrators can manage subscriptions",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(valid=not has_critical, errors=errors)


def parse_magnitude(field_name: str, value: Any) -> float:
    """Parse a magnitude entered by an operator.

    Pure function. Accepts numbers and strings using either '.' or ','
    as decimal separator.

    Raises:
        InvalidConfigValue: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidConfigValue(field_name, f"not a number: {value!r}")

    if isinstance(value, (int, float)):
        magnitude = float(value)
    else:
        text = str(value).strip().replace(",", ".", 1)
        try:
            magnitude = float(text)
        except ValueError:
            raise InvalidConfigValue(field_name, f"not a number: {value!r}") from None

    if not math.isfinite(magnitude):
        raise InvalidConfigValue(field_name, f"not a finite number: {value!r}")

    return magnitude


def validate_feed_url(value: Any) -> str:
    """Validate a Seismic Portal feed URL.

    Pure function.

    Raises:
        InvalidConfigValue: If the URL does not match the Seismic Portal endpoint
    """
    url = str(value or "").strip()

    if len(url) > MAX_FEED_URL_LENGTH:
        raise InvalidConfigValue("feed_url", f"longer than {MAX_FEED_URL_LENGTH} characters")

    if not FEED_URL_PATTERN.match(url):
        raise InvalidConfigValue("feed_url", f"not a Seismic Portal query URL: {url!r}")

    return url


def validate_region_code(value: Any) -> str:
    """Validate a geocoding region code. Pure function."""
    code = str(value or "").strip()

    if not code:
        raise InvalidConfigValue("region_code", "must not be empty")

    if len(code) > MAX_REGION_CODE_LENGTH:
        raise InvalidConfigValue(
            "region_code", f"longer than {MAX_REGION_CODE_LENGTH} characters"
        )

    return code


def _parse_enabled(value: Any, current: bool) -> bool:
    if value == "toggle":
        return not current
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "on", "off"):
        return value.strip().lower() in ("true", "on")
    raise InvalidConfigValue("enabled", f"not a boolean: {value!r}")


def _parse_identifier(field_name: str, value: Any) -> str:
    identifier = str(value).strip()
    if not identifier.isdigit():
        raise InvalidConfigValue(field_name, f"not a snowflake ID: {value!r}")
    return identifier


def apply_setting(
    config: TenantConfig,
    field_name: str,
    value: Any,
    acting_subscriber: str,
    now: datetime,
) -> TenantConfig:
    """Apply a single settings change to a tenant config.

    Pure function: returns a new TenantConfig, the input is never mutated.

    Args:
        config: Current tenant config
        field_name: One of SETTING_FIELDS
        value: New value; None clears ping_role_id and everyone_threshold,
            "toggle" flips enabled
        acting_subscriber: Subscriber making the change
        now: Timestamp of the change

    Returns:
        Updated TenantConfig

    Raises:
        InvalidConfigValue: If the field is unknown or the value is rejected
    """
    if field_name not in SETTING_FIELDS:
        raise InvalidConfigValue(field_name, "unknown setting")

    if value is None and field_name not in CLEARABLE_FIELDS:
        raise InvalidConfigValue(field_name, "cannot be cleared")

    if value is None:
        parsed: Any = None
    elif field_name == "enabled":
        parsed = _parse_enabled(value, config.enabled)
    elif field_name in ("channel_id", "ping_role_id"):
        parsed = _parse_identifier(field_name, value)
    elif field_name in ("magnitude_threshold", "everyone_threshold"):
        parsed = parse_magnitude(field_name, value)
    elif field_name == "feed_url":
        parsed = validate_feed_url(value)
    else:
        parsed = validate_region_code(value)

    return replace(
        config,
        **{field_name: parsed},
        modified_by=acting_subscriber,
        modified_at=now,
    )

"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Text normalization for place matching
- Seismic event parsing
- Event selection and ledger retention
- Location resolution from geocoder responses
- Message formatting
- Settings validation and subscription access rules

All functions here are deterministic and have no I/O.
"""

from quake_notifier.core.text import normalize_text
from quake_notifier.core.seismic_event import SeismicEvent, parse_events
from quake_notifier.core.dedup import (
    DeliveryRecord,
    select_events,
    compute_records_to_prune,
)
from quake_notifier.core.geocode import GeoLocation, resolve_location
from quake_notifier.core.formatter import (
    build_alert_content,
    format_alert_embed,
    format_channel_message,
    format_direct_message,
)
from quake_notifier.core.config import AppConfig, TenantConfig, apply_setting
from quake_notifier.core.subscriptions import Subscription, resolve_target

__all__ = [
    # Text
    "normalize_text",
    # Events
    "SeismicEvent",
    "parse_events",
    # Dedup
    "DeliveryRecord",
    "select_events",
    "compute_records_to_prune",
    # Geocode
    "GeoLocation",
    "resolve_location",
    # Formatter
    "build_alert_content",
    "format_alert_embed",
    "format_channel_message",
    "format_direct_message",
    # Config
    "AppConfig",
    "TenantConfig",
    "apply_setting",
    # Subscriptions
    "Subscription",
    "resolve_target",
]

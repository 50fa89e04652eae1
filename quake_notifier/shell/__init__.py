"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Seismic Portal feed client (HTTP)
- Reverse geocoding and city validation clients (HTTP)
- Discord REST client (HTTP)
- Firestore stores for tenant configs, delivery records, subscriptions
- Configuration loading (environment/files/secrets)

Keep this layer thin and simple. All business logic should be in core.
"""

from quake_notifier.shell.feed_client import SeismicPortalClient
from quake_notifier.shell.geocode_client import CityValidationClient, ReverseGeocodeClient
from quake_notifier.shell.discord_client import DiscordClient
from quake_notifier.shell.ledger_store import DeliveryLedger
from quake_notifier.shell.subscription_store import SubscriptionRegistry
from quake_notifier.shell.tenant_store import TenantConfigStore
from quake_notifier.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "SeismicPortalClient",
    "CityValidationClient",
    "ReverseGeocodeClient",
    "DiscordClient",
    "DeliveryLedger",
    "SubscriptionRegistry",
    "TenantConfigStore",
    "load_config",
    "load_config_from_env",
]

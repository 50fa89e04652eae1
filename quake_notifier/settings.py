"""Tenant settings operations.

The narrow configuration interface used by the settings surface:
``get_config(tenant)`` and ``set_config_field(tenant, field, value, acting)``.
Validation is pure and lives in core.config; this module adds persistence.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from quake_notifier.core.config import TenantConfig, apply_setting
from quake_notifier.shell.tenant_store import TenantConfigStore


logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and changes a tenant's notifier settings."""

    def __init__(
        self,
        store: TenantConfigStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.clock = clock

    def get_config(self, tenant_id: str) -> TenantConfig:
        """Fetch a tenant's settings, creating disabled defaults if missing."""
        return self.store.get_config(tenant_id)

    def set_config_field(
        self,
        tenant_id: str,
        field_name: str,
        value: Any,
        acting_subscriber: str,
    ) -> TenantConfig:
        """Validate and persist a single settings change.

        Args:
            tenant_id: Tenant to change
            field_name: Setting to change (see core.config.SETTING_FIELDS)
            value: New value, None to clear a clearable setting
            acting_subscriber: Subscriber making the change

        Returns:
            The updated settings

        Raises:
            InvalidConfigValue: If the value is rejected; nothing is stored
        """
        current = self.store.get_config(tenant_id)
        updated = apply_setting(current, field_name, value, acting_subscriber, self.clock())
        self.store.save(updated)

        logger.info(
            "Tenant %s setting %s changed by %s",
            tenant_id,
            field_name,
            acting_subscriber,
        )
        return updated

    def toggle(self, tenant_id: str, acting_subscriber: str) -> TenantConfig:
        """Flip a tenant's enabled flag."""
        return self.set_config_field(tenant_id, "enabled", "toggle", acting_subscriber)

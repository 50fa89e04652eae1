"""Tenant Config Store - Imperative Shell.

Persists per-tenant notifier settings in Firestore, one document per tenant.
Documents are created lazily, disabled, on first access.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from google.cloud.firestore_v1.base_query import FieldFilter

from quake_notifier.core.config import (
    DEFAULT_MAGNITUDE_THRESHOLD,
    DEFAULT_REGION_CODE,
    SYSTEM_SUBSCRIBER_ID,
    TenantConfig,
)
from quake_notifier.shell.firestore_client import FirestoreClient


logger = logging.getLogger(__name__)


def tenant_config_to_dict(config: TenantConfig) -> dict[str, Any]:
    """Serialize a TenantConfig into a Firestore document."""
    return {
        "tenant_id": config.tenant_id,
        "enabled": config.enabled,
        "channel_id": config.channel_id,
        "feed_url": config.feed_url,
        "magnitude_threshold": config.magnitude_threshold,
        "ping_role_id": config.ping_role_id,
        "everyone_threshold": config.everyone_threshold,
        "region_code": config.region_code,
        "modified_by": config.modified_by,
        "modified_at": config.modified_at,
    }


def tenant_config_from_dict(tenant_id: str, data: dict[str, Any]) -> TenantConfig:
    """Parse a Firestore document into a TenantConfig."""
    everyone_threshold = data.get("everyone_threshold")

    return TenantConfig(
        tenant_id=tenant_id,
        enabled=bool(data.get("enabled", False)),
        channel_id=data.get("channel_id"),
        feed_url=data.get("feed_url"),
        magnitude_threshold=float(data.get("magnitude_threshold", DEFAULT_MAGNITUDE_THRESHOLD)),
        ping_role_id=data.get("ping_role_id"),
        everyone_threshold=float(everyone_threshold) if everyone_threshold is not None else None,
        region_code=data.get("region_code") or DEFAULT_REGION_CODE,
        modified_by=str(data.get("modified_by", SYSTEM_SUBSCRIBER_ID)),
        modified_at=data.get("modified_at"),
    )


class TenantConfigStore(FirestoreClient):
    """Firestore store of TenantConfig documents.

    Document structure (ID = tenant ID):
    {
        "tenant_id": "123", "enabled": true, "channel_id": "456", ...
    }
    """

    def get_config(self, tenant_id: str) -> TenantConfig:
        """Fetch a tenant's config, creating a disabled one if missing.

        This method performs database I/O.
        """
        doc = self._document(tenant_id).get()

        if doc.exists:
            return tenant_config_from_dict(tenant_id, doc.to_dict() or {})

        config = TenantConfig(
            tenant_id=tenant_id,
            modified_at=datetime.now(timezone.utc),
        )
        self.save(config)
        logger.info("Created default notifier config for tenant %s", tenant_id)
        return config

    def save(self, config: TenantConfig) -> None:
        """Persist a tenant's config. This method performs database I/O."""
        self._document(config.tenant_id).set(tenant_config_to_dict(config))

    def list_enabled(self) -> list[TenantConfig]:
        """Fetch the configs of all enabled tenants.

        This method performs database I/O.
        """
        query = self._collection().where(filter=FieldFilter("enabled", "==", True))

        configs = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            configs.append(tenant_config_from_dict(str(data.get("tenant_id", doc.id)), data))

        logger.info("Found %d enabled tenants", len(configs))
        return configs

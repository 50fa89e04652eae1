"""Notifier API - FastAPI service for settings and subscriptions.

Exposes the tenant settings operations and the subscriber-facing
subscription commands over HTTP. Deployed as a single Cloud Run service.
"""

import logging
import os
from dataclasses import asdict
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel

from quake_notifier.core.config import AppConfig, TenantConfig
from quake_notifier.core.errors import (
    CityNotFound,
    CityValidationUnavailable,
    DuplicateSubscription,
    InvalidConfigValue,
    NotifierError,
    PermissionDenied,
    SubscriptionNotFound,
)
from quake_notifier.settings import SettingsService
from quake_notifier.shell.config_loader import load_config, load_config_from_env
from quake_notifier.shell.firestore_client import FirestoreConfig
from quake_notifier.shell.subscription_store import SubscriptionRegistry
from quake_notifier.shell.tenant_store import TenantConfigStore
from quake_notifier.subscriptions import SubscriptionService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Quake Notifier API",
    description="Settings and city subscriptions for the earthquake notifier",
    version="1.0.0",
)


# ===== Request Models =====

class SettingUpdate(BaseModel):
    value: Any = None


class SubscriptionCreate(BaseModel):
    city: str
    subscriber_id: str | None = None


# ===== Service Wiring =====

_config: AppConfig | None = None
_settings_service: SettingsService | None = None
_subscription_service: SubscriptionService | None = None

# Command errors and the HTTP status they map to
_ERROR_STATUS: dict[type[NotifierError], int] = {
    InvalidConfigValue: 400,
    CityNotFound: 400,
    PermissionDenied: 403,
    SubscriptionNotFound: 404,
    DuplicateSubscription: 409,
    CityValidationUnavailable: 503,
}


def get_config() -> AppConfig:
    """Load application configuration once per process."""
    global _config
    if _config is None:
        if os.environ.get("CONFIG_PATH"):
            _config = load_config()
        else:
            _config = load_config_from_env()
    return _config


def get_settings_service() -> SettingsService:
    """Get or create the settings service."""
    global _settings_service
    if _settings_service is None:
        config = get_config()
        _settings_service = SettingsService(TenantConfigStore(
            config.tenants_collection,
            FirestoreConfig(database=config.firestore_database),
        ))
    return _settings_service


def get_subscription_service() -> SubscriptionService:
    """Get or create the subscription service."""
    global _subscription_service
    if _subscription_service is None:
        config = get_config()
        _subscription_service = SubscriptionService(SubscriptionRegistry(
            config.subscriptions_collection,
            FirestoreConfig(database=config.firestore_database),
        ))
    return _subscription_service


def _is_admin(x_admin_key: str | None, config: AppConfig) -> bool:
    """Check the admin key header against the configured key."""
    return bool(config.admin_api_key) and x_admin_key == config.admin_api_key


def _verify_admin_key(x_admin_key: str | None, config: AppConfig) -> None:
    """Verify admin API key."""
    if not config.admin_api_key:
        raise HTTPException(status_code=500, detail="Admin API key not configured")

    if x_admin_key != config.admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid admin key")


def _verify_caller(
    x_service_key: str | None,
    x_admin_key: str | None,
    config: AppConfig,
) -> None:
    """Verify the caller may act for the subscriber in X-Subscriber-Id.

    The bot front end authenticates with the service key, administrators
    with the admin key.
    """
    if not config.service_api_key and not config.admin_api_key:
        raise HTTPException(status_code=500, detail="Service API key not configured")

    if _is_admin(x_admin_key, config):
        return

    if not config.service_api_key or x_service_key != config.service_api_key:
        raise HTTPException(status_code=401, detail="Invalid service key")


def _to_http_error(error: NotifierError) -> HTTPException:
    for error_type, status in _ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status, detail=error.message)
    logger.error("Unhandled notifier error: %s", error.message)
    return HTTPException(status_code=500, detail=error.message)


def _config_to_dict(config: TenantConfig) -> dict[str, Any]:
    data = asdict(config)
    data["modified_at"] = config.modified_at.isoformat() if config.modified_at else None
    return data


# ===== Public Endpoints =====

@app.get("/health")
def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}


# ===== Settings Endpoints (admin) =====

@app.get("/tenants/{tenant_id}/settings")
def get_settings(
    tenant_id: str,
    x_admin_key: str | None = Header(default=None),
    config: AppConfig = Depends(get_config),
    service: SettingsService = Depends(get_settings_service),
):
    """Get a tenant's notifier settings."""
    _verify_admin_key(x_admin_key, config)
    return _config_to_dict(service.get_config(tenant_id))


@app.put("/tenants/{tenant_id}/settings/{field_name}")
def update_setting(
    tenant_id: str,
    field_name: str,
    update: SettingUpdate,
    x_subscriber_id: str = Header(),
    x_admin_key: str | None = Header(default=None),
    config: AppConfig = Depends(get_config),
    service: SettingsService = Depends(get_settings_service),
):
    """Change one setting; a null value clears clearable settings."""
    _verify_admin_key(x_admin_key, config)

    try:
        updated = service.set_config_field(tenant_id, field_name, update.value, x_subscriber_id)
    except NotifierError as e:
        raise _to_http_error(e)

    return _config_to_dict(updated)


# ===== Subscription Endpoints =====

@app.get("/tenants/{tenant_id}/subscriptions")
def list_subscriptions(
    tenant_id: str,
    subscriber_id: str | None = None,
    x_subscriber_id: str = Header(),
    x_service_key: str | None = Header(default=None),
    x_admin_key: str | None = Header(default=None),
    config: AppConfig = Depends(get_config),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """List the cities of the acting subscriber, or of another (admin only)."""
    _verify_caller(x_service_key, x_admin_key, config)

    try:
        cities = service.list_cities(
            tenant_id,
            x_subscriber_id,
            target_subscriber=subscriber_id,
            is_admin=_is_admin(x_admin_key, config),
        )
    except NotifierError as e:
        raise _to_http_error(e)

    return {"subscriber_id": subscriber_id or x_subscriber_id, "cities": cities}


@app.post("/tenants/{tenant_id}/subscriptions", status_code=201)
def add_subscription(
    tenant_id: str,
    body: SubscriptionCreate,
    x_subscriber_id: str = Header(),
    x_service_key: str | None = Header(default=None),
    x_admin_key: str | None = Header(default=None),
    config: AppConfig = Depends(get_config),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Subscribe to direct notifications for a city."""
    _verify_caller(x_service_key, x_admin_key, config)

    try:
        subscription = service.add(
            tenant_id,
            x_subscriber_id,
            body.city,
            target_subscriber=body.subscriber_id,
            is_admin=_is_admin(x_admin_key, config),
        )
    except NotifierError as e:
        raise _to_http_error(e)

    return asdict(subscription)


@app.delete("/tenants/{tenant_id}/subscriptions/{city}")
def remove_subscription(
    tenant_id: str,
    city: str,
    subscriber_id: str | None = None,
    x_subscriber_id: str = Header(),
    x_service_key: str | None = Header(default=None),
    x_admin_key: str | None = Header(default=None),
    config: AppConfig = Depends(get_config),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Unsubscribe from a city."""
    _verify_caller(x_service_key, x_admin_key, config)

    try:
        subscription = service.remove(
            tenant_id,
            x_subscriber_id,
            city,
            target_subscriber=subscriber_id,
            is_admin=_is_admin(x_admin_key, config),
        )
    except NotifierError as e:
        raise _to_http_error(e)

    return {"message": f"Unsubscribed from {subscription.city}", **asdict(subscription)}

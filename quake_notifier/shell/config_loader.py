"""Configuration Loader - Imperative Shell.

This module handles loading application configuration from YAML files and
environment variables. All I/O is contained here.

Models (AppConfig) are defined in quake_notifier/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Optional

import yaml

from quake_notifier.core.config import AppConfig
from quake_notifier.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get or create a Secret Manager client.

    Returns None if GCP_PROJECT is not set and gcloud has no default project
    (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if not project_id:
        try:
            result = subprocess.run(
                ["gcloud", "config", "get-value", "project"],
                capture_output=True,
                text=True,
                timeout=2,
            )
            if result.returncode == 0 and result.stdout.strip():
                project_id = result.stdout.strip()
        except (OSError, subprocess.SubprocessError):
            logger.debug("gcloud not available to determine the project")

    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Delegates to SecretManagerClient.resolve() when a client is available.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def load_config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Load configuration from a dictionary.

    Only placeholder expansion has side effects.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed AppConfig object
    """
    secret_client = _get_secret_manager_client()
    defaults = AppConfig()

    discord = data.get("discord", {})
    firestore = data.get("firestore", {})

    return AppConfig(
        discord_bot_token=_resolve_value(discord.get("bot_token"), secret_client),
        poll_interval_seconds=int(data.get("poll_interval_seconds", defaults.poll_interval_seconds)),
        firestore_database=firestore.get("database"),
        tenants_collection=firestore.get("tenants_collection", defaults.tenants_collection),
        ledger_collection=firestore.get("ledger_collection", defaults.ledger_collection),
        subscriptions_collection=firestore.get(
            "subscriptions_collection", defaults.subscriptions_collection
        ),
        geocode_url=data.get("geocode_url", defaults.geocode_url),
        admin_api_key=_resolve_value(data.get("admin_api_key"), secret_client),
        service_api_key=_resolve_value(data.get("service_api_key"), secret_client),
    )


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed AppConfig object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return AppConfig()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return AppConfig()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: poll every %ds, database %s",
        config.poll_interval_seconds,
        config.firestore_database or "(default)",
    )

    return config


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        DISCORD_BOT_TOKEN: Bot token (or use Secret Manager)
        DISCORD_BOT_TOKEN_SECRET: Secret name in Secret Manager
        ADMIN_API_KEY: Key granting administrator rights on the HTTP API
        SERVICE_API_KEY: Key the bot front end presents to act for subscribers
        FIRESTORE_DATABASE: Firestore database name
        POLL_INTERVAL_SECONDS: Seconds between poll cycles

    Returns:
        AppConfig object from environment
    """
    secret_client = _get_secret_manager_client()
    bot_token = None

    secret_name = os.environ.get("DISCORD_BOT_TOKEN_SECRET", "discord-bot-token")
    if secret_client:
        bot_token = secret_client.get_secret(secret_name)
        if bot_token:
            logger.info("Using Discord bot token from Secret Manager")

    # Fall back to environment variable
    if not bot_token:
        bot_token = os.environ.get("DISCORD_BOT_TOKEN")

    if not bot_token:
        logger.warning("DISCORD_BOT_TOKEN not set and no secret found")

    defaults = AppConfig()

    return AppConfig(
        discord_bot_token=bot_token,
        poll_interval_seconds=int(
            os.environ.get("POLL_INTERVAL_SECONDS", defaults.poll_interval_seconds)
        ),
        firestore_database=os.environ.get("FIRESTORE_DATABASE"),
        admin_api_key=os.environ.get("ADMIN_API_KEY"),
        service_api_key=os.environ.get("SERVICE_API_KEY"),
    )

"""Cloud Function Entry Point.

This module provides the entry points for Google Cloud Functions, triggered
every five minutes by Cloud Scheduler, and a local long-running scheduler.
They are thin wrappers that load configuration and invoke the orchestrator.
"""

import logging
import os
from typing import Any

import functions_framework
from flask import Request

from quake_notifier.core.config import AppConfig, validate_app_config
from quake_notifier.orchestrator import Orchestrator
from quake_notifier.scheduler import PollScheduler, TenantLocks
from quake_notifier.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Shared by every cycle in this process so overlapping cycles skip busy tenants
_tenant_locks = TenantLocks()


def _get_config() -> AppConfig:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("DISCORD_BOT_TOKEN") or os.environ.get("DISCORD_BOT_TOKEN_SECRET"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def _build_orchestrator() -> Orchestrator | None:
    """Create an orchestrator, or None if the configuration is unusable."""
    config = _get_config()

    validation = validate_app_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        return None

    return Orchestrator(config, locks=_tenant_locks)


@functions_framework.http
def poll_cycle(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    This function is triggered by Cloud Scheduler or direct HTTP requests.
    It runs one complete poll cycle over all enabled tenants.

    Args:
        request: Flask request object (not used, but required by framework)

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Starting poll cycle")

    try:
        orchestrator = _build_orchestrator()
        if orchestrator is None:
            return {
                "status": "error",
                "message": "Invalid configuration",
            }, 400

        result = orchestrator.process()

        response: dict[str, Any] = {
            "status": "success" if result.success else "partial_failure",
            "summary": result.summary,
            "tenants": [
                {
                    "tenant_id": t.tenant_id,
                    "status": t.status,
                    "events_fetched": t.events_fetched,
                    "events_selected": t.events_selected,
                    "delivered": t.delivered,
                }
                for t in result.tenants
            ],
        }

        if result.errors:
            response["errors"] = result.errors

        logger.info("Completed: %s", result.summary)

        status_code = 200 if result.success else 207  # 207 = Multi-Status
        return response, status_code

    except Exception as e:
        logger.exception("Unexpected error in poll cycle")
        return {
            "status": "error",
            "message": str(e),
        }, 500


@functions_framework.cloud_event
def poll_cycle_pubsub(cloud_event: Any) -> None:
    """Pub/Sub Cloud Function entry point.

    Alternative trigger for Cloud Scheduler via Pub/Sub.

    Args:
        cloud_event: CloudEvent from Pub/Sub
    """
    logger.info("Starting poll cycle (Pub/Sub trigger)")

    orchestrator = _build_orchestrator()
    if orchestrator is None:
        return

    result = orchestrator.process()

    logger.info("Completed: %s", result.summary)

    for error in result.errors:
        logger.error("Error: %s", error)


def run_scheduler() -> None:
    """Run poll cycles every interval until interrupted."""
    orchestrator = _build_orchestrator()
    if orchestrator is None:
        raise SystemExit("Invalid configuration, see log for details")

    scheduler = PollScheduler(
        orchestrator.process,
        interval_seconds=orchestrator.config.poll_interval_seconds,
    )

    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        scheduler.stop()


# For local runs
if __name__ == "__main__":
    run_scheduler()

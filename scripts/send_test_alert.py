#!/usr/bin/env python3
"""Send a test alert to a tenant's broadcast channel.

WARNING: This script posts a REAL message to the tenant's Discord channel.

A synthetic event is formatted with the production formatter and sent through
the same channel resolution as a poll cycle. Nothing is written to the
delivery ledger and no subscriber receives a direct message.

Usage:
    # Dry run (print the payload, no sends)
    python scripts/send_test_alert.py --tenant 123456789 --dry-run

    # Send using the tenant's stored settings
    python scripts/send_test_alert.py --tenant 123456789

    # Override the channel
    python scripts/send_test_alert.py --tenant 123456789 --channel 987654321

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    GCP_PROJECT: GCP project ID for Secret Manager and Firestore access
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quake_notifier.core.errors import ChannelSendFailed, ChannelUnreachable
from quake_notifier.core.formatter import format_alert_embed, format_channel_message
from quake_notifier.core.seismic_event import SeismicEvent
from quake_notifier.shell.config_loader import load_config
from quake_notifier.shell.discord_client import DiscordClient
from quake_notifier.shell.firestore_client import FirestoreConfig
from quake_notifier.shell.tenant_store import TenantConfigStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_test_event(
    magnitude: float = 5.5,
    latitude: float = 40.7654,
    longitude: float = 29.9408,
) -> SeismicEvent:
    """Create a synthetic test event.

    Args:
        magnitude: Event magnitude
        latitude: Epicenter latitude
        longitude: Epicenter longitude

    Returns:
        Synthetic SeismicEvent
    """
    now = datetime.now(timezone.utc)
    return SeismicEvent(
        source_id="test-" + now.strftime("%Y%m%d%H%M%S"),
        time=now,
        magnitude=magnitude,
        latitude=latitude,
        longitude=longitude,
        authority="TEST",
    )


def main():
    parser = argparse.ArgumentParser(
        description="Send a test alert to a tenant's broadcast channel",
        epilog="WARNING: This sends a REAL message! Use --dry-run first.",
    )
    parser.add_argument(
        "--tenant",
        type=str,
        required=True,
        help="Tenant (guild) ID whose settings are used",
    )
    parser.add_argument(
        "--channel",
        type=str,
        default=None,
        help="Channel ID overriding the tenant's configured channel",
    )
    parser.add_argument(
        "--magnitude",
        type=float,
        default=5.5,
        help="Event magnitude for test (default: 5.5)",
    )
    parser.add_argument(
        "--location",
        type=str,
        default="[TEST] Izmit",
        help="Location shown in the alert (default: [TEST] Izmit)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload without sending",
    )
    args = parser.parse_args()

    config = load_config()

    store = TenantConfigStore(
        config.tenants_collection,
        FirestoreConfig(database=config.firestore_database),
    )
    tenant = store.get_config(args.tenant)
    if args.channel:
        tenant = replace(tenant, channel_id=args.channel)

    if not tenant.channel_id:
        logger.error("Tenant %s has no channel configured, use --channel", args.tenant)
        return 1

    event = create_test_event(magnitude=args.magnitude)
    payload = format_channel_message(event, tenant, format_alert_embed(event, args.location))

    logger.info("Test event %s, M%.1f, channel %s", event.source_id, event.magnitude, tenant.channel_id)

    if args.dry_run:
        logger.info("DRY RUN - Would send:")
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    if not config.discord_bot_token:
        logger.error("No Discord bot token configured")
        return 1

    client = DiscordClient(config.discord_bot_token)
    try:
        client.get_text_channel(tenant.tenant_id, tenant.channel_id)
        message_id = client.send_message(tenant.channel_id, payload)
    except (ChannelUnreachable, ChannelSendFailed) as e:
        logger.error("Failed to send test alert: %s", e.message)
        return 1

    logger.info("Test alert sent, message ID %s", message_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It's the "glue" that
makes the application work.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from quake_notifier.core.config import AppConfig, TenantConfig
from quake_notifier.core.dedup import LEDGER_RETENTION, DeliveryRecord, select_events
from quake_notifier.core.errors import (
    ChannelSendFailed,
    ChannelUnreachable,
    DirectNotificationFailed,
    FeedUnavailable,
    GeoLookupFailed,
)
from quake_notifier.core.formatter import (
    format_alert_embed,
    format_channel_message,
    format_direct_message,
    format_event_summary,
)
from quake_notifier.core.geocode import GeoLocation, unknown_location
from quake_notifier.core.seismic_event import SeismicEvent
from quake_notifier.scheduler import TenantLocks
from quake_notifier.shell.discord_client import DiscordClient
from quake_notifier.shell.feed_client import SeismicPortalClient
from quake_notifier.shell.firestore_client import FirestoreConfig
from quake_notifier.shell.geocode_client import ReverseGeocodeClient
from quake_notifier.shell.ledger_store import DeliveryLedger
from quake_notifier.shell.subscription_store import SubscriptionRegistry
from quake_notifier.shell.tenant_store import TenantConfigStore


logger = logging.getLogger(__name__)


# Event outcomes
DELIVERED = "delivered"
SEND_FAILED = "send_failed"
CHANNEL_UNREACHABLE = "channel_unreachable"
ALREADY_RECORDED = "already_recorded"

# Tenant statuses
PROCESSED = "processed"
NOT_CONFIGURED = "not_configured"
BUSY = "busy"
FEED_UNAVAILABLE = "feed_unavailable"
FAILED = "failed"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EventOutcome:
    """Result of dispatching a single event.

    Attributes:
        event: The event that was processed
        status: One of DELIVERED, SEND_FAILED, CHANNEL_UNREACHABLE, ALREADY_RECORDED
        location: Resolved display location
        notified_subscribers: Subscribers that received a direct message
        failed_subscribers: Subscribers whose direct message failed
        error: Error message if the channel delivery failed
    """
    event: SeismicEvent
    status: str
    location: str = ""
    notified_subscribers: list[str] = field(default_factory=list)
    failed_subscribers: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def recorded(self) -> bool:
        """Returns True if this dispatch wrote a delivery record."""
        return self.status in (DELIVERED, SEND_FAILED)


@dataclass
class TenantResult:
    """Result of processing one tenant in a cycle.

    Attributes:
        tenant_id: The tenant processed
        status: One of PROCESSED, NOT_CONFIGURED, BUSY, FEED_UNAVAILABLE, FAILED
        events_fetched: Events returned by the feed
        events_selected: Events left after threshold and ledger filtering
        outcomes: Per-event dispatch outcomes
        error: Error message for FEED_UNAVAILABLE and FAILED
    """
    tenant_id: str
    status: str
    events_fetched: int = 0
    events_selected: int = 0
    outcomes: list[EventOutcome] = field(default_factory=list)
    error: str | None = None

    @property
    def delivered(self) -> int:
        """Number of events delivered to the broadcast channel."""
        return sum(1 for o in self.outcomes if o.status == DELIVERED)


@dataclass
class CycleResult:
    """Result of a complete poll cycle over all enabled tenants."""
    tenants: list[TenantResult] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        """Tenant-level errors of the cycle."""
        return [
            f"{t.tenant_id}: {t.error}"
            for t in self.tenants
            if t.error is not None
        ]

    @property
    def success(self) -> bool:
        """Returns True if no tenant failed."""
        return len(self.errors) == 0

    @property
    def delivered(self) -> int:
        return sum(t.delivered for t in self.tenants)

    @property
    def summary(self) -> str:
        """Human-readable summary of the cycle result."""
        processed = sum(1 for t in self.tenants if t.status == PROCESSED)
        return (
            f"Processed {processed} of {len(self.tenants)} tenants, "
            f"{self.delivered} alerts delivered, "
            f"{len(self.errors)} errors"
        )


class Orchestrator:
    """Coordinates seismic event polling and notification.

    This class wires together:
    - Tenant config store (which tenants to poll and how)
    - Feed client (fetches events)
    - Core functions (selection, location, formatting)
    - Delivery ledger (deduplication state)
    - Reverse geocode client and subscription registry (direct notifications)
    - Discord client (channel messages and DMs)
    """

    def __init__(
        self,
        config: AppConfig,
        tenant_store: TenantConfigStore | None = None,
        ledger: DeliveryLedger | None = None,
        subscriptions: SubscriptionRegistry | None = None,
        feed_client: SeismicPortalClient | None = None,
        geocode_client: ReverseGeocodeClient | None = None,
        discord_client: DiscordClient | None = None,
        locks: TenantLocks | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            tenant_store: Tenant config store (created if not provided)
            ledger: Delivery ledger (created if not provided)
            subscriptions: Subscription registry (created if not provided)
            feed_client: Feed client (created if not provided)
            geocode_client: Reverse geocode client (created if not provided)
            discord_client: Discord client (created if not provided)
            locks: Per-tenant locks shared between cycles
            clock: Source of record timestamps
        """
        self.config = config
        firestore_config = FirestoreConfig(database=config.firestore_database)
        self.tenant_store = tenant_store or TenantConfigStore(
            config.tenants_collection, firestore_config
        )
        self.ledger = ledger or DeliveryLedger(config.ledger_collection, firestore_config)
        self.subscriptions = subscriptions or SubscriptionRegistry(
            config.subscriptions_collection, firestore_config
        )
        self.feed_client = feed_client or SeismicPortalClient()
        self.geocode_client = geocode_client or ReverseGeocodeClient(config.geocode_url)
        self.discord_client = discord_client or DiscordClient(config.discord_bot_token or "")
        self.locks = locks or TenantLocks()
        self.clock = clock

    def _resolve_location(self, event: SeismicEvent, region_code: str) -> GeoLocation:
        """Resolve an event's location, falling back to unknown on failure."""
        try:
            return self.geocode_client.resolve(event.latitude, event.longitude, region_code)
        except GeoLookupFailed as e:
            logger.warning("Geocoding failed for %s: %s", event.source_id, e.message)
            return unknown_location()

    def _notify_subscribers(
        self,
        subscribers: set[str],
        embed: dict,
        outcome: EventOutcome,
    ) -> None:
        """Send the alert to each subscriber; one failure never stops the rest."""
        payload = format_direct_message(embed)

        for subscriber_id in sorted(subscribers):
            try:
                self.discord_client.send_direct_message(subscriber_id, payload)
                outcome.notified_subscribers.append(subscriber_id)
            except DirectNotificationFailed as e:
                logger.debug("Direct message failed for %s: %s", subscriber_id, e.message)
                outcome.failed_subscribers.append(subscriber_id)
            except Exception:
                logger.exception("Unexpected error sending direct message to %s", subscriber_id)
                outcome.failed_subscribers.append(subscriber_id)

    def dispatch_event(self, tenant: TenantConfig, event: SeismicEvent) -> EventOutcome:
        """Notify a tenant about a single event and record the attempt.

        Args:
            tenant: Tenant settings, with a channel configured
            event: Event selected for the tenant

        Returns:
            EventOutcome describing what happened
        """
        if self.ledger.find(tenant.tenant_id, event.source_id) is not None:
            return EventOutcome(event=event, status=ALREADY_RECORDED)

        location = self._resolve_location(event, tenant.region_code)

        subscribers: set[str] = set()
        if location.candidates:
            subscribers = self.subscriptions.match_subscribers(
                tenant.tenant_id, set(location.candidates)
            )

        embed = format_alert_embed(event, location.display_name)
        payload = format_channel_message(event, tenant, embed)
        outcome = EventOutcome(event=event, status=DELIVERED, location=location.display_name)

        try:
            self.discord_client.get_text_channel(tenant.tenant_id, tenant.channel_id or "")
        except ChannelUnreachable as e:
            logger.error("Channel unreachable for tenant %s: %s", tenant.tenant_id, e.message)
            outcome.status = CHANNEL_UNREACHABLE
            outcome.error = e.message
            return outcome

        # Leave room for the new record so the ledger never exceeds its retention
        self.ledger.prune(tenant.tenant_id, keep=LEDGER_RETENTION - 1)

        try:
            self.discord_client.send_message(tenant.channel_id or "", payload)
        except ChannelSendFailed as e:
            logger.error(
                "Failed to send alert for %s to tenant %s: %s",
                event.source_id,
                tenant.tenant_id,
                e.message,
            )
            outcome.status = SEND_FAILED
            outcome.error = e.message

        # Once the channel send has returned, the record is written whatever
        # happens to the direct messages
        try:
            if outcome.status == DELIVERED:
                logger.info(
                    "Sent alert for %s to tenant %s",
                    format_event_summary(event, location.display_name),
                    tenant.tenant_id,
                )
                self._notify_subscribers(subscribers, embed, outcome)
        finally:
            self.ledger.append(DeliveryRecord(
                tenant_id=tenant.tenant_id,
                source_id=event.source_id,
                source_name=event.authority,
                delivered=outcome.status == DELIVERED,
                timestamp=self.clock(),
            ))

        return outcome

    def _process_locked_tenant(self, tenant: TenantConfig) -> TenantResult:
        try:
            events = self.feed_client.fetch(tenant.feed_url or "")
        except FeedUnavailable as e:
            logger.error("Feed unavailable for tenant %s: %s", tenant.tenant_id, e.message)
            return TenantResult(
                tenant_id=tenant.tenant_id,
                status=FEED_UNAVAILABLE,
                error=e.message,
            )

        known_ids = self.ledger.known_source_ids(tenant.tenant_id)
        selected = select_events(events, tenant.magnitude_threshold, known_ids)

        logger.info(
            "Tenant %s: %d new events of %d fetched",
            tenant.tenant_id,
            len(selected),
            len(events),
        )

        result = TenantResult(
            tenant_id=tenant.tenant_id,
            status=PROCESSED,
            events_fetched=len(events),
            events_selected=len(selected),
        )

        for event in selected:
            result.outcomes.append(self.dispatch_event(tenant, event))

        return result

    def process_tenant(self, tenant: TenantConfig) -> TenantResult:
        """Run the pipeline for one tenant.

        Never raises: failures are reported in the TenantResult so that one
        tenant cannot affect another.
        """
        if not tenant.is_ready:
            logger.debug("Tenant %s has no channel or feed URL, skipping", tenant.tenant_id)
            return TenantResult(tenant_id=tenant.tenant_id, status=NOT_CONFIGURED)

        with self.locks.hold(tenant.tenant_id) as acquired:
            if not acquired:
                logger.warning(
                    "Tenant %s is still being processed by another cycle, skipping",
                    tenant.tenant_id,
                )
                return TenantResult(tenant_id=tenant.tenant_id, status=BUSY)

            try:
                return self._process_locked_tenant(tenant)
            except Exception as e:
                logger.exception("Unexpected error processing tenant %s", tenant.tenant_id)
                return TenantResult(
                    tenant_id=tenant.tenant_id,
                    status=FAILED,
                    error=str(e),
                )

    def process(self) -> CycleResult:
        """Run a complete poll cycle.

        This is the main entry point that, for every enabled tenant in turn:
        1. Fetches the tenant's feed
        2. Selects events above the threshold without a ledger record
        3. Resolves each event's location and interested subscribers
        4. Sends the channel alert and direct messages
        5. Prunes and writes the delivery ledger

        Returns:
            CycleResult with details of what happened
        """
        result = CycleResult()

        tenants = self.tenant_store.list_enabled()
        if not tenants:
            logger.debug("No enabled tenants")
            return result

        for tenant in tenants:
            result.tenants.append(self.process_tenant(tenant))

        logger.info("Cycle complete: %s", result.summary)
        return result

"""Event selection and deduplication logic - Pure functions.

This module decides which feed events are worth dispatching for a tenant and
which delivery records fall out of the retention window. All functions are
pure with no side effects.

Note: The actual persistence of delivery records is handled by the imperative
shell (ledger store). This module only contains the pure logic.
"""

from dataclasses import dataclass
from datetime import datetime

from quake_notifier.core.seismic_event import SeismicEvent


# Maximum events considered per tenant per cycle
MAX_EVENTS_PER_CYCLE = 25

# Maximum delivery records kept per tenant
LEDGER_RETENTION = 50


@dataclass(frozen=True)
class DeliveryRecord:
    """A processed event in a tenant's delivery ledger.

    Attributes:
        tenant_id: Tenant the event was processed for
        source_id: Feed event ID
        source_name: Reporting authority of the event
        delivered: Whether the broadcast channel accepted the alert
        timestamp: When the event was processed (UTC)
    """
    tenant_id: str
    source_id: str
    source_name: str
    delivered: bool
    timestamp: datetime


def filter_by_threshold(
    events: list[SeismicEvent],
    magnitude_threshold: float,
) -> list[SeismicEvent]:
    """Keep events at or above the magnitude threshold.

    Pure function.
    """
    return [e for e in events if e.magnitude >= magnitude_threshold]


def filter_already_processed(
    events: list[SeismicEvent],
    known_source_ids: set[str],
) -> list[SeismicEvent]:
    """Filter out events that already have a delivery record.

    Pure function. A record excludes its event whether or not the delivery
    succeeded.

    Args:
        events: Events to filter
        known_source_ids: Source IDs present in the tenant's ledger

    Returns:
        Events without a ledger record, in original order
    """
    if not known_source_ids:
        return list(events)
    return [e for e in events if e.source_id not in known_source_ids]


def select_events(
    events: list[SeismicEvent],
    magnitude_threshold: float,
    known_source_ids: set[str],
    limit: int = MAX_EVENTS_PER_CYCLE,
) -> list[SeismicEvent]:
    """Select the events to dispatch for a tenant in this cycle.

    Pure function.

    Applies, in order: magnitude threshold, cap to ``limit`` in feed order,
    ledger exclusion, cap to ``limit`` again. Feed order is trusted; no
    sorting is applied.

    Args:
        events: Parsed feed events in feed order
        magnitude_threshold: Minimum magnitude (inclusive)
        known_source_ids: Source IDs already in the tenant's ledger
        limit: Maximum number of events to return

    Returns:
        Events to dispatch, in feed order
    """
    candidates = filter_by_threshold(events, magnitude_threshold)[:limit]
    candidates = filter_already_processed(candidates, known_source_ids)
    return candidates[:limit]


def compute_records_to_prune(
    records: list[DeliveryRecord],
    keep: int = LEDGER_RETENTION,
) -> list[DeliveryRecord]:
    """Compute which delivery records fall outside the retention window.

    Pure function.

    Args:
        records: All records of one tenant, in any order
        keep: Number of most recent records to keep

    Returns:
        Records to delete, newest first
    """
    if keep < 0:
        raise ValueError(f"keep must be non-negative, got {keep}")

    if len(records) <= keep:
        return []

    ordered = sorted(records, key=lambda r: r.timestamp, reverse=True)
    return ordered[keep:]

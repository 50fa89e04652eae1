"""Seismic Portal Feed Client - Imperative Shell.

This module handles HTTP communication with the EMSC Seismic Portal FDSN
event service. All I/O is contained here; parsing is in the core module.
"""

import logging
from datetime import datetime, timezone

import requests

from quake_notifier.core.errors import FeedUnavailable
from quake_notifier.core.seismic_event import SeismicEvent, parse_events


logger = logging.getLogger(__name__)


# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 30


class SeismicPortalClient:
    """Client for fetching a tenant's seismic event feed.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Initialize feed client.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout

    def fetch(self, url: str) -> list[SeismicEvent]:
        """Fetch and parse the events of a feed URL.

        This method performs HTTP I/O.

        Args:
            url: Tenant's configured Seismic Portal query URL

        Returns:
            Parsed events in feed order

        Raises:
            FeedUnavailable: On network errors, non-2xx responses or a
                body that is not a feature collection
        """
        logger.info("Fetching seismic feed", extra={"url": url})

        try:
            response = requests.get(
                url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as e:
            raise FeedUnavailable(f"Feed request timed out: {url}") from e
        except requests.RequestException as e:
            raise FeedUnavailable(f"Feed request failed: {e}") from e
        except ValueError as e:
            raise FeedUnavailable(f"Feed returned invalid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("features"), list):
            raise FeedUnavailable("Feed response has no features list")

        fetched_at = datetime.now(timezone.utc)
        events = parse_events(data, fallback_time=fetched_at)
        skipped = len(data["features"]) - len(events)
        if skipped:
            logger.warning("Skipped %d malformed feed features", skipped)

        undated = sum(1 for e in events if e.time is fetched_at)
        if undated:
            logger.warning("%d feed events had no usable time, using fetch time", undated)

        logger.info("Fetched %d events from feed", len(events))

        return events

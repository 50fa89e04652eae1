"""Message formatting - Pure functions.

This module formats seismic events into Discord message payloads.
All functions are pure with no side effects.
"""

from typing import Any

from quake_notifier.core.config import TenantConfig
from quake_notifier.core.seismic_event import SeismicEvent


EVENT_DETAILS_URL = "https://www.seismicportal.eu/eventdetails.html?unid={source_id}"
OTHER_EVENTS_URL = "https://deprem.core.xeome.dev"

EVERYONE_MENTION = "@everyone"

# Discord's "Yellow" brand color
ALERT_COLOR = 0xFEE75C

ALERT_TITLE = ":warning: Earthquake Alert"


def get_severity_label(magnitude: float) -> str:
    """Get a human-readable severity label.

    Pure function.
    """
    if magnitude >= 8.0:
        return "Great"
    elif magnitude >= 7.0:
        return "Major"
    elif magnitude >= 6.0:
        return "Strong"
    elif magnitude >= 5.0:
        return "Moderate"
    elif magnitude >= 4.0:
        return "Light"
    elif magnitude >= 3.0:
        return "Minor"
    else:
        return "Micro"


def should_ping_everyone(event: SeismicEvent, config: TenantConfig) -> bool:
    """Check whether an event crosses the tenant's @everyone threshold.

    Pure function.
    """
    return (
        config.everyone_threshold is not None
        and event.magnitude >= config.everyone_threshold
    )


def build_alert_content(event: SeismicEvent, config: TenantConfig) -> str:
    """Build the mention line sent above the alert embed.

    Pure function. The role mention and the @everyone escalation are
    independent; either, both, or neither may be present.

    Args:
        event: Event being alerted
        config: Tenant settings

    Returns:
        Message content, empty string when nobody is mentioned
    """
    parts = []

    if config.ping_role_id:
        parts.append(f"<@&{config.ping_role_id}>")

    if should_ping_everyone(event, config):
        parts.append(EVERYONE_MENTION)

    return " ".join(parts)


def format_event_time(event: SeismicEvent) -> str:
    """Format the event origin time for display. Pure function."""
    return event.time.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_alert_embed(event: SeismicEvent, location: str) -> dict[str, Any]:
    """Format an event as a Discord embed.

    Pure function.

    Args:
        event: Event to format
        location: Resolved display location ("Unknown" when geocoding failed)

    Returns:
        Discord embed dict
    """
    return {
        "title": ALERT_TITLE,
        "color": ALERT_COLOR,
        "timestamp": event.time.isoformat(),
        "fields": [
            {"name": "Time", "value": format_event_time(event), "inline": True},
            {"name": "ID", "value": event.source_id, "inline": True},
            {"name": "Location", "value": location, "inline": True},
            {"name": "Source", "value": event.authority, "inline": True},
            {
                "name": "Magnitude",
                "value": f"{event.magnitude} ({get_severity_label(event.magnitude)})",
                "inline": True,
            },
            {
                "name": "Coordinates",
                "value": f"Lat: {event.latitude}\nLon: {event.longitude}",
                "inline": True,
            },
            {
                "name": "Link",
                "value": EVENT_DETAILS_URL.format(source_id=event.source_id),
            },
            {
                "name": "Other Earthquakes",
                "value": OTHER_EVENTS_URL,
            },
        ],
    }


def format_channel_message(
    event: SeismicEvent,
    config: TenantConfig,
    embed: dict[str, Any],
) -> dict[str, Any]:
    """Format the broadcast channel message payload.

    Pure function. Only the mentions present in the content are allowed to
    ping.

    Args:
        event: Event being alerted
        config: Tenant settings
        embed: Embed from format_alert_embed()

    Returns:
        Discord create-message payload
    """
    payload: dict[str, Any] = {
        "embeds": [embed],
        "allowed_mentions": {
            "parse": ["everyone"] if should_ping_everyone(event, config) else [],
            "roles": [config.ping_role_id] if config.ping_role_id else [],
        },
    }

    content = build_alert_content(event, config)
    if content:
        payload["content"] = content

    return payload


def format_direct_message(embed: dict[str, Any]) -> dict[str, Any]:
    """Format the direct notification payload: the embed, no mentions.

    Pure function.
    """
    return {"embeds": [embed]}


def format_event_summary(event: SeismicEvent, location: str) -> str:
    """Format a one-line summary of an event for logs.

    Pure function.
    """
    return (
        f"M{event.magnitude:.1f} - {location} "
        f"at {format_event_time(event)} ({event.source_id})"
    )

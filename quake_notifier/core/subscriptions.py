"""Subscription models and access rules - Pure functions."""

from dataclasses import dataclass

from quake_notifier.core.errors import CityNotFound, PermissionDenied
from quake_notifier.core.text import normalize_text


@dataclass(frozen=True)
class Subscription:
    """A subscriber's interest in one city within a tenant.

    Attributes:
        tenant_id: Tenant the subscription belongs to
        subscriber_id: Subscriber to notify
        city: Normalized city name
    """
    tenant_id: str
    subscriber_id: str
    city: str


def resolve_target(
    acting_subscriber: str,
    target_subscriber: str | None,
    is_admin: bool,
) -> str:
    """Decide whose subscriptions a command operates on.

    Pure function.

    Args:
        acting_subscriber: Subscriber issuing the command
        target_subscriber: Subscriber to manage, None for the acting one
        is_admin: Whether the acting subscriber has administrator rights

    Returns:
        The subscriber ID to operate on

    Raises:
        PermissionDenied: If a non-administrator targets someone else
    """
    target = target_subscriber or acting_subscriber

    if target != acting_subscriber and not is_admin:
        raise PermissionDenied(
            f"Subscriber {acting_subscriber} may not manage subscriptions of {target}"
        )

    return target


def make_subscription(tenant_id: str, subscriber_id: str, city: str) -> Subscription:
    """Build a Subscription with the city normalized.

    Pure function.

    Raises:
        CityNotFound: If the city is empty after normalization
    """
    normalized = normalize_text(city)
    if not normalized:
        raise CityNotFound("City name must not be empty")

    return Subscription(
        tenant_id=tenant_id,
        subscriber_id=subscriber_id,
        city=normalized,
    )

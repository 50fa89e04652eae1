"""Subscriber-facing subscription commands.

Add, remove and list the cities a subscriber wants direct notifications for.
Every command is scoped to (tenant, subscriber); administrators may manage
another subscriber's list.
"""

import logging

from quake_notifier.core.errors import CityNotFound, SubscriptionNotFound
from quake_notifier.core.subscriptions import Subscription, make_subscription, resolve_target
from quake_notifier.shell.geocode_client import CityValidationClient
from quake_notifier.shell.subscription_store import SubscriptionRegistry


logger = logging.getLogger(__name__)


class SubscriptionService:
    """Implements the add/remove/list subscription commands."""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        city_validator: CityValidationClient | None = None,
    ) -> None:
        self.registry = registry
        self.city_validator = city_validator or CityValidationClient()

    def add(
        self,
        tenant_id: str,
        acting_subscriber: str,
        city: str,
        target_subscriber: str | None = None,
        is_admin: bool = False,
    ) -> Subscription:
        """Subscribe a subscriber to a city.

        Raises:
            PermissionDenied: Non-administrator targeting another subscriber
            CityNotFound: The name is empty or not classified as a city
            CityValidationUnavailable: The validation service failed
            DuplicateSubscription: The subscription already exists
        """
        subscriber_id = resolve_target(acting_subscriber, target_subscriber, is_admin)
        subscription = make_subscription(tenant_id, subscriber_id, city)

        if not self.city_validator.is_city(city.strip()):
            raise CityNotFound(f"{city} is not a known city")

        self.registry.add(subscription)
        return subscription

    def remove(
        self,
        tenant_id: str,
        acting_subscriber: str,
        city: str,
        target_subscriber: str | None = None,
        is_admin: bool = False,
    ) -> Subscription:
        """Unsubscribe a subscriber from a city.

        Raises:
            PermissionDenied: Non-administrator targeting another subscriber
            SubscriptionNotFound: The subscriber is not subscribed to the city
        """
        subscriber_id = resolve_target(acting_subscriber, target_subscriber, is_admin)
        subscription = make_subscription(tenant_id, subscriber_id, city)

        if not self.registry.remove(subscription):
            raise SubscriptionNotFound(f"Not subscribed to {subscription.city}")

        return subscription

    def list_cities(
        self,
        tenant_id: str,
        acting_subscriber: str,
        target_subscriber: str | None = None,
        is_admin: bool = False,
    ) -> list[str]:
        """List the normalized cities a subscriber is subscribed to.

        Raises:
            PermissionDenied: Non-administrator targeting another subscriber
        """
        subscriber_id = resolve_target(acting_subscriber, target_subscriber, is_admin)
        return self.registry.list_cities(tenant_id, subscriber_id)

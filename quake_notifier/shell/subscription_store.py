"""Subscription Registry - Imperative Shell.

This module persists which subscribers want direct notifications for which
cities. Uses Google Cloud Firestore, one document per
(tenant, subscriber, city) so duplicates are rejected on creation.
"""

import logging

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter

from quake_notifier.core.errors import DuplicateSubscription
from quake_notifier.core.subscriptions import Subscription
from quake_notifier.shell.firestore_client import FirestoreClient


logger = logging.getLogger(__name__)


# Firestore caps the number of values in an 'in' filter
MAX_IN_FILTER_VALUES = 30


class SubscriptionRegistry(FirestoreClient):
    """Firestore store of city subscriptions.

    Document structure (ID = "<tenant>:<subscriber>:<city>"):
    {
        "tenant_id": "123",
        "subscriber_id": "456",
        "city": "istanbul"
    }
    """

    def match_subscribers(self, tenant_id: str, candidate_cities: set[str]) -> set[str]:
        """Find subscribers of a tenant interested in any of the cities.

        This method performs database I/O. An empty candidate set returns
        an empty result without querying.

        Args:
            tenant_id: Tenant to search in
            candidate_cities: Normalized city names

        Returns:
            Distinct subscriber IDs
        """
        if not candidate_cities:
            return set()

        cities = sorted(candidate_cities)
        subscribers: set[str] = set()

        for start in range(0, len(cities), MAX_IN_FILTER_VALUES):
            chunk = cities[start:start + MAX_IN_FILTER_VALUES]
            query = (
                self._collection()
                .where(filter=FieldFilter("tenant_id", "==", tenant_id))
                .where(filter=FieldFilter("city", "in", chunk))
            )
            for doc in query.stream():
                subscribers.add(str(doc.to_dict()["subscriber_id"]))

        logger.info(
            "Matched %d subscribers for %s in tenant %s",
            len(subscribers),
            ", ".join(cities),
            tenant_id,
        )
        return subscribers

    def add(self, subscription: Subscription) -> None:
        """Store a new subscription.

        This method performs database I/O.

        Raises:
            DuplicateSubscription: If the subscription already exists
        """
        doc_ref = self._document(
            subscription.tenant_id, subscription.subscriber_id, subscription.city
        )
        try:
            doc_ref.create({
                "tenant_id": subscription.tenant_id,
                "subscriber_id": subscription.subscriber_id,
                "city": subscription.city,
            })
        except AlreadyExists as e:
            raise DuplicateSubscription(
                f"Already subscribed to {subscription.city}"
            ) from e

        logger.info(
            "Subscriber %s subscribed to %s in tenant %s",
            subscription.subscriber_id,
            subscription.city,
            subscription.tenant_id,
        )

    def remove(self, subscription: Subscription) -> bool:
        """Delete a subscription.

        This method performs database I/O.

        Returns:
            True if a subscription was deleted, False if none existed
        """
        doc_ref = self._document(
            subscription.tenant_id, subscription.subscriber_id, subscription.city
        )
        if not doc_ref.get().exists:
            return False

        doc_ref.delete()
        logger.info(
            "Subscriber %s unsubscribed from %s in tenant %s",
            subscription.subscriber_id,
            subscription.city,
            subscription.tenant_id,
        )
        return True

    def list_cities(self, tenant_id: str, subscriber_id: str) -> list[str]:
        """List a subscriber's cities within a tenant, sorted.

        This method performs database I/O.
        """
        query = (
            self._collection()
            .where(filter=FieldFilter("tenant_id", "==", tenant_id))
            .where(filter=FieldFilter("subscriber_id", "==", subscriber_id))
        )
        return sorted(str(doc.to_dict()["city"]) for doc in query.stream())

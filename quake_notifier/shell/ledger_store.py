"""Delivery Ledger Store - Imperative Shell.

This module persists the delivery records used to avoid notifying a tenant
twice about the same event. Uses Google Cloud Firestore, one document per
(tenant, source ID) so a key can never hold two records.

All I/O is contained here; selection and retention logic is in the core module.
"""

import logging
from typing import Any

from google.cloud.firestore_v1.base_query import FieldFilter

from quake_notifier.core.dedup import (
    LEDGER_RETENTION,
    DeliveryRecord,
    compute_records_to_prune,
)
from quake_notifier.shell.firestore_client import FirestoreClient


logger = logging.getLogger(__name__)


def record_to_dict(record: DeliveryRecord) -> dict[str, Any]:
    """Serialize a DeliveryRecord into a Firestore document."""
    return {
        "tenant_id": record.tenant_id,
        "source_id": record.source_id,
        "source_name": record.source_name,
        "delivered": record.delivered,
        "timestamp": record.timestamp,
    }


def record_from_dict(data: dict[str, Any]) -> DeliveryRecord:
    """Parse a Firestore document into a DeliveryRecord."""
    return DeliveryRecord(
        tenant_id=str(data["tenant_id"]),
        source_id=str(data["source_id"]),
        source_name=str(data.get("source_name", "")),
        delivered=bool(data.get("delivered", False)),
        timestamp=data["timestamp"],
    )


class DeliveryLedger(FirestoreClient):
    """Firestore store of per-tenant delivery records.

    Document structure (ID = "<tenant>:<source_id>"):
    {
        "tenant_id": "123",
        "source_id": "20240206_0000123",
        "source_name": "EMSC",
        "delivered": true,
        "timestamp": <timestamp>
    }
    """

    def _tenant_records(self, tenant_id: str) -> list[DeliveryRecord]:
        query = self._collection().where(filter=FieldFilter("tenant_id", "==", tenant_id))
        return [record_from_dict(doc.to_dict()) for doc in query.stream()]

    def known_source_ids(self, tenant_id: str) -> set[str]:
        """Fetch the source IDs recorded for a tenant.

        This method performs database I/O.

        Returns:
            Source IDs of every record, delivered or not
        """
        ids = {record.source_id for record in self._tenant_records(tenant_id)}
        logger.info("Fetched %d ledger entries for tenant %s", len(ids), tenant_id)
        return ids

    def find(self, tenant_id: str, source_id: str) -> DeliveryRecord | None:
        """Fetch the record of one event, if any. This method performs database I/O."""
        doc = self._document(tenant_id, source_id).get()
        if not doc.exists:
            return None
        return record_from_dict(doc.to_dict())

    def append(self, record: DeliveryRecord) -> None:
        """Write a delivery record.

        This method performs database I/O.
        """
        self._document(record.tenant_id, record.source_id).set(record_to_dict(record))
        logger.info(
            "Recorded %s for tenant %s (delivered=%s)",
            record.source_id,
            record.tenant_id,
            record.delivered,
        )

    def prune(self, tenant_id: str, keep: int = LEDGER_RETENTION) -> int:
        """Delete a tenant's records beyond the ``keep`` most recent.

        This method performs database I/O.

        Returns:
            Number of records deleted
        """
        expired = compute_records_to_prune(self._tenant_records(tenant_id), keep)
        if not expired:
            return 0

        batch = self.client.batch()
        for record in expired:
            batch.delete(self._document(record.tenant_id, record.source_id))
        batch.commit()

        logger.info("Pruned %d ledger entries for tenant %s", len(expired), tenant_id)
        return len(expired)

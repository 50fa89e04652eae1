"""Firestore Client - Imperative Shell.

This module holds the shared Firestore plumbing used by the tenant, ledger
and subscription stores: configuration, lazy client creation and document
ID derivation. Uses Google Cloud Firestore.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from google.cloud import firestore


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """
    project_id: str | None = None
    database: str | None = None


def document_id(*parts: str) -> str:
    """Derive a document ID from a logical key.

    Each part is percent-encoded so that '/' never reaches Firestore and
    distinct keys never collide.
    """
    return ":".join(quote(str(part), safe="") for part in parts)


class FirestoreClient:
    """Base for stores persisted in one Firestore collection.

    This is part of the imperative shell - it handles database I/O.
    """

    def __init__(
        self,
        collection: str,
        config: FirestoreConfig | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        """Initialize Firestore-backed store.

        Args:
            collection: Firestore collection name
            config: Firestore configuration
            client: Pre-built client (created lazily if not provided)
        """
        self.collection_name = collection
        self.config = config or FirestoreConfig()
        self._client = client

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self) -> Any:
        """Get reference to the store's collection."""
        return self.client.collection(self.collection_name)

    def _document(self, *key: str) -> Any:
        """Get reference to the document of a logical key."""
        return self._collection().document(document_id(*key))

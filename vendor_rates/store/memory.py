from __future__ import annotations

import asyncio
import copy
import logging

from vendor_rates.errors import StoreError
from vendor_rates.models import DEFAULT_COLLECTION, ColumnRecord, VendorDocument, document_path
from vendor_rates.store.base import ErrorListener, SnapshotListener, StoreSubscription, SubscriberRegistry

logger = logging.getLogger(__name__)


class InMemoryVendorStore:
    """Dict-backed vendor store that notifies listeners after every write.

    Documents keep first-insertion order; replacing a document keeps its slot.
    ``fail_writes`` makes the next writes raise, for exercising retry paths.
    """

    def __init__(
        self,
        documents: dict[str, ColumnRecord] | None = None,
        *,
        collection: str = DEFAULT_COLLECTION,
    ) -> None:
        self.collection = collection
        self._documents: dict[str, ColumnRecord] = {}
        for vendor_id, record in (documents or {}).items():
            self._documents[vendor_id] = copy.deepcopy(record)
        self._subscribers = SubscriberRegistry()
        self.fail_writes: Exception | None = None
        self.write_count = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def list_documents(self) -> list[VendorDocument]:
        return [
            VendorDocument(vendor_id=vendor_id, record=copy.deepcopy(record))
            for vendor_id, record in self._documents.items()
        ]

    def subscribe(
        self,
        on_snapshot: SnapshotListener,
        on_error: ErrorListener | None = None,
    ) -> StoreSubscription:
        subscription = self._subscribers.add(on_snapshot, on_error)
        subscription.deliver(self.list_documents())
        return subscription

    async def set_document(self, vendor_id: str, record: ColumnRecord) -> None:
        # Yield once so callers observe the write as a suspension point.
        await asyncio.sleep(0)
        if self.fail_writes is not None:
            raise StoreError(
                f"Write to {document_path(vendor_id, self.collection)} failed: {self.fail_writes}",
                vendor_id=vendor_id,
            ) from self.fail_writes

        self._documents[vendor_id] = copy.deepcopy(record)
        self.write_count += 1
        logger.debug("[STORE] Replaced %s", document_path(vendor_id, self.collection))
        self._subscribers.publish(self.list_documents())

    def replace_all(self, documents: dict[str, ColumnRecord]) -> None:
        """Swap the whole collection, as another writer would, and notify listeners."""
        self._documents = {vendor_id: copy.deepcopy(record) for vendor_id, record in documents.items()}
        self._subscribers.publish(self.list_documents())

    def emit_error(self, exc: Exception) -> None:
        self._subscribers.publish_error(exc)

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from vendor_rates.models import ColumnRecord, VendorDocument

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[list[VendorDocument]], None]
ErrorListener = Callable[[Exception], None]


class StoreSubscription:
    """Handle for one collection listener; ``close`` may be called any number of times."""

    def __init__(
        self,
        on_snapshot: SnapshotListener,
        on_error: ErrorListener | None = None,
        *,
        on_close: Callable[[StoreSubscription], None] | None = None,
    ) -> None:
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._on_close = on_close
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, documents: Sequence[VendorDocument]) -> None:
        if not self._active:
            return
        self._on_snapshot(list(documents))

    def fail(self, exc: Exception) -> None:
        if not self._active:
            return
        if self._on_error is None:
            logger.error("[STORE] Unhandled subscription error: %s", exc)
            return
        self._on_error(exc)

    def close(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_close is not None:
            self._on_close(self)

    def __enter__(self) -> StoreSubscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SubscriberRegistry:
    """Fan-out of full snapshots to every active subscription."""

    def __init__(self) -> None:
        self._subscriptions: list[StoreSubscription] = []

    def add(self, on_snapshot: SnapshotListener, on_error: ErrorListener | None) -> StoreSubscription:
        subscription = StoreSubscription(on_snapshot, on_error, on_close=self._remove)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: StoreSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def publish(self, documents: Sequence[VendorDocument]) -> None:
        for subscription in list(self._subscriptions):
            subscription.deliver(documents)

    def publish_error(self, exc: Exception) -> None:
        for subscription in list(self._subscriptions):
            subscription.fail(exc)


class VendorStore(Protocol):
    """Key to document store holding one column record per vendor id."""

    collection: str

    def subscribe(
        self,
        on_snapshot: SnapshotListener,
        on_error: ErrorListener | None = None,
    ) -> StoreSubscription:
        """Listen to the whole collection; the current snapshot is delivered immediately."""
        ...

    async def set_document(self, vendor_id: str, record: ColumnRecord) -> None:
        """Replace the document stored under ``vendor_id`` with ``record``."""
        ...

    def list_documents(self) -> list[VendorDocument]:
        ...

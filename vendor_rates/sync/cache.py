from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Sequence

from vendor_rates.models import VendorDocument, VendorSnapshot
from vendor_rates.store import StoreSubscription, VendorStore

logger = logging.getLogger(__name__)

CacheListener = Callable[[VendorSnapshot], None]


class VendorRateCache:
    """
    Live mapping of vendor id to its rate record, rebuilt from every full snapshot.

    Each notification replaces the snapshot with a single assignment, so readers
    see either the previous collection or the new one, never a mix. Store
    errors are logged and recorded on ``last_error`` while the last good
    snapshot stays in place.
    """

    def __init__(self) -> None:
        self._snapshot = VendorSnapshot()
        self._listeners: list[CacheListener] = []
        self._subscription: StoreSubscription | None = None
        self.last_error: Exception | None = None

    @property
    def snapshot(self) -> VendorSnapshot:
        return self._snapshot

    @property
    def vendor_ids(self) -> tuple[str, ...]:
        return self._snapshot.vendor_ids

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def get(self, vendor_id: str) -> VendorDocument | None:
        return self._snapshot.get(vendor_id)

    def add_listener(self, listener: CacheListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: CacheListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def apply_documents(self, documents: Sequence[VendorDocument]) -> None:
        snapshot = VendorSnapshot.from_documents(documents)
        self._snapshot = snapshot
        self.last_error = None
        logger.debug("[CACHE] Applied snapshot with %d vendor(s)", len(snapshot))
        for listener in list(self._listeners):
            listener(snapshot)

    def handle_error(self, exc: Exception) -> None:
        self.last_error = exc
        logger.error("[CACHE] Error fetching vendor rates: %s", exc)

    def subscribe(self, store: VendorStore) -> StoreSubscription:
        """Attach to ``store``; closing the returned handle stops all further updates."""
        if self.subscribed:
            raise RuntimeError("VendorRateCache is already subscribed to a store")
        self._subscription = store.subscribe(self.apply_documents, self.handle_error)
        logger.info("[CACHE] Subscribed to collection '%s'", store.collection)
        return self._subscription

    def unsubscribe(self) -> None:
        if self._subscription is None:
            return
        self._subscription.close()
        self._subscription = None
        logger.info("[CACHE] Unsubscribed")


class SnapshotStream:
    """
    Cancellable channel of full-snapshot events for consumers that poll.

    Only the newest ``maxlen`` snapshots are kept; since each one carries the
    whole collection, dropping older ones loses nothing.
    """

    def __init__(self, store: VendorStore, *, maxlen: int = 16) -> None:
        self._events: deque[VendorSnapshot] = deque(maxlen=maxlen)
        self._errors: deque[Exception] = deque(maxlen=maxlen)
        self._subscription = store.subscribe(self._push, self._errors.append)

    def _push(self, documents: list[VendorDocument]) -> None:
        self._events.append(VendorSnapshot.from_documents(documents))

    @property
    def closed(self) -> bool:
        return not self._subscription.active

    def poll(self) -> VendorSnapshot | None:
        """Return the oldest pending snapshot, or None when nothing is queued."""
        if not self._events:
            return None
        return self._events.popleft()

    def drain(self) -> list[VendorSnapshot]:
        events = list(self._events)
        self._events.clear()
        return events

    def latest(self) -> VendorSnapshot | None:
        events = self.drain()
        return events[-1] if events else None

    def errors(self) -> list[Exception]:
        errors = list(self._errors)
        self._errors.clear()
        return errors

    def close(self) -> None:
        self._subscription.close()

    def __enter__(self) -> SnapshotStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

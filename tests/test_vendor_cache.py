from __future__ import annotations

import logging

import pytest

from vendor_rates.models import VendorDocument, VendorSnapshot
from vendor_rates.store import InMemoryVendorStore
from vendor_rates.sync import SnapshotStream, VendorRateCache


def _doc(vendor_id: str, *zones: str) -> VendorDocument:
    return VendorDocument(vendor_id, {"COUNTRY/ZONE": list(zones), "Zone1": ["1"] * len(zones)})


def test_cache_replaces_state_on_each_snapshot_instead_of_merging() -> None:
    cache = VendorRateCache()

    cache.apply_documents([_doc("A", "US"), _doc("B", "CA")])
    cache.apply_documents([_doc("A", "US", "MX"), _doc("C", "BR")])

    assert cache.vendor_ids == ("A", "C")
    assert cache.get("B") is None
    assert cache.get("A").row_count == 2


def test_cache_snapshot_object_is_swapped_not_mutated() -> None:
    cache = VendorRateCache()
    cache.apply_documents([_doc("A", "US")])
    before = cache.snapshot

    cache.apply_documents([_doc("B", "CA")])

    assert before.vendor_ids == ("A",)
    assert cache.snapshot is not before


def test_cache_keeps_last_good_snapshot_on_store_error(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryVendorStore({"DHL": {"COUNTRY/ZONE": ["US"]}})
    cache = VendorRateCache()
    cache.subscribe(store)

    with caplog.at_level(logging.ERROR, logger="vendor_rates.sync.cache"):
        store.emit_error(ConnectionError("network down"))

    assert cache.vendor_ids == ("DHL",)
    assert isinstance(cache.last_error, ConnectionError)
    assert "network down" in caplog.text


@pytest.mark.asyncio
async def test_cache_follows_store_writes_and_notifies_listeners() -> None:
    store = InMemoryVendorStore()
    cache = VendorRateCache()
    seen: list[VendorSnapshot] = []
    cache.add_listener(seen.append)
    cache.subscribe(store)

    await store.set_document("UPS", {"COUNTRY/ZONE": ["US"]})

    assert cache.vendor_ids == ("UPS",)
    assert [snapshot.vendor_ids for snapshot in seen] == [(), ("UPS",)]
    assert cache.last_error is None


@pytest.mark.asyncio
async def test_cache_unsubscribe_is_idempotent_and_stops_updates() -> None:
    store = InMemoryVendorStore({"DHL": {"COUNTRY/ZONE": ["US"]}})
    cache = VendorRateCache()
    subscription = cache.subscribe(store)

    cache.unsubscribe()
    cache.unsubscribe()
    subscription.close()
    await store.set_document("UPS", {"COUNTRY/ZONE": ["CA"]})

    assert cache.vendor_ids == ("DHL",)
    assert not cache.subscribed
    assert store.subscriber_count == 0


def test_cache_rejects_second_active_subscription() -> None:
    store = InMemoryVendorStore()
    cache = VendorRateCache()
    cache.subscribe(store)

    with pytest.raises(RuntimeError, match="already subscribed"):
        cache.subscribe(store)


def test_cache_can_resubscribe_after_unsubscribe() -> None:
    store = InMemoryVendorStore({"DHL": {"COUNTRY/ZONE": ["US"]}})
    cache = VendorRateCache()
    with cache.subscribe(store):
        pass

    cache.subscribe(store)

    assert cache.subscribed
    assert cache.vendor_ids == ("DHL",)


def test_snapshot_stream_polls_full_snapshots_until_closed() -> None:
    store = InMemoryVendorStore({"A": {"COUNTRY/ZONE": ["US"]}})
    stream = SnapshotStream(store)

    store.replace_all({"A": {"COUNTRY/ZONE": ["US"]}, "B": {"COUNTRY/ZONE": []}})
    store.replace_all({"A": {"COUNTRY/ZONE": ["US"]}, "C": {"COUNTRY/ZONE": []}})

    assert stream.poll().vendor_ids == ("A",)
    assert stream.latest().vendor_ids == ("A", "C")
    assert stream.poll() is None

    stream.close()
    store.replace_all({})

    assert stream.closed
    assert stream.drain() == []


def test_snapshot_stream_collects_errors() -> None:
    store = InMemoryVendorStore()
    with SnapshotStream(store) as stream:
        store.emit_error(TimeoutError("slow"))
        assert [str(exc) for exc in stream.errors()] == ["slow"]
    assert stream.closed

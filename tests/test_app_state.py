from __future__ import annotations

import asyncio

import pytest

from vendor_rates.config import AppConfig, StoreConfig
from vendor_rates.state import AppState, build_store
from vendor_rates.store import InMemoryVendorStore, SqlVendorStore
from vendor_rates.view import ViewStatus


def test_build_store_follows_store_type() -> None:
    assert isinstance(build_store(AppConfig()), InMemoryVendorStore)
    sql_store = build_store(AppConfig(store=StoreConfig(type="sql", connection_string="sqlite://")))
    assert isinstance(sql_store, SqlVendorStore)


@pytest.mark.asyncio
async def test_upload_flows_through_store_into_cache_and_view() -> None:
    store = InMemoryVendorStore({"UPS": {"COUNTRY/ZONE": ["US"], "Zone1": ["5"]}})

    with AppState.from_config(AppConfig(page_size=2), store=store) as state:
        assert state.cache.vendor_ids == ("UPS",)
        assert state.view.selected_vendor == "DHL"
        assert state.view.status is ViewStatus.NO_DATA

        state.upload.load_record(
            {"COUNTRY/ZONE": ["US", "CA", "MX"], "Zone1": ["1", "", "3"]},
            file_name="dhl.csv",
        )
        result = await state.upload.submit("dhl")

        assert result.ok
        assert state.cache.vendor_ids == ("UPS", "DHL")
        assert state.view.status is ViewStatus.READY
        assert state.view.total_pages == 2
        assert [row.values["Zone1"] for row in state.view.visible_rows()] == ["1", "-"]

    assert store.subscriber_count == 0


@pytest.mark.asyncio
async def test_pagination_stays_usable_during_in_flight_upload() -> None:
    store = InMemoryVendorStore({"DHL": {"COUNTRY/ZONE": [str(i) for i in range(20)]}})
    state = AppState.create(store, page_size=8, default_vendor="DHL").open()
    store.fail_writes = ConnectionError("offline")
    state.upload.load_record({"COUNTRY/ZONE": ["US"]})

    pending = asyncio.create_task(state.upload.submit("ups"))
    await asyncio.sleep(0)
    assert state.upload.in_flight
    assert state.view.next_page() == 2
    result = await pending

    assert not result.ok
    assert state.view.page == 2
    state.close()
    state.close()


@pytest.mark.asyncio
async def test_reopened_state_keeps_view_in_step_with_cache() -> None:
    store = InMemoryVendorStore()
    state = AppState.from_config(AppConfig(), store=store)

    with state:
        pass
    with state:
        await store.set_document("DHL", {"COUNTRY/ZONE": [f"C{index}" for index in range(20)]})

        assert state.view.row_count == 20
        assert state.view.next_page() == 2

    assert store.subscriber_count == 0

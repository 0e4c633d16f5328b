from __future__ import annotations

from dataclasses import dataclass, field

from vendor_rates.config import AppConfig
from vendor_rates.store import InMemoryVendorStore, SqlVendorStore, StoreSubscription, VendorStore
from vendor_rates.sync import VendorRateCache
from vendor_rates.upload import UploadController
from vendor_rates.view import PaginatedTableView


def build_store(config: AppConfig) -> VendorStore:
    if config.store.type == "sql":
        return SqlVendorStore(config.store.connection_string, collection=config.store.collection)
    return InMemoryVendorStore(collection=config.store.collection)


@dataclass
class AppState:
    """Explicit application state shared by the cache, table view and upload controller.

    Each field has one writer: the cache owns the snapshot, the view owns the
    selection and page, the upload controller owns the staged CSV.
    """

    store: VendorStore
    cache: VendorRateCache
    view: PaginatedTableView
    upload: UploadController
    _subscription: StoreSubscription | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        store: VendorStore,
        *,
        page_size: int,
        default_vendor: str,
    ) -> AppState:
        cache = VendorRateCache()
        view = PaginatedTableView(cache, page_size=page_size, selected_vendor=default_vendor)
        upload = UploadController(store, default_vendor=default_vendor, cache=cache)
        return cls(store=store, cache=cache, view=view, upload=upload)

    @classmethod
    def from_config(cls, config: AppConfig, store: VendorStore | None = None) -> AppState:
        return cls.create(
            store if store is not None else build_store(config),
            page_size=config.page_size,
            default_vendor=config.default_vendor,
        )

    def open(self) -> AppState:
        if self._subscription is None or not self._subscription.active:
            self.view.attach()
            self._subscription = self.cache.subscribe(self.store)
        return self

    def close(self) -> None:
        self.cache.unsubscribe()
        self._subscription = None
        self.view.close()

    def __enter__(self) -> AppState:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

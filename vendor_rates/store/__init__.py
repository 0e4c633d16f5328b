"""Document store adapters with whole-collection change notification."""

from vendor_rates.store.base import (
    ErrorListener,
    SnapshotListener,
    StoreSubscription,
    SubscriberRegistry,
    VendorStore,
)
from vendor_rates.store.memory import InMemoryVendorStore
from vendor_rates.store.sql import SqlVendorStore, build_engine, vendor_documents_table

__all__ = [
    "ErrorListener",
    "InMemoryVendorStore",
    "SnapshotListener",
    "SqlVendorStore",
    "StoreSubscription",
    "SubscriberRegistry",
    "VendorStore",
    "build_engine",
    "vendor_documents_table",
]

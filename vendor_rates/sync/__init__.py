"""Live vendor rate cache fed by store snapshots."""

from vendor_rates.sync.cache import CacheListener, SnapshotStream, VendorRateCache

__all__ = [
    "CacheListener",
    "SnapshotStream",
    "VendorRateCache",
]

from __future__ import annotations


class VendorRatesError(Exception):
    """Base class for vendor rate failures surfaced to callers."""


class StoreError(VendorRatesError):
    """Raised when the document store cannot read or write vendor documents."""

    def __init__(self, message: str, *, vendor_id: str | None = None) -> None:
        super().__init__(message)
        self.vendor_id = vendor_id

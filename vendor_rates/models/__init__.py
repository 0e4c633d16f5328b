"""Data model contracts for vendor rate records and snapshots."""

from vendor_rates.models.records import (
    COUNTRY_ZONE_COLUMN,
    DEFAULT_COLLECTION,
    DEFAULT_PAGE_SIZE,
    DEFAULT_VENDOR_ID,
    EMPTY_VALUE_PLACEHOLDER,
    ColumnRecord,
    VendorDocument,
    VendorSnapshot,
    column_record_to_df,
    document_path,
    normalize_vendor_id,
    rate_columns,
    record_row_count,
)

__all__ = [
    "COUNTRY_ZONE_COLUMN",
    "DEFAULT_COLLECTION",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_VENDOR_ID",
    "EMPTY_VALUE_PLACEHOLDER",
    "ColumnRecord",
    "VendorDocument",
    "VendorSnapshot",
    "column_record_to_df",
    "document_path",
    "normalize_vendor_id",
    "rate_columns",
    "record_row_count",
]

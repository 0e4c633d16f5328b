from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import pandas as pd

ColumnRecord = dict[str, list[str]]

COUNTRY_ZONE_COLUMN = "COUNTRY/ZONE"
DEFAULT_COLLECTION = "VendorRates"
DEFAULT_PAGE_SIZE = 8
DEFAULT_VENDOR_ID = "DHL"
EMPTY_VALUE_PLACEHOLDER = "-"


@dataclass(frozen=True)
class VendorDocument:
    vendor_id: str
    record: ColumnRecord

    @property
    def row_count(self) -> int:
        return record_row_count(self.record)


@dataclass(frozen=True)
class VendorSnapshot:
    """Immutable view of every vendor document delivered by one store notification."""

    vendor_ids: tuple[str, ...] = ()
    documents: Mapping[str, VendorDocument] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_documents(cls, documents: Iterable[VendorDocument]) -> VendorSnapshot:
        ordered: dict[str, VendorDocument] = {}
        for document in documents:
            ordered[document.vendor_id] = document
        return cls(vendor_ids=tuple(ordered), documents=MappingProxyType(ordered))

    def get(self, vendor_id: str) -> VendorDocument | None:
        return self.documents.get(vendor_id)

    def __contains__(self, vendor_id: object) -> bool:
        return vendor_id in self.documents

    def __len__(self) -> int:
        return len(self.vendor_ids)


def normalize_vendor_id(raw: str | None, default: str = DEFAULT_VENDOR_ID) -> str:
    """Upper-case a vendor name, falling back to ``default`` when blank."""
    if raw is None or not raw.strip():
        return default.strip().upper()
    return raw.strip().upper()


def document_path(vendor_id: str, collection: str = DEFAULT_COLLECTION) -> str:
    return f"{collection}/{normalize_vendor_id(vendor_id)}"


def record_row_count(record: Mapping[str, list[str]]) -> int:
    """Return the number of logical rows, measured on the country/zone axis."""
    return len(record.get(COUNTRY_ZONE_COLUMN, ()))


def rate_columns(record: Mapping[str, list[str]]) -> list[str]:
    return [column for column in record if column != COUNTRY_ZONE_COLUMN]


def column_record_to_df(record: Mapping[str, list[str]]) -> pd.DataFrame:
    """Build a string-valued frame from a column record, keeping header order."""
    if not record:
        return pd.DataFrame(dtype=object)
    return pd.DataFrame({column: list(values) for column, values in record.items()}, dtype=object)

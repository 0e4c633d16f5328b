from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

import pandas as pd

from vendor_rates.models import (
    COUNTRY_ZONE_COLUMN,
    DEFAULT_PAGE_SIZE,
    EMPTY_VALUE_PLACEHOLDER,
    ColumnRecord,
    VendorSnapshot,
    column_record_to_df,
    rate_columns,
    record_row_count,
)
from vendor_rates.sync import VendorRateCache

logger = logging.getLogger(__name__)


class ViewStatus(str, Enum):
    NO_VENDOR = "no_vendor"
    NO_DATA = "no_data"
    READY = "ready"


NO_DATA_MESSAGE = "No data for this vendor"


@dataclass(frozen=True)
class RowView:
    country_zone: str
    values: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, str]:
        return {COUNTRY_ZONE_COLUMN: self.country_zone, **self.values}


@dataclass
class PaginationState:
    page_size: int = DEFAULT_PAGE_SIZE
    page: int = 1
    row_count: int = 0

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be a positive integer. Got: {self.page_size}")

    @property
    def total_pages(self) -> int:
        return math.ceil(self.row_count / self.page_size)

    @property
    def last_page(self) -> int:
        return max(1, self.total_pages)

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def end_index(self) -> int:
        return min(self.start_index + self.page_size, self.row_count)

    def reset(self, row_count: int) -> None:
        self.row_count = row_count
        self.page = 1

    def next(self) -> bool:
        if self.page >= self.last_page:
            return False
        self.page += 1
        return True

    def previous(self) -> bool:
        if self.page <= 1:
            return False
        self.page -= 1
        return True


def _placeholder(value: str) -> str:
    return value if value != "" else EMPTY_VALUE_PLACEHOLDER


def build_row_view(record: ColumnRecord, index: int) -> RowView:
    values: dict[str, str] = {}
    for column in rate_columns(record):
        column_values = record[column]
        values[column] = _placeholder(column_values[index] if index < len(column_values) else "")
    return RowView(country_zone=record[COUNTRY_ZONE_COLUMN][index], values=values)


class PaginatedTableView:
    """
    Paged rows of the selected vendor's rate record, kept current by the cache.

    Page navigation clamps at both ends. Selecting another vendor, or a cache
    update that changes the selected vendor's row count, returns to page 1.
    """

    def __init__(
        self,
        cache: VendorRateCache,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        selected_vendor: str | None = None,
    ) -> None:
        self._cache = cache
        self._pagination = PaginationState(page_size=page_size)
        self._selected_vendor: str | None = None
        self._cache.add_listener(self.on_snapshot)
        if selected_vendor is not None:
            self.select_vendor(selected_vendor)

    @property
    def selected_vendor(self) -> str | None:
        return self._selected_vendor

    @property
    def pagination(self) -> PaginationState:
        return self._pagination

    @property
    def page(self) -> int:
        return self._pagination.page

    @property
    def page_size(self) -> int:
        return self._pagination.page_size

    @property
    def total_pages(self) -> int:
        return self._pagination.total_pages

    @property
    def row_count(self) -> int:
        return self._pagination.row_count

    def _record(self) -> ColumnRecord | None:
        if self._selected_vendor is None:
            return None
        document = self._cache.get(self._selected_vendor)
        if document is None or COUNTRY_ZONE_COLUMN not in document.record:
            return None
        return document.record

    @property
    def status(self) -> ViewStatus:
        if self._selected_vendor is None:
            return ViewStatus.NO_VENDOR
        if self._record() is None:
            return ViewStatus.NO_DATA
        return ViewStatus.READY

    @property
    def columns(self) -> list[str]:
        record = self._record()
        return rate_columns(record) if record is not None else []

    def select_vendor(self, vendor_id: str) -> ViewStatus:
        self._selected_vendor = vendor_id
        record = self._record()
        self._pagination.reset(record_row_count(record) if record is not None else 0)
        status = self.status
        if status is ViewStatus.NO_DATA:
            logger.info("[VIEW] %s: %s", NO_DATA_MESSAGE, vendor_id)
        return status

    def next_page(self) -> int:
        self._pagination.next()
        return self._pagination.page

    def previous_page(self) -> int:
        self._pagination.previous()
        return self._pagination.page

    def on_snapshot(self, snapshot: VendorSnapshot) -> None:
        if self._selected_vendor is None:
            return
        document = snapshot.get(self._selected_vendor)
        row_count = document.row_count if document is not None else 0
        if row_count != self._pagination.row_count:
            logger.debug(
                "[VIEW] Row count for %s changed %d -> %d; back to page 1",
                self._selected_vendor,
                self._pagination.row_count,
                row_count,
            )
            self._pagination.reset(row_count)

    def visible_rows(self) -> list[RowView]:
        record = self._record()
        if record is None:
            return []
        state = self._pagination
        end = min(state.start_index + state.page_size, record_row_count(record))
        return [build_row_view(record, index) for index in range(state.start_index, end)]

    def page_frame(self) -> pd.DataFrame:
        """Return the visible rows as a frame with ``COUNTRY/ZONE`` first."""
        if self._record() is None:
            return column_record_to_df({})
        rows = self.visible_rows()
        page_record: ColumnRecord = {COUNTRY_ZONE_COLUMN: [row.country_zone for row in rows]}
        for column in self.columns:
            page_record[column] = [row.values[column] for row in rows]
        return column_record_to_df(page_record)

    def attach(self) -> None:
        """Listen to the cache again and catch up with its current snapshot."""
        self._cache.add_listener(self.on_snapshot)
        self.on_snapshot(self._cache.snapshot)

    def close(self) -> None:
        self._cache.remove_listener(self.on_snapshot)

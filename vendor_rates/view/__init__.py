"""Paginated table view over one vendor's rate record."""

from vendor_rates.view.table import (
    NO_DATA_MESSAGE,
    PaginatedTableView,
    PaginationState,
    RowView,
    ViewStatus,
    build_row_view,
)

__all__ = [
    "NO_DATA_MESSAGE",
    "PaginatedTableView",
    "PaginationState",
    "RowView",
    "ViewStatus",
    "build_row_view",
]

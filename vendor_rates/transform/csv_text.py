from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from vendor_rates.models import ColumnRecord

logger = logging.getLogger(__name__)

_CSV_SUFFIX = ".csv"
_FIELD_DELIMITER = ","
_ROW_DELIMITER = "\n"


def _split_fields(row: str) -> list[str]:
    return [value.strip() for value in row.split(_FIELD_DELIMITER)]


def parse_csv_text(raw_text: str) -> ColumnRecord:
    """
    Pivot delimited rate text into a column record.

    Rows are matched to headers by position, not by name:
    - blank rows are dropped, including intentionally empty data rows;
    - short rows are padded with "" so every column keeps the same length;
    - fields beyond the header width are dropped;
    - a repeated header name keeps a single key, and the later column's
      values win.

    Blank input yields an empty record.
    """
    rows = [row for row in raw_text.split(_ROW_DELIMITER) if row.strip()]
    if not rows:
        return {}

    headers = _split_fields(rows[0])
    duplicates = sorted({header for header in headers if headers.count(header) > 1})
    if duplicates:
        logger.warning("[CSV] Duplicate header(s) %s; later columns overwrite earlier ones", duplicates)

    record: ColumnRecord = {header: [] for header in headers}
    # Values land in the column at their index; with duplicate headers two
    # indexes share a key, so only the last index for each key is written.
    owner_index = {header: index for index, header in enumerate(headers)}

    truncated_rows = 0
    for row in rows[1:]:
        values = _split_fields(row)
        if len(values) > len(headers):
            truncated_rows += 1
        for index, header in enumerate(headers):
            if owner_index[header] != index:
                continue
            record[header].append(values[index] if index < len(values) else "")

    if truncated_rows:
        logger.debug("[CSV] Dropped extra fields from %d row(s)", truncated_rows)
    return record


def read_csv_file(path: str | Path) -> ColumnRecord:
    """Read one local ``.csv`` file as UTF-8 text and parse it."""
    path = Path(path)
    if path.suffix.lower() != _CSV_SUFFIX:
        raise ValueError(f"Rate file must have a '{_CSV_SUFFIX}' extension: {path}")

    raw_text = path.read_text(encoding="utf-8")
    record = parse_csv_text(raw_text)
    logger.info(
        "[CSV] Parsed %s: %d column(s), %d row(s)",
        path.name,
        len(record),
        len(next(iter(record.values()), [])),
    )
    return record


def to_csv_text(record: Mapping[str, list[str]]) -> str:
    """Serialize a rectangular column record back to newline-delimited text."""
    if not record:
        return ""
    headers = list(record)
    row_count = len(record[headers[0]])
    lines = [_FIELD_DELIMITER.join(headers)]
    for index in range(row_count):
        lines.append(_FIELD_DELIMITER.join(record[header][index] for header in headers))
    return _ROW_DELIMITER.join(lines) + _ROW_DELIMITER


def header_set_matches(left: Mapping[str, list[str]], right: Mapping[str, list[str]]) -> bool:
    return set(left) == set(right)

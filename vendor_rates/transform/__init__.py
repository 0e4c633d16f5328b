"""CSV text to column record transformation."""

from vendor_rates.transform.csv_text import (
    header_set_matches,
    parse_csv_text,
    read_csv_file,
    to_csv_text,
)

__all__ = [
    "header_set_matches",
    "parse_csv_text",
    "read_csv_file",
    "to_csv_text",
]

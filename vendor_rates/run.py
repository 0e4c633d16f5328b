from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Sequence

from vendor_rates.config import AppConfig, configure_logging, load_config
from vendor_rates.errors import StoreError
from vendor_rates.state import AppState
from vendor_rates.upload import UploadResult, UploadStatus
from vendor_rates.view import NO_DATA_MESSAGE, PaginatedTableView, ViewStatus

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintain and browse per-vendor shipping rate tables")
    parser.add_argument("--config", required=True, help="Path to local JSON config")
    parser.add_argument("--upload", help="CSV rate file to upload")
    parser.add_argument(
        "--vendor",
        default="",
        help="Vendor name for --upload. Upper-cased; defaults to the configured default vendor.",
    )
    parser.add_argument("--show", help="Vendor whose rate table should be printed")
    parser.add_argument("--page", type=int, default=1, help="Page of the rate table to print")
    parser.add_argument("--list", action="store_true", help="Print the known vendor names")
    parser.add_argument("--log-level", help="Override log level from config")
    return parser


def _print_vendor_list(state: AppState) -> None:
    vendor_ids = state.cache.vendor_ids
    print("Vendors: " + (", ".join(vendor_ids) if vendor_ids else "<none>"))


def _goto_page(view: PaginatedTableView, page: int) -> None:
    while view.page < page and view.page < view.pagination.last_page:
        view.next_page()


def _print_table(view: PaginatedTableView) -> None:
    print(f"Vendor: {view.selected_vendor}")
    if view.status is not ViewStatus.READY:
        print(NO_DATA_MESSAGE)
        return
    print(view.page_frame().to_string(index=False))
    print(f"Page {view.page} of {view.pagination.last_page} ({view.row_count} rows)")


def _run_upload(state: AppState, args: argparse.Namespace, parser: argparse.ArgumentParser) -> UploadResult:
    status = state.upload.choose_file(Path(args.upload))
    if status is UploadStatus.REJECTED and state.upload.last_result is not None:
        parser.error(f"Failed to read rate file: {state.upload.last_result.message}")

    result = asyncio.run(state.upload.submit(args.vendor))
    print(result.message)
    return result


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = Path(args.config)
    if not config_path.exists():
        parser.error(f"Config file not found: {config_path}")

    try:
        config: AppConfig = load_config(config_path)
    except (OSError, ValueError) as exc:
        parser.error(f"Failed to load config: {exc}")

    if args.page < 1:
        parser.error(f"--page must be a positive integer. Got: {args.page}")
    if args.upload and not Path(args.upload).exists():
        parser.error(f"Rate file not found: {args.upload}")

    configure_logging(args.log_level or config.log_level)

    try:
        state = AppState.from_config(config)
    except StoreError as exc:
        parser.error(f"Failed to open store: {exc}")

    exit_code = 0
    with state:
        if state.cache.last_error is not None:
            logger.warning("Starting with an empty vendor list: %s", state.cache.last_error)

        show_vendor = args.show
        if args.upload:
            result = _run_upload(state, args, parser)
            if not result.ok:
                exit_code = 1
            elif show_vendor is None:
                show_vendor = result.vendor_id

        if args.list:
            _print_vendor_list(state)

        if show_vendor is not None:
            state.view.select_vendor(show_vendor.strip().upper())
            _goto_page(state.view, args.page)
            _print_table(state.view)

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())

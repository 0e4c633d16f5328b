from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vendor_rates.models import DEFAULT_VENDOR_ID, ColumnRecord, normalize_vendor_id
from vendor_rates.store import VendorStore
from vendor_rates.sync import VendorRateCache
from vendor_rates.transform import header_set_matches, read_csv_file

logger = logging.getLogger(__name__)

NO_DATA_TO_SUBMIT_MESSAGE = "No data to submit. Please upload a CSV file first."
UNREADABLE_FILE_MESSAGE = "Could not read rate file."
UPLOAD_SUCCEEDED_MESSAGE = "Data successfully uploaded."
UPLOAD_FAILED_MESSAGE = "Failed to upload data."
UPLOAD_IN_PROGRESS_MESSAGE = "An upload is already in progress."


class UploadStatus(str, Enum):
    NO_FILE = "no_file"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class UploadResult:
    status: UploadStatus
    message: str
    vendor_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is UploadStatus.SUCCEEDED


class UploadController:
    """Holds the parsed CSV buffer and writes it to the store on submit.

    When a cache is given, a replacement upload whose header set differs from
    the cached document is logged as a warning; the write still goes ahead.
    """

    def __init__(
        self,
        store: VendorStore,
        *,
        default_vendor: str = DEFAULT_VENDOR_ID,
        cache: VendorRateCache | None = None,
    ) -> None:
        self._store = store
        self._default_vendor = default_vendor
        self._cache = cache
        self.parsed: ColumnRecord | None = None
        self.file_name = ""
        self.dialog_open = False
        self.in_flight = False
        # Kept for the upload dialog; no byte-level progress is reported.
        self.progress = 0
        self.last_result: UploadResult | None = None

    @property
    def status(self) -> UploadStatus:
        if self.in_flight:
            return UploadStatus.IN_PROGRESS
        if self.last_result is not None and self.last_result.status in {
            UploadStatus.SUCCEEDED,
            UploadStatus.FAILED,
            UploadStatus.REJECTED,
        }:
            return self.last_result.status
        if self.parsed is None:
            return UploadStatus.NO_FILE
        return UploadStatus.READY

    @property
    def can_submit(self) -> bool:
        return self.parsed is not None and not self.in_flight

    def open_dialog(self) -> None:
        self.dialog_open = True

    def close_dialog(self) -> None:
        self.dialog_open = False

    def resolve_vendor_id(self, vendor_name_input: str | None) -> str:
        return normalize_vendor_id(vendor_name_input, self._default_vendor)

    def load_record(self, record: ColumnRecord, *, file_name: str = "") -> None:
        """Stage an already-parsed record; an empty record leaves nothing to submit."""
        self.file_name = file_name
        self.parsed = record if record else None
        self.last_result = None

    def choose_file(self, path: str | Path) -> UploadStatus:
        """Read and stage a rate file; an unreadable file stages nothing and is REJECTED."""
        path = Path(path)
        try:
            record = read_csv_file(path)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("[UPLOAD] Could not read %s: %s", path.name, exc)
            self.parsed = None
            self.file_name = ""
            self.last_result = UploadResult(UploadStatus.REJECTED, f"{UNREADABLE_FILE_MESSAGE} {exc}")
            return self.status

        self.load_record(record, file_name=path.name)
        if self.parsed is None:
            logger.info("[UPLOAD] %s contained no rows; nothing staged", path.name)
        return self.status

    def _finish(self, result: UploadResult) -> UploadResult:
        self.last_result = result
        return result

    def _warn_on_header_change(self, vendor_id: str, record: ColumnRecord) -> None:
        if self._cache is None:
            return
        existing = self._cache.get(vendor_id)
        if existing is not None and not header_set_matches(existing.record, record):
            logger.warning(
                "[UPLOAD] Header set for %s changes from %s to %s",
                vendor_id,
                sorted(existing.record),
                sorted(record),
            )

    async def submit(self, vendor_name_input: str | None = "") -> UploadResult:
        if self.in_flight:
            return UploadResult(UploadStatus.IN_PROGRESS, UPLOAD_IN_PROGRESS_MESSAGE)

        vendor_id = self.resolve_vendor_id(vendor_name_input)
        if self.parsed is None:
            logger.info("[UPLOAD] Submit rejected for %s: no parsed data", vendor_id)
            return self._finish(
                UploadResult(UploadStatus.REJECTED, NO_DATA_TO_SUBMIT_MESSAGE, vendor_id)
            )

        self._warn_on_header_change(vendor_id, self.parsed)
        self.in_flight = True
        self.last_result = None
        try:
            await self._store.set_document(vendor_id, self.parsed)
        except Exception as exc:
            logger.exception("[UPLOAD] Error uploading %s", vendor_id)
            return self._finish(
                UploadResult(UploadStatus.FAILED, f"{UPLOAD_FAILED_MESSAGE} {exc}", vendor_id)
            )
        finally:
            self.in_flight = False

        logger.info("[UPLOAD] Uploaded %s (%s)", vendor_id, self.file_name or "<memory>")
        self.parsed = None
        self.file_name = ""
        self.dialog_open = False
        return self._finish(UploadResult(UploadStatus.SUCCEEDED, UPLOAD_SUCCEEDED_MESSAGE, vendor_id))

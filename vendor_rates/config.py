from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vendor_rates.models import DEFAULT_COLLECTION, DEFAULT_PAGE_SIZE, DEFAULT_VENDOR_ID

_SUPPORTED_STORE_TYPES: tuple[str, ...] = ("memory", "sql")
_SUPPORTED_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StoreConfig:
    type: str = "memory"
    connection_string: str | None = None
    collection: str = DEFAULT_COLLECTION


@dataclass
class AppConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    page_size: int = DEFAULT_PAGE_SIZE
    default_vendor: str = DEFAULT_VENDOR_ID
    log_level: str = "INFO"


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


def _require_str_value(value: object, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{label}' must be a non-empty string")
    return value.strip()


def _parse_store(raw: dict[str, Any]) -> StoreConfig:
    store_raw = raw.get("store", {})
    if not isinstance(store_raw, dict):
        raise ValueError("'store' must be an object")

    store_type = _require_str_value(store_raw.get("type", "memory"), "store.type").lower()
    if store_type not in _SUPPORTED_STORE_TYPES:
        supported = ", ".join(_SUPPORTED_STORE_TYPES)
        raise ValueError(f"'store.type' must be one of: {supported}. Got: {store_type}")

    collection = _require_str_value(store_raw.get("collection", DEFAULT_COLLECTION), "store.collection")

    connection_string = None
    if store_type == "sql":
        connection_string = _require_str(store_raw, "connection_string").strip()

    return StoreConfig(type=store_type, connection_string=connection_string, collection=collection)


def _parse_page_size(raw: dict[str, Any]) -> int:
    page_size = raw.get("page_size", DEFAULT_PAGE_SIZE)
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise ValueError(f"'page_size' must be a positive integer. Got: {page_size!r}")
    return page_size


def _parse_log_level(raw: dict[str, Any]) -> str:
    log_level = _require_str_value(raw.get("log_level", "INFO"), "log_level").upper()
    if log_level not in _SUPPORTED_LOG_LEVELS:
        supported = ", ".join(_SUPPORTED_LOG_LEVELS)
        raise ValueError(f"'log_level' must be one of: {supported}. Got: {log_level}")
    return log_level


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)

    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a JSON object")

    return AppConfig(
        store=_parse_store(raw),
        page_size=_parse_page_size(raw),
        default_vendor=_require_str_value(raw.get("default_vendor", DEFAULT_VENDOR_ID), "default_vendor").upper(),
        log_level=_parse_log_level(raw),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

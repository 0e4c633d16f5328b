from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

import pytest

from vendor_rates.run import main

_TEST_TMP_DIR = Path("data/_test_tmp")


def _write_config(filename: str, payload: dict[str, object]) -> Path:
    _TEST_TMP_DIR.mkdir(parents=True, exist_ok=True)
    config_path = _TEST_TMP_DIR / filename
    config_path.write_text(json.dumps(payload), encoding="utf-8")
    return config_path


def _write_sql_config() -> Path:
    db_path = _TEST_TMP_DIR / f"run_cli.{uuid4().hex}.db"
    return _write_config(
        f"run_cli.sql.{uuid4().hex}.json",
        {"store": {"type": "sql", "connection_string": f"sqlite:///{db_path}"}, "page_size": 2},
    )


def _write_rate_fixture(rows: list[str]) -> Path:
    _TEST_TMP_DIR.mkdir(parents=True, exist_ok=True)
    path = _TEST_TMP_DIR / f"run_cli.rates.{uuid4().hex}.csv"
    path.write_text("\n".join(["COUNTRY/ZONE,Zone1,Zone2", *rows]) + "\n", encoding="utf-8")
    return path


def test_cli_uploads_and_prints_first_page(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_sql_config()
    rates_path = _write_rate_fixture(["US,10,11", "CA,,21", "MX,30,31"])

    exit_code = main(["--config", str(config_path), "--upload", str(rates_path), "--vendor", "ups"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "Data successfully uploaded." in captured.out
    assert "Vendor: UPS" in captured.out
    assert "Page 1 of 2 (3 rows)" in captured.out
    assert "MX" not in captured.out


def test_cli_show_reads_persisted_vendor_and_clamps_page(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_sql_config()
    rates_path = _write_rate_fixture(["US,10,11", "CA,,21", "MX,30,31"])
    assert main(["--config", str(config_path), "--upload", str(rates_path)]) == 0
    capsys.readouterr()

    exit_code = main(["--config", str(config_path), "--show", "dhl", "--page", "9", "--list"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "Vendors: DHL" in captured.out
    assert "MX" in captured.out
    assert "Page 2 of 2 (3 rows)" in captured.out


def test_cli_show_unknown_vendor_prints_no_data(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config("run_cli.memory.json", {"store": {"type": "memory"}})

    exit_code = main(["--config", str(config_path), "--show", "fedex", "--list"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "Vendors: <none>" in captured.out
    assert "No data for this vendor" in captured.out


def test_cli_empty_rate_file_is_rejected_without_write(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_sql_config()
    _TEST_TMP_DIR.mkdir(parents=True, exist_ok=True)
    empty_path = _TEST_TMP_DIR / f"run_cli.empty.{uuid4().hex}.csv"
    empty_path.write_text("\n", encoding="utf-8")

    exit_code = main(["--config", str(config_path), "--upload", str(empty_path), "--list"])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "No data to submit. Please upload a CSV file first." in captured.out
    assert "Vendors: <none>" in captured.out


def test_cli_errors_when_config_missing(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", "data/_test_tmp/does-not-exist.json"])

    captured = capsys.readouterr()
    assert exc_info.value.code == 2
    assert "Config file not found" in captured.err


def test_cli_errors_when_config_invalid(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config("run_cli.invalid.json", {"page_size": 0})

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(config_path), "--list"])

    captured = capsys.readouterr()
    assert exc_info.value.code == 2
    assert "Failed to load config" in captured.err


def test_cli_errors_when_rate_file_has_wrong_extension(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config("run_cli.memory.ext.json", {})
    _TEST_TMP_DIR.mkdir(parents=True, exist_ok=True)
    text_path = _TEST_TMP_DIR / "run_cli.rates.txt"
    text_path.write_text("COUNTRY/ZONE\nUS\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(config_path), "--upload", str(text_path)])

    captured = capsys.readouterr()
    assert exc_info.value.code == 2
    assert "Failed to read rate file" in captured.err


def test_cli_errors_on_non_positive_page(capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config("run_cli.memory.page.json", {})

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(config_path), "--show", "dhl", "--page", "0"])

    assert exc_info.value.code == 2
    assert "--page must be a positive integer" in capsys.readouterr().err

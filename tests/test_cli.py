from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import Workbook

import reconcile


def _write_side(path: Path, rows: list[list]) -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["Số Cont", "Ngày", "Phí Hạ", "BOT"])
    for row in rows:
        ws.append(row)
    wb.save(path)


def test_build_options_from_arguments() -> None:
    args = reconcile.parse_args(
        [
            "--file-a",
            "a1.xlsx",
            "--file-a",
            "a2.xlsx",
            "--file-b",
            "b.csv",
            "--sheet-a",
            "T1",
            "--tolerance",
            "0.5",
        ]
    )
    options = reconcile.build_options(args)

    assert options.files_a == [Path("a1.xlsx"), Path("a2.xlsx")]
    assert options.files_b == [Path("b.csv")]
    assert options.sheets_a == ["T1"]
    assert options.sheets_b is None
    assert options.tolerance == 0.5
    assert options.scan_limit == 20
    assert options.report_path is None


def test_file_arguments_are_required() -> None:
    with pytest.raises(SystemExit):
        reconcile.parse_args(["--file-a", "a.xlsx"])


def test_main_writes_report_and_mappings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    file_a = tmp_path / "a.xlsx"
    file_b = tmp_path / "b.xlsx"
    _write_side(file_a, [["MSKU1906227", "2023-01-01", 100, 20], ["TCNU1234567", "2023-01-02", 50, 0]])
    _write_side(file_b, [["MSKU1906227", "2023-01-01", 100, 25]])
    report = tmp_path / "report.xlsx"
    mappings = tmp_path / "mappings"

    code = reconcile.main(
        [
            "--file-a",
            str(file_a),
            "--file-b",
            str(file_b),
            "--report-path",
            str(report),
            "--save-mappings",
            str(mappings),
        ]
    )

    assert code == 0
    assert report.exists()
    saved = json.loads((mappings / "mapping_a.json").read_text(encoding="utf-8"))
    assert saved["contract_no"] == "Số Cont"
    assert saved["toll"] == ["BOT"]
    out = capsys.readouterr().out
    assert "khớp 0, lệch 1" in out
    assert "thiếu ở B 1" in out


def test_main_reports_mapping_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "plain.xlsx"
    wb = Workbook()
    wb.active.append(["Tên", "Số tiền"])
    wb.active.append(["x", 1])
    wb.save(path)

    code = reconcile.main(["--file-a", str(path), "--file-b", str(path)])

    assert code == 1
    assert "Lỗi:" in capsys.readouterr().err

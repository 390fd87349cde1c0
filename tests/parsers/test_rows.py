from __future__ import annotations

from cost_reconcile.parsers.rows import extract_records


def test_row_numbers_match_sheet_rows() -> None:
    grid = [
        ["Bảng kê chi phí", None],
        ["Số Cont", "Phí Hạ"],
        ["MSKU1906227", 100],
        ["TCNU1234567", 200],
    ]
    records = extract_records(grid, ["Số Cont", "Phí Hạ"], data_offset=1, header_row_index=1)

    assert [record.row_number for record in records] == [3, 4]
    assert records[0].values == {"Số Cont": "MSKU1906227", "Phí Hạ": 100}


def test_double_header_offset() -> None:
    grid = [
        ["Phí", "Phí"],
        ["Hạ", "Nâng"],
        [10, 20],
    ]
    records = extract_records(grid, ["Hạ", "Nâng"], data_offset=2, header_row_index=0)

    assert len(records) == 1
    assert records[0].row_number == 3


def test_blank_headers_are_not_addressable() -> None:
    grid = [["Số Cont", "", "Ngày"], ["C1", "hidden", "2023-01-01"]]
    records = extract_records(grid, ["Số Cont", "", "Ngày"], data_offset=1, header_row_index=0)

    assert records[0].values == {"Số Cont": "C1", "Ngày": "2023-01-01"}


def test_missing_cells_become_empty_strings() -> None:
    grid = [["Số Cont", "Ngày", "BOT"], ["C1", None]]
    records = extract_records(grid, ["Số Cont", "Ngày", "BOT"], data_offset=1, header_row_index=0)

    assert records[0].values == {"Số Cont": "C1", "Ngày": "", "BOT": ""}


def test_duplicate_header_last_column_wins() -> None:
    grid = [["BOT", "BOT"], [10, 20]]
    records = extract_records(grid, ["BOT", "BOT"], data_offset=1, header_row_index=0)

    assert records[0].get("BOT") == 20


def test_empty_rows_are_kept_in_place() -> None:
    grid = [["Số Cont"], ["C1"], [None], ["  "], ["C2"]]
    records = extract_records(grid, ["Số Cont"], data_offset=1, header_row_index=0)

    assert [(record.get("Số Cont"), record.row_number) for record in records] == [
        ("C1", 2),
        ("", 3),
        ("  ", 4),
        ("C2", 5),
    ]

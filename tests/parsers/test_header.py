from __future__ import annotations

from cost_reconcile.parsers.header import detect_header, find_header_row, keyword_hits, merge_header_rows


def test_keyword_hits_counts_matching_cells() -> None:
    assert keyword_hits(["Số Cont", "Ngày", None, "", 123, "Ghi chú"]) == 2


def test_header_row_found_below_title_rows() -> None:
    grid = [
        ["CÔNG TY TNHH VẬN TẢI ABC", None, None],
        ["Kỳ: 01/2023", None, None],
        ["Số Cont", "Ngày", "Phí Hạ"],
        ["MSKU1906227", "2023-01-01", 100],
    ]
    layout = detect_header(grid)

    assert layout.header_row_index == 2
    assert not layout.is_double_header
    assert layout.headers == ("Số Cont", "Ngày", "Phí Hạ")
    assert layout.first_data_row == 3


def test_ties_keep_the_earlier_row() -> None:
    grid = [
        ["Cont", "Date"],
        ["x", "y"],
        ["Cont", "Date"],
    ]
    assert find_header_row(grid) == 0


def test_no_keywords_defaults_to_first_row() -> None:
    grid = [["a", "b"], ["c", "d"]]
    layout = detect_header(grid)
    assert layout.header_row_index == 0
    assert layout.headers == ("a", "b")


def test_scan_limit_bounds_the_search() -> None:
    grid = [["x"]] * 5 + [["Số Cont", "Ngày"]]
    assert find_header_row(grid, scan_limit=4) == 0
    assert find_header_row(grid, scan_limit=5) == 5


def test_double_header_unique_bottoms_stand_alone() -> None:
    grid = [
        ["Phí", "", "Phí"],
        ["Hạ", "Nâng", "Cân"],
        [100, 200, 50],
    ]
    layout = detect_header(grid)

    assert layout.is_double_header
    assert list(layout.headers) == ["Hạ", "Nâng", "Cân"]
    assert layout.data_offset == 2
    assert layout.first_data_row == 2


def test_repeated_bottoms_keep_parent_prefix() -> None:
    merged = merge_header_rows(
        ["Số Cont", "Phí Hạ", "Phí Nâng", "Ghi chú"],
        ["", "Amount", "Amount", ""],
    )
    assert merged == ["Số Cont", "Phí Hạ Amount", "Phí Nâng Amount", "Ghi chú"]


def test_repeated_bottom_without_parent() -> None:
    assert merge_header_rows(["", ""], ["Tiền", "Tiền"]) == ["Tiền", "Tiền"]


def test_merge_pads_ragged_rows() -> None:
    assert merge_header_rows(["Số Cont"], ["", "VAT"]) == ["Số Cont", "VAT"]


def test_blank_headers_dropped_from_names_but_positions_kept() -> None:
    grid = [
        ["Số Cont", "  ", "Ngày"],
        ["MSKU1906227", "x", "2023-01-01"],
    ]
    layout = detect_header(grid)

    assert layout.headers == ("Số Cont", "", "Ngày")
    assert layout.named_headers == ["Số Cont", "Ngày"]


def test_empty_grid() -> None:
    layout = detect_header([])
    assert layout.header_row_index == 0
    assert layout.headers == ()

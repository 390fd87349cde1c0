from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from cost_reconcile.time_utils import as_date_key
from cost_reconcile.utils import cell_text, is_blank, normalize_header, parse_cost, strip_diacritics


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Phí Hạ", "phi ha"),
        ("Số Cont", "so cont"),
        ("Đơn giá", "don gia"),
        ("Cước vỏ", "cuoc vo"),
        ("", ""),
        (None, ""),
    ],
)
def test_strip_diacritics_removes_marks_and_lowercases(raw: str | None, expected: str) -> None:
    assert strip_diacritics(raw) == expected


def test_normalize_header_trims_after_stripping() -> None:
    assert normalize_header("  Ngày VC  ") == "ngay vc"


def test_cell_text_renders_like_a_spreadsheet() -> None:
    assert cell_text(1234.0) == "1234"
    assert cell_text(12.5) == "12.5"
    assert cell_text(None) == ""
    assert cell_text(float("nan")) == ""
    assert cell_text("  abc ") == "  abc "


def test_is_blank() -> None:
    assert is_blank(None)
    assert is_blank("   ")
    assert is_blank(float("nan"))
    assert not is_blank(0)
    assert not is_blank("0")


@pytest.mark.parametrize(
    "raw,expected",
    [
        (100, 100.0),
        (12.5, 12.5),
        ("100,000", 100000.0),
        ("1,200,000 VND", 1200000.0),
        ("$ 45.50", 45.5),
        ("-300", -300.0),
        ("100-200", 100.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
    ],
)
def test_parse_cost_is_lenient(raw: object, expected: float) -> None:
    assert parse_cost(raw) == expected


def test_as_date_key_formats_date_objects_only() -> None:
    assert as_date_key(datetime(2023, 1, 1, 8, 30)) == "2023-01-01"
    assert as_date_key(date(2023, 12, 31)) == "2023-12-31"
    assert as_date_key(pd.Timestamp("2024-02-29 23:59")) == "2024-02-29"
    assert as_date_key(pd.NaT) is None
    assert as_date_key("2023-01-01") is None
    assert as_date_key(None) is None

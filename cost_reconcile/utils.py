from __future__ import annotations

import math
import numbers
import re
import unicodedata

_NUMERIC_PREFIX = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def strip_diacritics(value: str | None) -> str:
    """Drop Vietnamese tone marks and lower-case, 示例："Phí Hạ" -> "phi ha", "Đơn" -> "don"."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return text.replace("đ", "d").replace("Đ", "d").lower()


def normalize_header(value: str | None) -> str:
    """Comparable form of a header cell, 示例："  Số Cont " -> "so cont"."""
    return strip_diacritics(value).strip()


def is_blank(value: object) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def cell_text(value: object) -> str:
    """Render a cell the way a spreadsheet shows it, 示例：1234.0 -> "1234", None -> ""."""
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_cost(value: object) -> float:
    """Parse a money cell leniently, 示例："1,200,000 VND" -> 1200000.0, "abc" -> 0.0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
        return 0.0 if math.isnan(number) else number
    if is_blank(value):
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    # Only the leading number counts, 示例："100-200" -> 100.
    match = _NUMERIC_PREFIX.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))

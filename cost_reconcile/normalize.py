from __future__ import annotations

import re

from .schema import MATCH_KEY_SEPARATOR
from .time_utils import as_date_key
from .utils import cell_text

# ISO 6346 style owner code + serial, 示例："MSKU1906227".
_CONTAINER_NO = re.compile(r"[A-Z]{4}\d+")
# First token holding at least one digit; ASCII word boundaries so Vietnamese notes split cleanly.
_BILL_NO = re.compile(r"\b[A-Z0-9]*\d[A-Z0-9]*\b", re.ASCII)


def _upper_trim(value: object) -> str:
    return cell_text(value).strip().upper()


def normalize_container_no(value: object) -> str:
    """示例："msku1906227 RE" -> "MSKU1906227"; values without the pattern are only upper-trimmed."""
    text = _upper_trim(value)
    match = _CONTAINER_NO.search(text)
    return match.group(0) if match else text


def normalize_date(value: object) -> str:
    """Date cells become YYYY-MM-DD; text is compared as-is after upper-trim."""
    key = as_date_key(value)
    if key is not None:
        return key
    return _upper_trim(value)


def normalize_bill_no(value: object) -> str:
    """示例："7265053640 này đã hủy- bill đúng 7265123020" -> "7265053640"."""
    text = _upper_trim(value)
    match = _BILL_NO.search(text)
    return match.group(0) if match else text


def match_key(contract_no: str, date: str, bill_no: str = "") -> str:
    return MATCH_KEY_SEPARATOR.join((contract_no, date, bill_no))

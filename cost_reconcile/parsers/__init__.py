from __future__ import annotations

from .header import HeaderLayout, detect_header
from .rows import extract_records
from .workbook import FailedFile, build_sheet, load_files, parse_workbook

__all__ = [
    "FailedFile",
    "HeaderLayout",
    "build_sheet",
    "detect_header",
    "extract_records",
    "load_files",
    "parse_workbook",
]

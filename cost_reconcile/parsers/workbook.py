from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import openpyxl
import pandas as pd

from ..exceptions import ParseError
from ..models import FileData, Sheet
from ..schema import CSV_SUFFIXES, DEFAULT_SCAN_LIMIT, EXCEL_SUFFIXES, LEGACY_EXCEL_SUFFIXES, SUPPORTED_SUFFIXES
from .header import Grid, detect_header
from .rows import extract_records

logger = logging.getLogger(__name__)

Source = Union[Path, str, bytes]


@dataclass
class FailedFile:
    """A file that could not be ingested, kept so callers can report it."""

    file_name: str
    error: str


def _frame_to_grid(frame: pd.DataFrame) -> List[List[Any]]:
    cleaned = frame.astype(object).where(frame.notna(), None)
    return cleaned.values.tolist()


def _read_excel_grids(handle: Any) -> Dict[str, Grid]:
    # Cached formula results are what the user sees in the sheet.
    workbook = openpyxl.load_workbook(handle, data_only=True)
    try:
        grids: Dict[str, Grid] = {}
        for worksheet in workbook.worksheets:
            # Start at A1 even when the used range does not, so row numbers match the sheet.
            rows = worksheet.iter_rows(
                min_row=1,
                min_col=1,
                max_row=worksheet.max_row,
                max_col=worksheet.max_column,
                values_only=True,
            )
            grids[worksheet.title] = [list(row) for row in rows]
        return grids
    finally:
        workbook.close()


def _read_legacy_excel_grids(handle: Any) -> Dict[str, Grid]:
    frames = pd.read_excel(handle, sheet_name=None, header=None, dtype=object, engine="xlrd")
    return {name: _frame_to_grid(frame) for name, frame in frames.items()}


def _read_csv_grid(handle: Any) -> Grid:
    raw = handle.getvalue() if isinstance(handle, io.BytesIO) else handle.read_bytes()
    text = raw.decode("utf-8-sig")
    # Title lines are narrower than the table below them; size the frame by the widest line.
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)
    if not width:
        return []
    frame = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        engine="python",
    )
    return _frame_to_grid(frame)


def read_grids(source: Source, file_name: str) -> Dict[str, Grid]:
    """Read every worksheet of a file as a row-major grid of resolved cell values."""
    suffix = Path(file_name).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ParseError(file_name, f"unsupported file type {suffix or '(none)'}")
    handle = io.BytesIO(source) if isinstance(source, bytes) else Path(source)
    try:
        if suffix in EXCEL_SUFFIXES:
            return _read_excel_grids(handle)
        if suffix in LEGACY_EXCEL_SUFFIXES:
            return _read_legacy_excel_grids(handle)
        if suffix in CSV_SUFFIXES:
            return {Path(file_name).stem: _read_csv_grid(handle)}
    except ImportError as exc:
        raise ParseError(file_name, "reading .xls needs xlrd; install the excel-legacy extra") from exc
    except Exception as exc:
        raise ParseError(file_name, f"unreadable spreadsheet ({exc.__class__.__name__}: {exc})") from exc
    raise ParseError(file_name, f"unsupported file type {suffix}")


def build_sheet(sheet_name: str, grid: Grid, scan_limit: int = DEFAULT_SCAN_LIMIT) -> Sheet:
    if not grid:
        return Sheet(sheet_name=sheet_name, headers=(), records=())
    layout = detect_header(grid, scan_limit)
    records = extract_records(grid, layout.headers, layout.data_offset, layout.header_row_index)
    logger.debug(
        "sheet %s: header row %d, %d columns, %d records",
        sheet_name,
        layout.header_row_index + 1,
        len(layout.named_headers),
        len(records),
    )
    return Sheet(
        sheet_name=sheet_name,
        headers=tuple(layout.named_headers),
        records=tuple(records),
        header_row_index=layout.header_row_index + 1,
        is_double_header=layout.is_double_header,
    )


def parse_workbook(
    source: Source,
    file_name: Optional[str] = None,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
) -> FileData:
    """Parse a spreadsheet path or its raw bytes into a FileData with one Sheet per worksheet.

    Raises:
        FileNotFoundError: a path that does not exist.
        ParseError: unreadable or unsupported content; nothing partial is returned.
    """
    if isinstance(source, bytes):
        if not file_name:
            raise ValueError("file_name is required when parsing raw bytes")
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"spreadsheet not found: {path}")
        file_name = file_name or path.name

    grids = read_grids(source, file_name)
    sheets = tuple(build_sheet(name, grid, scan_limit) for name, grid in grids.items())
    logger.info("parsed %s: %d sheet(s), %d record(s)", file_name, len(sheets), sum(len(s.records) for s in sheets))
    return FileData(file_name=file_name, sheets=sheets)


def load_files(
    paths: Iterable[Path],
    scan_limit: int = DEFAULT_SCAN_LIMIT,
) -> Tuple[List[FileData], List[FailedFile]]:
    """Parse several files; one bad file is reported and skipped, the rest still load."""
    files: List[FileData] = []
    failures: List[FailedFile] = []
    for path in paths:
        try:
            files.append(parse_workbook(path, scan_limit=scan_limit))
        except (ParseError, FileNotFoundError) as exc:
            logger.warning("skipping %s: %s", path, exc)
            failures.append(FailedFile(file_name=Path(path).name, error=str(exc)))
    return files, failures

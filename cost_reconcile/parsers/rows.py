from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..models import Record
from .header import Grid


def extract_records(
    grid: Grid,
    headers: Sequence[str],
    data_offset: int,
    header_row_index: int,
) -> List[Record]:
    """Turn every row below the header into a Record.

    row_number is the 1-based sheet row, 示例：header at index 2 with a single
    header row -> first data row is row 4. Empty rows come through with ""
    values; the engine drops them because they carry no container or date.
    """
    first_row = header_row_index + data_offset
    records: List[Record] = []
    for offset, row in enumerate(grid[first_row:]):
        values: Dict[str, Any] = {}
        for index, header in enumerate(headers):
            if not header or not header.strip():
                continue  # unnamed columns are not addressable
            value = row[index] if index < len(row) else None
            # Duplicate header names: the right-most column wins.
            values[header] = "" if value is None else value
        records.append(Record(values=values, row_number=first_row + offset + 1))
    return records

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

from ..schema import DEFAULT_SCAN_LIMIT, HEADER_KEYWORDS
from ..utils import cell_text, normalize_header

logger = logging.getLogger(__name__)

Grid = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class HeaderLayout:
    header_row_index: int  # 0-based grid row of the primary header
    is_double_header: bool
    headers: Tuple[str, ...]  # positional, blank names kept so columns stay aligned

    @property
    def data_offset(self) -> int:
        return 2 if self.is_double_header else 1

    @property
    def first_data_row(self) -> int:
        return self.header_row_index + self.data_offset

    @property
    def named_headers(self) -> List[str]:
        return [header for header in self.headers if header.strip()]


def keyword_hits(row: Sequence[Any]) -> int:
    """Count cells containing a header keyword, 示例：["Số Cont", "Ngày", "123"] -> 2."""
    hits = 0
    for value in row:
        text = normalize_header(cell_text(value))
        if not text:
            continue
        if any(keyword in text for keyword in HEADER_KEYWORDS):
            hits += 1
    return hits


def find_header_row(grid: Grid, scan_limit: int = DEFAULT_SCAN_LIMIT) -> int:
    """Return the 0-based row with the most keyword hits; ties keep the earlier row."""
    best_row = 0
    max_score = 0
    last_row = min(len(grid) - 1, scan_limit)
    for index in range(last_row + 1):
        score = keyword_hits(grid[index])
        if score > max_score:
            max_score = score
            best_row = index
    logger.debug("header row %d selected with %d keyword hits", best_row, max_score)
    return best_row


def merge_header_rows(primary: Sequence[Any], secondary: Sequence[Any]) -> List[str]:
    """Collapse a two-row header into one name per column.

    A sub-label that is unique across the bottom row stands alone; a repeated one
    (e.g. several "Amount" columns) keeps its parent as a prefix; an empty one
    means the top cell spans both rows.
    """
    width = max(len(primary), len(secondary))
    tops = [cell_text(primary[i]).strip() if i < len(primary) else "" for i in range(width)]
    bottoms = [cell_text(secondary[i]).strip() if i < len(secondary) else "" for i in range(width)]
    bottom_counts = Counter(bottom for bottom in bottoms if bottom)

    merged: List[str] = []
    for top, bottom in zip(tops, bottoms):
        if not bottom:
            merged.append(top)
        elif bottom_counts[bottom] == 1:
            merged.append(bottom)
        else:
            merged.append(f"{top} {bottom}" if top else bottom)
    return merged


def detect_header(grid: Grid, scan_limit: int = DEFAULT_SCAN_LIMIT) -> HeaderLayout:
    if not grid:
        return HeaderLayout(header_row_index=0, is_double_header=False, headers=())

    best_row = find_header_row(grid, scan_limit)
    primary = grid[best_row]
    secondary = grid[best_row + 1] if best_row + 1 < len(grid) else None

    if secondary is not None and keyword_hits(secondary) > 0:
        headers = merge_header_rows(primary, secondary)
        logger.debug("rows %d-%d merged as a double header", best_row + 1, best_row + 2)
        return HeaderLayout(header_row_index=best_row, is_double_header=True, headers=tuple(headers))

    return HeaderLayout(
        header_row_index=best_row,
        is_double_header=False,
        headers=tuple(cell_text(value) for value in primary),
    )

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from .exceptions import MappingError
from .models import ComparisonResult, CostMapping
from .schema import ADDITIONAL_COST_PREFIX, CATEGORY_LABELS, REPORT_COLUMNS


def _category_title(key: str) -> str:
    if key.startswith(ADDITIONAL_COST_PREFIX):
        return f"{key[len(ADDITIONAL_COST_PREFIX):]} (extra)"
    return CATEGORY_LABELS.get(key, key)


def build_report_frame(results: Iterable[ComparisonResult]) -> pd.DataFrame:
    """One row per result, followed by per-side category breakdown columns.

    返回:
        pd.DataFrame: 示例：columns = REPORT_COLUMNS + ["A: Lift/Unload", "B: Lift/Unload", ...]
    """
    rows: List[Dict[str, Any]] = []
    categories: Dict[str, None] = {}
    for result in results:
        row = result.to_row()
        for side, breakdown in (("A", result.breakdown_a), ("B", result.breakdown_b)):
            for category, amount in breakdown.items():
                categories.setdefault(category, None)
                row[f"{side}: {_category_title(category)}"] = amount
        rows.append(row)
    breakdown_columns = [
        f"{side}: {_category_title(category)}" for category in categories for side in ("A", "B")
    ]
    frame = pd.DataFrame(rows, columns=REPORT_COLUMNS + breakdown_columns)
    if breakdown_columns:
        # Categories only one side maps show as 0 on the other side.
        frame[breakdown_columns] = frame[breakdown_columns].fillna(0.0)
    return frame


def write_report(path: Path, results: Iterable[ComparisonResult]) -> None:
    """Write the comparison report; .xlsx via openpyxl, anything else as CSV."""
    frame = build_report_frame(results)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".xlsx":
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            frame.to_excel(writer, sheet_name="Comparison Report", index=False)
    else:
        frame.to_csv(path, index=False, encoding="utf-8-sig")


def load_mapping(path: Path) -> CostMapping:
    """Read a user-edited mapping saved in CostMapping.to_dict() shape."""
    if not path.exists():
        raise FileNotFoundError(f"mapping file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MappingError(f"mapping file is not valid JSON: {path}", {"error": str(exc)}) from exc
    if not isinstance(data, dict):
        raise MappingError(f"mapping file must hold a JSON object: {path}")
    return CostMapping.from_dict(data)


def dump_mapping(mapping: CostMapping, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(mapping.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")

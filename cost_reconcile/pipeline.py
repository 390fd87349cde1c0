from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .exceptions import MappingError
from .io_utils import load_mapping, write_report
from .mapper import suggest_mapping
from .models import (
    ComparisonResult,
    ComparisonSummary,
    CostMapping,
    FileData,
    Record,
    Status,
    sheet_key,
)
from .normalize import match_key, normalize_bill_no, normalize_container_no, normalize_date
from .parsers import FailedFile, load_files
from .schema import DEFAULT_MATCH_TOLERANCE, DEFAULT_SCAN_LIMIT, SHEET_KEY_SEPARATOR
from .utils import parse_cost

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOptions:
    files_a: List[Path]
    files_b: List[Path]
    sheets_a: Optional[List[str]] = None  # None selects every sheet
    sheets_b: Optional[List[str]] = None
    mapping_a_path: Optional[Path] = None  # None uses the heuristic suggestion
    mapping_b_path: Optional[Path] = None
    report_path: Optional[Path] = None
    tolerance: float = DEFAULT_MATCH_TOLERANCE
    scan_limit: int = DEFAULT_SCAN_LIMIT


@dataclass
class ReconcileResult:
    results: List[ComparisonResult]
    summary: ComparisonSummary
    mapping_a: CostMapping
    mapping_b: CostMapping
    failed_files: List[FailedFile] = field(default_factory=list)
    report_path: Optional[Path] = None


@dataclass
class _Aggregate:
    contract_no: Any
    date: Any
    bill_no: Any
    total_cost: float = 0.0
    breakdown: Dict[str, float] = field(default_factory=dict)
    rows: List[Record] = field(default_factory=list)


def row_cost(record: Record, mapping: CostMapping) -> float:
    """Sum every mapped cost column of one row; missing columns count as 0."""
    return sum(parse_cost(record.get(column)) for _, column in mapping.cost_columns())


def row_breakdown(record: Record, mapping: CostMapping) -> Dict[str, float]:
    breakdown: Dict[str, float] = {}
    for category, column in mapping.cost_columns():
        breakdown[category] = breakdown.get(category, 0.0) + parse_cost(record.get(column))
    return breakdown


def aggregate(
    files: Sequence[FileData],
    mapping: CostMapping,
    selected_sheet_keys: Iterable[str],
) -> Dict[str, _Aggregate]:
    """Group the selected sheets' rows by match key, summing their costs in encounter order."""
    selected = set(selected_sheet_keys)
    groups: Dict[str, _Aggregate] = {}
    skipped = 0
    for file in files:
        for sheet in file.sheets:
            if sheet_key(file.file_name, sheet.sheet_name) not in selected:
                continue
            for record in sheet.records:
                raw_contract = record.get(mapping.contract_no)
                raw_date = record.get(mapping.date)
                raw_bill = record.get(mapping.bill_no) if mapping.bill_no else None
                contract_no = normalize_container_no(raw_contract)
                date = normalize_date(raw_date)
                if not contract_no or not date:
                    # Subtotal and note rows usually carry no container or date.
                    skipped += 1
                    continue
                bill_no = normalize_bill_no(raw_bill) if mapping.bill_no else ""
                key = match_key(contract_no, date, bill_no)

                entry = groups.get(key)
                if entry is None:
                    entry = _Aggregate(contract_no=raw_contract, date=raw_date, bill_no=raw_bill)
                    groups[key] = entry
                for category, amount in row_breakdown(record, mapping).items():
                    entry.breakdown[category] = entry.breakdown.get(category, 0.0) + amount
                entry.total_cost += row_cost(record, mapping)
                entry.rows.append(record.tagged(file.file_name, sheet.sheet_name))
    if skipped:
        logger.debug("%d row(s) without container number or date skipped", skipped)
    return groups


def classify(diff: float, tolerance: float = DEFAULT_MATCH_TOLERANCE) -> Status:
    return Status.MATCH if abs(diff) < tolerance else Status.MISMATCH


def compare(
    files_a: Sequence[FileData],
    files_b: Sequence[FileData],
    mapping_a: CostMapping,
    mapping_b: CostMapping,
    selected_sheet_keys_a: Iterable[str],
    selected_sheet_keys_b: Iterable[str],
    tolerance: float = DEFAULT_MATCH_TOLERANCE,
) -> List[ComparisonResult]:
    """Pair side A and side B aggregates by match key.

    Keys from A come first in A's order, then keys only B has in B's order.
    Both sides present -> MATCH/MISMATCH by abs(diff) < tolerance; one side
    missing -> MISSING_A/MISSING_B with the absent total set to 0.
    """
    groups_a = aggregate(files_a, mapping_a, selected_sheet_keys_a)
    groups_b = aggregate(files_b, mapping_b, selected_sheet_keys_b)

    results: List[ComparisonResult] = []
    for key, entry_a in groups_a.items():
        entry_b = groups_b.get(key)
        if entry_b is None:
            results.append(
                ComparisonResult(
                    id=key,
                    contract_no=entry_a.contract_no,
                    date=entry_a.date,
                    bill_no=entry_a.bill_no,
                    total_cost_a=entry_a.total_cost,
                    total_cost_b=0.0,
                    diff=entry_a.total_cost,
                    status=Status.MISSING_B,
                    rows_a=tuple(entry_a.rows),
                    breakdown_a=dict(entry_a.breakdown),
                )
            )
            continue
        diff = entry_a.total_cost - entry_b.total_cost
        results.append(
            ComparisonResult(
                id=key,
                contract_no=entry_a.contract_no,
                date=entry_a.date,
                bill_no=entry_a.bill_no,
                total_cost_a=entry_a.total_cost,
                total_cost_b=entry_b.total_cost,
                diff=diff,
                status=classify(diff, tolerance),
                rows_a=tuple(entry_a.rows),
                rows_b=tuple(entry_b.rows),
                breakdown_a=dict(entry_a.breakdown),
                breakdown_b=dict(entry_b.breakdown),
            )
        )

    for key, entry_b in groups_b.items():
        if key in groups_a:
            continue
        results.append(
            ComparisonResult(
                id=key,
                contract_no=entry_b.contract_no,
                date=entry_b.date,
                bill_no=entry_b.bill_no,
                total_cost_a=0.0,
                total_cost_b=entry_b.total_cost,
                diff=-entry_b.total_cost,
                status=Status.MISSING_A,
                rows_b=tuple(entry_b.rows),
                breakdown_b=dict(entry_b.breakdown),
            )
        )
    return results


def summarize(results: Iterable[ComparisonResult]) -> ComparisonSummary:
    counts = {status: 0 for status in Status}
    total = 0
    net_diff = 0.0
    for result in results:
        counts[result.status] += 1
        total += 1
        net_diff += result.diff
    return ComparisonSummary(
        total=total,
        matched=counts[Status.MATCH],
        mismatched=counts[Status.MISMATCH],
        missing_a=counts[Status.MISSING_A],
        missing_b=counts[Status.MISSING_B],
        net_diff=net_diff,
    )


def resolve_sheet_selection(files: Sequence[FileData], requested: Optional[Sequence[str]]) -> List[str]:
    """Expand a user selection into sheet keys.

    Entries may be full keys ("FileA.xlsx::T1") or bare sheet names ("T1"), which
    select that sheet in every file. None selects every sheet.
    """
    available = [key for file in files for key in file.sheet_keys()]
    if requested is None:
        return available
    selected: List[str] = []
    for entry in requested:
        if SHEET_KEY_SEPARATOR in entry:
            matches = [key for key in available if key == entry]
        else:
            matches = [key for key in available if key.split(SHEET_KEY_SEPARATOR, 1)[1] == entry]
        if not matches:
            logger.warning("sheet selection %r matches no loaded sheet", entry)
        for key in matches:
            if key not in selected:
                selected.append(key)
    return selected


def _resolve_mapping(
    side: str,
    files: Sequence[FileData],
    selected_keys: Sequence[str],
    mapping_path: Optional[Path],
) -> CostMapping:
    if mapping_path:
        mapping = load_mapping(mapping_path)
    else:
        mapping = suggest_mapping(files, selected_keys)
    if not mapping.is_complete():
        raise MappingError(
            f"side {side}: contract number and date columns are required",
            {"contract_no": mapping.contract_no, "date": mapping.date},
        )
    return mapping


def reconcile(options: ReconcileOptions) -> ReconcileResult:
    files_a, failed_a = load_files(options.files_a, scan_limit=options.scan_limit)
    files_b, failed_b = load_files(options.files_b, scan_limit=options.scan_limit)

    selected_a = resolve_sheet_selection(files_a, options.sheets_a)
    selected_b = resolve_sheet_selection(files_b, options.sheets_b)

    mapping_a = _resolve_mapping("A", files_a, selected_a, options.mapping_a_path)
    mapping_b = _resolve_mapping("B", files_b, selected_b, options.mapping_b_path)

    results = compare(files_a, files_b, mapping_a, mapping_b, selected_a, selected_b, tolerance=options.tolerance)
    summary = summarize(results)
    logger.info(
        "compared %d key(s): %d match, %d mismatch, %d missing in A, %d missing in B",
        summary.total,
        summary.matched,
        summary.mismatched,
        summary.missing_a,
        summary.missing_b,
    )

    if options.report_path:
        write_report(options.report_path, results)

    return ReconcileResult(
        results=results,
        summary=summary,
        mapping_a=mapping_a,
        mapping_b=mapping_b,
        failed_files=failed_a + failed_b,
        report_path=options.report_path,
    )

"""Core package for container cost reconciliation between two parties' spreadsheets."""

from .exceptions import MappingError, ParseError, ReconcileError
from .mapper import map_headers
from .models import ComparisonResult, CostCategory, CostMapping, FileData, Record, Sheet, Status
from .parsers import parse_workbook
from .pipeline import aggregate, compare

__all__ = [
    "ComparisonResult",
    "CostCategory",
    "CostMapping",
    "FileData",
    "MappingError",
    "ParseError",
    "ReconcileError",
    "Record",
    "Sheet",
    "Status",
    "aggregate",
    "compare",
    "map_headers",
    "parse_workbook",
]

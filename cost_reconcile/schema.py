from __future__ import annotations

# Substrings that mark a row as a header row; matched against diacritic-free lower-case text.
HEADER_KEYWORDS: tuple[str, ...] = (
    "stt",
    "so cont",
    "cont",
    "container",
    "ngay",
    "date",
    "bill",
    "so bill",
    "chi phi",
    "cost",
    "tien",
    "amount",
    "thanh tien",
    "ha",
    "nang",
    "lift",
    "phi",
    "cuoc",
    "kho",
    "xe",
    "bot",
    "thue",
    "vat",
    "neo",
)

DEFAULT_SCAN_LIMIT = 20  # 0-based rows 0..20 are scanned for the header
DEFAULT_MATCH_TOLERANCE = 1.0  # abs(diff) strictly below this is a MATCH

SHEET_KEY_SEPARATOR = "::"  # 示例："FileA.xlsx::Sheet1"
MATCH_KEY_SEPARATOR = "|"

# Breakdown keys of user-defined costs, kept apart from CostCategory values.
ADDITIONAL_COST_PREFIX = "extra:"

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
LEGACY_EXCEL_SUFFIXES = {".xls"}
CSV_SUFFIXES = {".csv"}
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES | LEGACY_EXCEL_SUFFIXES | CSV_SUFFIXES

# Human readable labels for the fixed cost categories, keyed by CostCategory value.
CATEGORY_LABELS: dict[str, str] = {
    "lift_unload": "Lift/Unload",
    "container_deposit": "Container Deposit",
    "toll": "Toll",
    "transport_fee": "Transport Fee",
    "warehouse_transfer": "Warehouse Transfer",
    "weighing_fee": "Weighing Fee",
    "cleaning_fee": "Cleaning Fee",
    "overweight_fee": "Overweight Fee",
    "detention_fee": "Detention Fee",
    "storage_fee": "Storage Fee",
    "vat": "VAT",
}

REPORT_COLUMNS: list[str] = [
    "Type",
    "Contract No",
    "Date",
    "Bill No",
    "Total Cost File A",
    "Total Cost File B",
    "Difference",
]

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .exceptions import MappingError
from .schema import ADDITIONAL_COST_PREFIX, CATEGORY_LABELS, SHEET_KEY_SEPARATOR


class CostCategory(StrEnum):
    LIFT_UNLOAD = "lift_unload"  # Hạ/Nâng
    CONTAINER_DEPOSIT = "container_deposit"  # Cược vỏ
    TOLL = "toll"  # BOT/Phí cầu đường
    TRANSPORT_FEE = "transport_fee"  # Cước xe
    WAREHOUSE_TRANSFER = "warehouse_transfer"  # Chuyển kho
    WEIGHING_FEE = "weighing_fee"  # Phí cân xe
    CLEANING_FEE = "cleaning_fee"  # Phí vệ sinh
    OVERWEIGHT_FEE = "overweight_fee"  # Phí quá tải
    DETENTION_FEE = "detention_fee"  # Phí neo xe
    STORAGE_FEE = "storage_fee"  # Phí gửi cont/lưu bãi
    VAT = "vat"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self.value]


class Status(StrEnum):
    MATCH = "MATCH"
    MISMATCH = "MISMATCH"
    MISSING_A = "MISSING_A"
    MISSING_B = "MISSING_B"


def sheet_key(file_name: str, sheet_name: str) -> str:
    """Qualified sheet key, 示例：("FileA.xlsx", "T1") -> "FileA.xlsx::T1"."""
    return f"{file_name}{SHEET_KEY_SEPARATOR}{sheet_name}"


@dataclass(frozen=True)
class Record:
    """One extracted data row with its original 1-based sheet row number."""

    values: Mapping[str, Any]
    row_number: int
    source_file: str = ""
    source_sheet: str = ""

    def get(self, column: Optional[str]) -> Any:
        """Cell value for a header; unknown or unset columns read as ""."""
        if not column:
            return ""
        return self.values.get(column, "")

    def tagged(self, source_file: str, source_sheet: str) -> "Record":
        return replace(self, source_file=source_file, source_sheet=source_sheet)


@dataclass(frozen=True)
class Sheet:
    sheet_name: str
    headers: Tuple[str, ...]
    records: Tuple[Record, ...]
    header_row_index: Optional[int] = None  # 1-based, None when the sheet is empty
    is_double_header: bool = False


@dataclass(frozen=True)
class FileData:
    file_name: str
    sheets: Tuple[Sheet, ...]

    def sheet_keys(self) -> List[str]:
        return [sheet_key(self.file_name, sheet.sheet_name) for sheet in self.sheets]


@dataclass
class CostMapping:
    """Column selection for one side: identifiers plus the columns summed per category."""

    contract_no: str = ""
    date: str = ""
    bill_no: Optional[str] = None
    lift_unload: List[str] = field(default_factory=list)
    container_deposit: List[str] = field(default_factory=list)
    toll: List[str] = field(default_factory=list)
    transport_fee: List[str] = field(default_factory=list)
    warehouse_transfer: List[str] = field(default_factory=list)
    weighing_fee: List[str] = field(default_factory=list)
    cleaning_fee: List[str] = field(default_factory=list)
    overweight_fee: List[str] = field(default_factory=list)
    detention_fee: List[str] = field(default_factory=list)
    storage_fee: List[str] = field(default_factory=list)
    vat: List[str] = field(default_factory=list)
    additional_costs: Dict[str, List[str]] = field(default_factory=dict)  # 示例：{"Phí lệnh": ["LỆNH"]}

    def columns_for(self, category: CostCategory) -> List[str]:
        return getattr(self, category.value)

    def cost_columns(self) -> Iterator[Tuple[str, str]]:
        """Yield (breakdown key, column) for every column that contributes to a row cost.

        Fixed categories use their CostCategory value; additional costs are keyed
        "extra:<name>" so a user cost named "VAT" stays apart from CostCategory.VAT.
        """
        for category in CostCategory:
            for column in self.columns_for(category):
                yield category.value, column
        for name, columns in self.additional_costs.items():
            for column in columns:
                yield f"{ADDITIONAL_COST_PREFIX}{name}", column

    def is_complete(self) -> bool:
        return bool(self.contract_no and self.date)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "contract_no": self.contract_no,
            "date": self.date,
            "bill_no": self.bill_no,
        }
        for category in CostCategory:
            data[category.value] = list(self.columns_for(category))
        data["additional_costs"] = {name: list(columns) for name, columns in self.additional_costs.items()}
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CostMapping":
        """Build a mapping from its JSON shape.

        Raises:
            MappingError: a field has the wrong type, 示例：{"toll": "BOT"} instead of {"toll": ["BOT"]}.
        """
        mapping = cls(
            contract_no=_column_name(data, "contract_no") or "",
            date=_column_name(data, "date") or "",
            bill_no=_column_name(data, "bill_no"),
        )
        for category in CostCategory:
            mapping.columns_for(category).extend(_column_list(category.value, data.get(category.value)))
        additional = data.get("additional_costs") or {}
        if not isinstance(additional, Mapping):
            raise MappingError("additional_costs must be an object of name -> column list")
        for name, columns in additional.items():
            mapping.additional_costs[str(name)] = _column_list(f"additional_costs.{name}", columns)
        return mapping


def _column_name(data: Mapping[str, Any], field_name: str) -> Optional[str]:
    value = data.get(field_name)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise MappingError(f"{field_name} must be a column name", {field_name: value})
    return value


def _column_list(field_name: str, value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(column, str) for column in value):
        raise MappingError(f"{field_name} must be a list of column names", {field_name: value})
    return list(value)


@dataclass(frozen=True)
class ComparisonResult:
    id: str  # match key "CONT|DATE|BILL"
    contract_no: Any
    date: Any
    bill_no: Any
    total_cost_a: float
    total_cost_b: float
    diff: float
    status: Status
    rows_a: Tuple[Record, ...] = ()
    rows_b: Tuple[Record, ...] = ()
    breakdown_a: Mapping[str, float] = field(default_factory=dict)
    breakdown_b: Mapping[str, float] = field(default_factory=dict)

    def to_row(self) -> Dict[str, Any]:
        return {
            "Type": self.status.value,
            "Contract No": self.contract_no,
            "Date": self.date,
            "Bill No": self.bill_no if self.bill_no is not None else "",
            "Total Cost File A": self.total_cost_a,
            "Total Cost File B": self.total_cost_b,
            "Difference": self.diff,
        }


@dataclass(frozen=True)
class ComparisonSummary:
    total: int = 0
    matched: int = 0
    mismatched: int = 0
    missing_a: int = 0
    missing_b: int = 0
    net_diff: float = 0.0

    @property
    def missing(self) -> int:
        return self.missing_a + self.missing_b

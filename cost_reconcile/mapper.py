from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import CostCategory, CostMapping, FileData, sheet_key
from .utils import normalize_header


@dataclass(frozen=True)
class KeywordRule:
    """Header test on normalized text; raw_contains is checked against the accented header."""

    target: str
    contains: Tuple[str, ...] = ()
    equals: Tuple[str, ...] = ()
    raw_contains: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()

    def matches(self, header: str, raw_lower: str) -> bool:
        if any(phrase in header for phrase in self.excludes):
            return False
        if header in self.equals:
            return True
        if any(phrase in header for phrase in self.contains):
            return True
        return any(phrase in raw_lower for phrase in self.raw_contains)


# Identifier fields: a later matching header replaces an earlier one.
IDENTIFIER_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule("contract_no", contains=("so cont",), equals=("cont", "container")),
    KeywordRule("date", contains=("ngay van chuyen", "ngay vc"), equals=("ngay",)),
    KeywordRule("bill_no", contains=("so bill",), equals=("bill",)),
)

# Cost categories in priority order; the first rule that matches claims the header.
CATEGORY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(CostCategory.DETENTION_FEE, contains=("neo xe", "detention"), equals=("neo",)),
    KeywordRule(CostCategory.STORAGE_FEE, contains=("gui cont", "luu bai", "storage", "luu cont")),
    KeywordRule(CostCategory.CONTAINER_DEPOSIT, contains=("cuoc vo", "deposit"), raw_contains=("cược",)),
    KeywordRule(
        CostCategory.LIFT_UNLOAD,
        contains=("phi ha", "phi nang", "lift", "lo/lo"),
        equals=("ha", "nang"),
    ),
    KeywordRule(CostCategory.TOLL, contains=("bot", "spitc", "sp-itc", "sp itc", "cau duong")),
    KeywordRule(
        CostCategory.TRANSPORT_FEE,
        contains=("cuoc xe", "phi van chuyen", "trucking"),
        equals=("vc", "phi vc"),
    ),
    KeywordRule(CostCategory.WAREHOUSE_TRANSFER, contains=("chuyen kho", "luu kho", "warehouse")),
    KeywordRule(CostCategory.WEIGHING_FEE, contains=("can xe", "phi can", "weighing")),
    KeywordRule(
        CostCategory.CLEANING_FEE,
        contains=("ve sinh", "cleaning", "rua cont", "washing", "phi ve sinh", "hoa don vsc", "vsc"),
    ),
    KeywordRule(CostCategory.OVERWEIGHT_FEE, contains=("qua tai", "overweight", "phi qua tai")),
    # "Thành tiền dịch vụ" is a service subtotal, not tax.
    KeywordRule(CostCategory.VAT, contains=("thue", "vat"), excludes=("thanh tien dich vu",)),
)


def classify_header(raw: str) -> Optional[str]:
    """Return the identifier field or CostCategory a header belongs to, or None."""
    header = normalize_header(raw)
    raw_lower = unicodedata.normalize("NFC", raw or "").lower()
    for rule in IDENTIFIER_RULES + CATEGORY_RULES:
        if rule.matches(header, raw_lower):
            return rule.target
    return None


def map_headers(headers: Iterable[str]) -> CostMapping:
    """Suggest a CostMapping from header names.

    示例：["Số Cont", "Ngày", "Phí Hạ", "BOT", "Thuế VAT"] ->
    contract_no="Số Cont", date="Ngày", lift_unload=["Phí Hạ"], toll=["BOT"], vat=["Thuế VAT"].
    """
    mapping = CostMapping()
    for header in headers:
        target = classify_header(header)
        if target is None:
            continue
        if isinstance(target, CostCategory):
            mapping.columns_for(target).append(header)
        else:
            setattr(mapping, target, header)
    return mapping


def collect_headers(files: Sequence[FileData], selected_keys: Iterable[str]) -> List[str]:
    """Ordered union of header names across the selected sheets."""
    selected = set(selected_keys)
    seen: dict[str, None] = {}
    for file in files:
        for sheet in file.sheets:
            if sheet_key(file.file_name, sheet.sheet_name) not in selected:
                continue
            for header in sheet.headers:
                seen.setdefault(header, None)
    return list(seen)


def suggest_mapping(files: Sequence[FileData], selected_keys: Iterable[str]) -> CostMapping:
    return map_headers(collect_headers(files, selected_keys))

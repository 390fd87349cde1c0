from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pandas as pd


def as_date_key(value: object) -> Optional[str]:
    """Format date-like cells as YYYY-MM-DD, 示例：datetime(2023, 1, 1, 8, 30) -> "2023-01-01".

    Returns None for anything that is not already a date object; text dates are
    left to the caller because they are compared verbatim.
    """
    if value is None or value is pd.NaT:
        return None
    # pd.Timestamp subclasses datetime, so one check covers openpyxl and pandas cells.
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return None

# pacioli/format_utils.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from .config_labels import BUDDHIST_ERA_OFFSET, THAI_MONTHS, UNSAFE_FILENAME_CHARS
from .totals import round_currency, to_decimal


def format_number(value: Union[int, float, Decimal]) -> str:
    """Two decimals with comma thousands separators, e.g. 5,000.00."""
    return f"{round_currency(to_decimal(value)):,.2f}"


def format_quantity(value: Union[int, float]) -> str:
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


def parse_iso_date(text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def format_date_thai(text: Optional[str]) -> str:
    """Long Thai date with Buddhist-era year: 2024-06-15 -> 15 มิถุนายน 2567.

    Values that match the YYYY-MM-DD pattern but are not real calendar
    dates are shown unchanged.
    """
    if not text:
        return ""
    d = parse_iso_date(text)
    if d is None:
        return text
    return f"{d.day} {THAI_MONTHS[d.month - 1]} {d.year + BUDDHIST_ERA_OFFSET}"


def safe_filename(text: str) -> str:
    return UNSAFE_FILENAME_CHARS.sub("_", text.strip()) or "document"

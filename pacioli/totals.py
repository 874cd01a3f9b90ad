# pacioli/totals.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from .config_labels import CENT
from .models import DocumentTotals, LineItem

Number = Union[int, float, Decimal, str]


def to_decimal(value: Number) -> Decimal:
    """Convert through str() so binary floats keep their printed value."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_currency(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(item: LineItem) -> Decimal:
    return round_currency(item.line_total)


def calculate_totals(
    items: Iterable[LineItem], tax_rate: Number, tax_type: str
) -> DocumentTotals:
    """Subtotal, tax and grand total for a list of line items.

    ``vat`` adds the tax on top of the subtotal; ``withholding`` deducts it
    from the amount payable. The tax amount itself is always non-negative.
    """
    exact = sum((item.line_total for item in items), Decimal("0"))
    subtotal = round_currency(exact)
    tax_amount = round_currency(subtotal * to_decimal(tax_rate))

    if tax_type == "vat":
        total = subtotal + tax_amount
    elif tax_type == "withholding":
        total = subtotal - tax_amount
    else:
        raise ValueError(f"Unknown tax type: {tax_type!r}")

    return DocumentTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)

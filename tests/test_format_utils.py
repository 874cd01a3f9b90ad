"""Unit tests for number and date formatting."""

from decimal import Decimal

import pytest

from pacioli.format_utils import (
    format_date_thai,
    format_number,
    format_quantity,
    safe_filename,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "0.00"),
        (150, "150.00"),
        (5000, "5,000.00"),
        (1234567.891, "1,234,567.89"),
        (Decimal("0.005"), "0.01"),
        (2.675, "2.68"),
    ],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


@pytest.mark.parametrize("value,expected", [(10, "10"), (10.0, "10"), (1.5, "1.5"), (0.25, "0.25")])
def test_format_quantity(value, expected):
    assert format_quantity(value) == expected


def test_format_date_thai():
    assert format_date_thai("2024-01-05") == "5 มกราคม 2567"
    assert format_date_thai("2025-12-31") == "31 ธันวาคม 2568"


def test_format_date_thai_passes_through_non_dates():
    assert format_date_thai("2024-02-30") == "2024-02-30"
    assert format_date_thai("") == ""
    assert format_date_thai(None) == ""


def test_safe_filename():
    assert safe_filename("INV-202406-0005") == "INV-202406-0005"
    assert safe_filename("INV/2024 06") == "INV_2024_06"
    assert safe_filename("   ") == "document"

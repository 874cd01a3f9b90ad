# pacioli/config_labels.py
"""Fixed labels, patterns and constants shared by the document pipeline."""
from __future__ import annotations

import re
from decimal import Decimal

DOCUMENT_TYPES = ("invoice", "quotation", "receipt")
TAX_TYPES = ("withholding", "vat")

# Sentinel for "resolve via the counter"
AUTO_NUMBER = "auto"

# Literal pattern only: calendar validity is not checked
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# {prefix}-{year}{month:02d}-{serial:04d}
DOCUMENT_NUMBER_FORMAT = "{prefix}-{year}{month:02d}-{serial:04d}"
DOCUMENT_NUMBER_PATTERN = re.compile(
    r"^(?P<prefix>.+)-(?P<year>\d{4})(?P<month>\d{2})-(?P<serial>\d{4,})$"
)

DEFAULT_PREFIXES = {
    "invoice": "INV",
    "quotation": "QT",
    "receipt": "REC",
}

COUNTER_STATE_VERSION = 1

# Placeholder tokens in template markup, e.g. {{customer.name}}
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")

CENT = Decimal("0.01")

THAI_MONTHS = (
    "มกราคม",
    "กุมภาพันธ์",
    "มีนาคม",
    "เมษายน",
    "พฤษภาคม",
    "มิถุนายน",
    "กรกฎาคม",
    "สิงหาคม",
    "กันยายน",
    "ตุลาคม",
    "พฤศจิกายน",
    "ธันวาคม",
)
BUDDHIST_ERA_OFFSET = 543

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

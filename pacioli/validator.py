# pacioli/validator.py
"""Structural checks for documents, customers and the freelancer config.

Every entry point takes raw JSON-shaped data and returns a ValidationResult.
Nothing here raises for malformed input; errors accumulate so a single call
reports every defect at once.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, List

from .config_labels import DATE_PATTERN, DOCUMENT_TYPES, TAX_TYPES
from .models import ValidationResult


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float
        return False



def _get(data: Any, key: str) -> Any:
    return data.get(key) if isinstance(data, dict) else None


def _check_date(data: Any, key: str, label: str) -> List[str]:
    value = _get(data, key)
    if not _is_text(value):
        return [f"{label} is required"]
    if not DATE_PATTERN.match(value):
        return [f"{label} must be in YYYY-MM-DD format"]
    return []


def _check_customer(customer: Any) -> List[str]:
    errors: List[str] = []

    if not customer:
        errors.append("Customer information is required")
        return errors

    if not _is_text(_get(customer, "name")):
        errors.append("Customer name is required")
    if not _is_text(_get(customer, "phone")):
        errors.append("Customer phone is required")

    return errors


def _check_items(items: Any) -> List[str]:
    errors: List[str] = []

    if not isinstance(items, list):
        errors.append("Items must be an array")
        return errors
    if len(items) == 0:
        errors.append("At least one item is required")
        return errors

    for index, item in enumerate(items, start=1):
        if not _is_text(_get(item, "description")):
            errors.append(f"Item {index}: Description is required")

        quantity = _get(item, "quantity")
        if not _is_number(quantity) or quantity <= 0:
            errors.append(f"Item {index}: Valid quantity is required")

        if not _is_text(_get(item, "unit")):
            errors.append(f"Item {index}: Unit is required")

        unit_price = _get(item, "unitPrice")
        if not _is_number(unit_price) or unit_price < 0:
            errors.append(f"Item {index}: Valid unit price is required")

    return errors


def _check_base_document(data: Any) -> List[str]:
    errors: List[str] = []

    if not _is_text(_get(data, "documentNumber")):
        errors.append("Document number is required")

    errors.extend(_check_date(data, "issueDate", "Issue date"))

    tax_rate = _get(data, "taxRate")
    if not _is_number(tax_rate) or not (0 <= tax_rate <= 1):
        errors.append("Tax rate must be a number between 0 and 1")

    if _get(data, "taxType") not in TAX_TYPES:
        errors.append('Tax type must be either "withholding" or "vat"')

    if not _is_text(_get(data, "taxLabel")):
        errors.append("Tax label is required")

    errors.extend(_check_customer(_get(data, "customer")))
    errors.extend(_check_items(_get(data, "items")))

    return errors


def _check_payment_terms(data: Any) -> List[str]:
    terms = _get(data, "paymentTerms")
    if terms is not None and not isinstance(terms, list):
        return ["Payment terms must be an array"]
    return []


def validate_customer(customer: Any) -> ValidationResult:
    return ValidationResult.from_errors(_check_customer(customer))


def validate_items(items: Any) -> ValidationResult:
    return ValidationResult.from_errors(_check_items(items))


def validate_invoice(data: Any) -> ValidationResult:
    errors = _check_base_document(data)
    errors.extend(_check_date(data, "dueDate", "Due date"))
    errors.extend(_check_payment_terms(data))
    return ValidationResult.from_errors(errors)


def validate_quotation(data: Any) -> ValidationResult:
    errors = _check_base_document(data)
    errors.extend(_check_date(data, "validUntil", "Valid until date"))
    errors.extend(_check_payment_terms(data))
    return ValidationResult.from_errors(errors)


def validate_receipt(data: Any) -> ValidationResult:
    errors = _check_base_document(data)
    errors.extend(_check_date(data, "paymentDate", "Payment date"))

    if not _is_text(_get(data, "paymentMethod")):
        errors.append("Payment method is required")

    paid_amount = _get(data, "paidAmount")
    if not _is_number(paid_amount) or paid_amount < 0:
        errors.append("Valid paid amount is required")

    errors.extend(_check_payment_terms(data))
    return ValidationResult.from_errors(errors)


def validate_freelancer_config(config: Any) -> ValidationResult:
    errors: List[str] = []

    for key, label in (
        ("name", "Freelancer name"),
        ("email", "Freelancer email"),
        ("phone", "Freelancer phone"),
        ("address", "Freelancer address"),
    ):
        if not _is_text(_get(config, key)):
            errors.append(f"{label} is required")

    bank_info = _get(config, "bankInfo")
    if not bank_info:
        errors.append("Bank information is required")
    else:
        for key, label in (
            ("bankName", "Bank name"),
            ("accountName", "Bank account name"),
            ("accountNumber", "Bank account number"),
        ):
            if not _is_text(_get(bank_info, key)):
                errors.append(f"{label} is required")

    return ValidationResult.from_errors(errors)


_DOCUMENT_VALIDATORS: Dict[str, Callable[[Any], ValidationResult]] = {
    "invoice": validate_invoice,
    "quotation": validate_quotation,
    "receipt": validate_receipt,
}


def validate_document(document_type: str, data: Any) -> ValidationResult:
    validator = _DOCUMENT_VALIDATORS.get(document_type)
    if validator is None:
        return ValidationResult.from_errors(
            [f"Document type must be one of: {', '.join(DOCUMENT_TYPES)}"]
        )
    return validator(data)

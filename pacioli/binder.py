# pacioli/binder.py
"""Fill HTML templates with document data.

Templates contain ``{{token}}`` placeholders from a fixed set. Binding is a
single substitution pass over the template: each token is looked up in a
token -> resolver map, and anything without a value becomes an empty string,
so no placeholder survives in the output. User-supplied text is escaped.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from markupsafe import escape

from .config_labels import DOCUMENT_TYPES, PLACEHOLDER_PATTERN
from .exceptions import TemplateNotFound
from .format_utils import format_date_thai, format_number, format_quantity
from .models import (
    Document,
    DocumentTotals,
    FreelancerConfig,
    InvoiceDocument,
    QuotationDocument,
    ReceiptDocument,
)
from .totals import calculate_totals, line_total

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"

Resolver = Callable[[], str]


def _text(value: object) -> str:
    """Escape a user-supplied value for HTML, braces included."""
    if value is None:
        return ""
    escaped = str(escape(str(value)))
    return escaped.replace("{", "&#123;").replace("}", "&#125;")


def load_template(document_type: str, templates_dir: Optional[Union[str, Path]] = None) -> str:
    """Read ``<type>.html`` from the project templates, else the bundled copy."""
    if document_type not in DOCUMENT_TYPES:
        raise TemplateNotFound(f"No template for document type: {document_type}")

    candidates = []
    if templates_dir is not None:
        candidates.append(Path(templates_dir) / f"{document_type}.html")
    candidates.append(BUNDLED_TEMPLATES_DIR / f"{document_type}.html")

    for path in candidates:
        if path.is_file():
            logger.debug("Using template %s", path)
            return path.read_text(encoding="utf-8")

    raise TemplateNotFound(
        f"Template not found: {candidates[0]}"
    )


def render_item_rows(document: Document) -> str:
    rows = []
    for index, item in enumerate(document.items, start=1):
        rows.append(
            "<tr>"
            f"<td>{index}</td>"
            f"<td>{_text(item.description)}</td>"
            f'<td class="text-center">{format_quantity(item.quantity)} {_text(item.unit)}</td>'
            f'<td class="text-right">{format_number(item.unit_price)}</td>'
            f'<td class="text-right">{format_number(line_total(item))}</td>'
            "</tr>"
        )
    return "\n".join(rows)


def render_payment_terms(document: Document) -> str:
    if not document.payment_terms:
        return ""
    return "".join(f"<li>{_text(term)}</li>" for term in document.payment_terms)


def _variant_resolvers(document: Document) -> Dict[str, Resolver]:
    if isinstance(document, InvoiceDocument):
        return {"dueDate": lambda: format_date_thai(document.due_date)}
    if isinstance(document, QuotationDocument):
        return {"validUntil": lambda: format_date_thai(document.valid_until)}
    if isinstance(document, ReceiptDocument):
        return {
            "paymentDate": lambda: format_date_thai(document.payment_date),
            "paymentMethod": lambda: _text(document.payment_method),
            "referenceNumber": lambda: _text(document.reference_number),
            "paidAmount": lambda: format_number(document.paid_amount),
        }
    raise TypeError(f"Unsupported document: {type(document).__name__}")


def build_resolvers(
    document: Document, config: FreelancerConfig, totals: DocumentTotals
) -> Dict[str, Resolver]:
    bank = config.bank_info
    customer = document.customer

    if document.tax_type == "withholding":
        tax_display = f"({format_number(totals.tax_amount)})"
    else:
        tax_display = format_number(totals.tax_amount)

    resolvers: Dict[str, Resolver] = {
        "freelancer.name": lambda: _text(config.name),
        "freelancer.title": lambda: _text(config.title),
        "freelancer.email": lambda: _text(config.email),
        "freelancer.phone": lambda: _text(config.phone),
        "freelancer.address": lambda: _text(config.address),
        "bank.name": lambda: _text(bank.bank_name),
        "bank.accountName": lambda: _text(bank.account_name),
        "bank.accountNumber": lambda: _text(bank.account_number),
        "bank.branch": lambda: _text(bank.branch),
        "bank.swift": lambda: _text(bank.swift),
        "documentNumber": lambda: _text(document.document_number),
        "issueDate": lambda: format_date_thai(document.issue_date),
        "customer.name": lambda: _text(customer.name),
        "customer.company": lambda: _text(customer.company),
        "customer.phone": lambda: _text(customer.phone),
        "items": lambda: render_item_rows(document),
        "paymentTerms": lambda: render_payment_terms(document),
        "subtotal": lambda: format_number(totals.subtotal),
        "taxLabel": lambda: _text(document.tax_label),
        "taxAmount": lambda: tax_display,
        "total": lambda: format_number(totals.total),
        "notes": lambda: _text(document.notes),
    }
    resolvers.update(_variant_resolvers(document))
    return resolvers


# Every token any document variant can fill; others are unknown
KNOWN_TOKENS = frozenset(
    [
        "freelancer.name", "freelancer.title", "freelancer.email",
        "freelancer.phone", "freelancer.address",
        "bank.name", "bank.accountName", "bank.accountNumber", "bank.branch",
        "bank.swift",
        "documentNumber", "issueDate", "dueDate", "validUntil", "paymentDate",
        "paymentMethod", "referenceNumber", "paidAmount",
        "customer.name", "customer.company", "customer.phone",
        "items", "paymentTerms", "subtotal", "taxLabel", "taxAmount", "total",
        "notes",
    ]
)


def bind_template(
    template: str,
    document: Document,
    config: FreelancerConfig,
    totals: Optional[DocumentTotals] = None,
) -> str:
    """Return ``template`` with every placeholder replaced."""
    if totals is None:
        totals = calculate_totals(document.items, document.tax_rate, document.tax_type)

    resolvers = build_resolvers(document, config, totals)
    cache: Dict[str, str] = {}

    def _replace(match) -> str:
        token = match.group(1)
        if token not in cache:
            resolver = resolvers.get(token)
            if resolver is None:
                if token not in KNOWN_TOKENS:
                    logger.warning("Unknown template token {{%s}} left empty", token)
                cache[token] = ""
            else:
                cache[token] = resolver()
        return cache[token]

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def find_placeholders(markup: str) -> list:
    return PLACEHOLDER_PATTERN.findall(markup)

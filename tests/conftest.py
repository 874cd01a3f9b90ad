"""Shared fixtures for the document pipeline tests."""

from datetime import date
from pathlib import Path

import pytest

from pacioli.counter import DocumentCounter, InMemoryCounterStore
from pacioli.exceptions import RenderError
from pacioli.models import CounterEntry, CounterState
from pacioli.renderer import PdfRenderer

JUNE_2024 = date(2024, 6, 20)


class FakeRenderer(PdfRenderer):
    """Writes a tiny placeholder PDF and remembers the markup it got."""

    def __init__(self, base_url=None):
        self.base_url = base_url
        self.calls = []

    def render(self, markup, output_path, timeout):
        output_path = Path(output_path)
        self.calls.append((markup, output_path, timeout))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"%PDF-1.7\n% fake\n")
        return output_path


class PartialWriteRenderer(PdfRenderer):
    """Leaves half a file behind, then fails."""

    def __init__(self):
        self.calls = 0

    def render(self, markup, output_path, timeout):
        self.calls += 1
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(b"%PDF-1.7\n")
        raise RenderError("browser crashed")


def make_state(last_number=4, year=2024, month=6):
    return CounterState(
        invoice=CounterEntry(last_number=last_number, prefix="INV", year=year, month=month),
        quotation=CounterEntry(last_number=0, prefix="QT", year=year, month=month),
        receipt=CounterEntry(last_number=0, prefix="REC", year=year, month=month),
    )


@pytest.fixture
def freelancer_config():
    return {
        "name": "Ploy Srisuk",
        "title": "UX Designer",
        "email": "ploy@example.com",
        "phone": "+66 81 111 2222",
        "address": "99 Rama IV Road, Bangkok",
        "bankInfo": {
            "bankName": "Kasikornbank",
            "accountName": "Ploy Srisuk",
            "accountNumber": "123-4-56789-0",
            "branch": "Silom",
        },
    }


@pytest.fixture
def customer():
    return {"name": "Somchai Jaidee", "company": "Acme Co., Ltd.", "phone": "02-123-4567"}


@pytest.fixture
def invoice_data(customer):
    return {
        "documentNumber": "INV-001",
        "issueDate": "2024-06-15",
        "dueDate": "2024-06-30",
        "customer": customer,
        "items": [
            {"description": "Design work", "quantity": 10, "unit": "hr", "unitPrice": 500}
        ],
        "taxRate": 0.03,
        "taxType": "withholding",
        "taxLabel": "Withholding tax 3%",
        "paymentTerms": ["Net 15", "Bank transfer only"],
        "notes": "Thank you",
    }


@pytest.fixture
def quotation_data(customer):
    return {
        "documentNumber": "QT-001",
        "issueDate": "2024-06-01",
        "validUntil": "2024-06-30",
        "customer": customer,
        "items": [
            {"description": "App prototype", "quantity": 1, "unit": "project", "unitPrice": 45000}
        ],
        "taxRate": 0.07,
        "taxType": "vat",
        "taxLabel": "VAT 7%",
    }


@pytest.fixture
def receipt_data(customer):
    return {
        "documentNumber": "REC-001",
        "issueDate": "2024-07-02",
        "paymentDate": "2024-07-01",
        "paymentMethod": "Bank transfer",
        "referenceNumber": "TRX-1",
        "paidAmount": 4850,
        "customer": customer,
        "items": [
            {"description": "Design work", "quantity": 10, "unit": "hr", "unitPrice": 500}
        ],
        "taxRate": 0.03,
        "taxType": "withholding",
        "taxLabel": "Withholding tax 3%",
    }


@pytest.fixture
def memory_store():
    return InMemoryCounterStore(make_state())


@pytest.fixture
def counter(memory_store):
    return DocumentCounter(memory_store, today=lambda: JUNE_2024)


@pytest.fixture
def fake_renderer():
    return FakeRenderer()

"""Tests for the HTTP API."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from pacioli.api import app, get_settings
from pacioli.config import Settings
from pacioli.counter import FileCounterStore


@pytest.fixture
def settings(tmp_path):
    return Settings(
        project_dir=tmp_path,
        config_path=tmp_path / "config" / "freelancer.json",
        metadata_path=tmp_path / ".metadata.json",
        templates_dir=tmp_path / "templates",
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def client(settings):
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def _expected_number(prefix):
    today = date.today()
    return f"{prefix}-{today.year}{today.month:02d}-0001"


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert isinstance(res.json()["pdf_renderer_available"], bool)


def test_validate_document(client, invoice_data):
    res = client.post("/validate/invoice", json=invoice_data)
    assert res.status_code == 200
    assert res.json() == {"valid": True, "errors": []}

    invoice_data["items"] = []
    res = client.post("/validate/invoice", json=invoice_data)
    assert res.json() == {"valid": False, "errors": ["At least one item is required"]}


def test_validate_customer_and_freelancer(client, freelancer_config):
    res = client.post("/validate/customer", json={"phone": "02"})
    assert res.json()["errors"] == ["Customer name is required"]

    res = client.post("/validate/freelancer", json=freelancer_config)
    assert res.json()["valid"] is True


def test_validate_unknown_kind(client):
    assert client.post("/validate/memo", json={}).status_code == 404


def test_totals(client):
    res = client.post(
        "/totals",
        json={
            "items": [{"description": "Design", "quantity": 10, "unit": "hr", "unitPrice": 500}],
            "taxRate": 0.03,
            "taxType": "withholding",
        },
    )
    assert res.status_code == 200
    assert res.json() == {"subtotal": "5000.00", "taxAmount": "150.00", "total": "4850.00"}


def test_totals_rejects_bad_input(client):
    res = client.post("/totals", json={"items": [], "taxRate": 2, "taxType": "gst"})
    assert res.status_code == 422
    assert res.json()["detail"] == [
        'Tax type must be either "withholding" or "vat"',
        "Tax rate must be a number between 0 and 1",
        "At least one item is required",
    ]


def test_preview_peeks_without_committing(client, settings, invoice_data, freelancer_config):
    store = FileCounterStore(settings.metadata_path)
    store.initialize(date.today())
    before = settings.metadata_path.read_text(encoding="utf-8")
    invoice_data["documentNumber"] = "auto"

    res = client.post(
        "/preview/invoice", json={"document": invoice_data, "config": freelancer_config}
    )

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/html")
    assert _expected_number("INV") in res.text
    assert "4,850.00" in res.text
    assert settings.metadata_path.read_text(encoding="utf-8") == before


def test_preview_validation_errors(client, invoice_data, freelancer_config):
    del invoice_data["customer"]
    res = client.post(
        "/preview/invoice", json={"document": invoice_data, "config": freelancer_config}
    )
    assert res.status_code == 422
    assert res.json()["detail"] == ["Customer information is required"]


def test_preview_auto_number_without_state(client, invoice_data, freelancer_config):
    invoice_data["documentNumber"] = "auto"
    res = client.post(
        "/preview/invoice", json={"document": invoice_data, "config": freelancer_config}
    )
    assert res.status_code == 409


def test_next_number(client, settings):
    assert client.get("/counter/receipt/next").status_code == 409

    FileCounterStore(settings.metadata_path).initialize(date.today())
    res = client.get("/counter/receipt/next")
    assert res.json() == {"documentType": "receipt", "documentNumber": _expected_number("REC")}

    assert client.get("/counter/memo/next").status_code == 404


def test_preview_numeric_text_and_rejected_fields(client, invoice_data, freelancer_config):
    invoice_data["customer"]["company"] = 12345
    res = client.post(
        "/preview/invoice", json={"document": invoice_data, "config": freelancer_config}
    )
    assert res.status_code == 200
    assert ">12345<" in res.text

    invoice_data["notes"] = {"text": "hi"}
    res = client.post(
        "/preview/invoice", json={"document": invoice_data, "config": freelancer_config}
    )
    assert res.status_code == 422
    assert res.json()["detail"][0].startswith("notes:")

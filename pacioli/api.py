# pacioli/api.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from .binder import bind_template, load_template
from .config import Settings
from .config_labels import AUTO_NUMBER, DOCUMENT_TYPES, TAX_TYPES
from .counter import DocumentCounter, FileCounterStore
from .exceptions import CounterStateError, DocumentValidationError, TemplateNotFound
from .generator import parse_inputs, prepare_document_data
from .models import LineItem, ValidationResult
from .renderer import load_weasyprint
from .totals import calculate_totals
from .validator import (
    validate_customer,
    validate_document,
    validate_freelancer_config,
    validate_items,
)

app = FastAPI(title="Pacioli Document Service")


def get_settings() -> Settings:
    return Settings.from_env()


def _counter(settings: Settings) -> DocumentCounter:
    return DocumentCounter(
        FileCounterStore(settings.metadata_path, lock_timeout=settings.lock_timeout)
    )


def _require_type(document_type: str) -> None:
    if document_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown document type: {document_type}")


# ---------------------------------------------------------
# HEALTH
# ---------------------------------------------------------
@app.get("/health")
def health():
    weasyprint, _ = load_weasyprint()
    return {"status": "ok", "pdf_renderer_available": weasyprint is not None}


# ---------------------------------------------------------
# VALIDATION
# ---------------------------------------------------------
@app.post("/validate/{kind}", response_model=ValidationResult)
def validate(kind: str, payload: Any = Body(None)):
    if kind == "customer":
        return validate_customer(payload)
    if kind == "freelancer":
        return validate_freelancer_config(payload)
    _require_type(kind)
    return validate_document(kind, payload)


# ---------------------------------------------------------
# TOTALS
# ---------------------------------------------------------
class TotalsRequest(BaseModel):
    items: List[Dict[str, Any]]
    taxRate: float
    taxType: str


@app.post("/totals")
def totals(req: TotalsRequest):
    errors: List[str] = []
    if req.taxType not in TAX_TYPES:
        errors.append('Tax type must be either "withholding" or "vat"')
    if not 0 <= req.taxRate <= 1:
        errors.append("Tax rate must be a number between 0 and 1")
    errors.extend(validate_items(req.items).errors)
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    items = [LineItem.model_validate(i) for i in req.items]
    result = calculate_totals(items, req.taxRate, req.taxType)
    return {
        "subtotal": str(result.subtotal),
        "taxAmount": str(result.tax_amount),
        "total": str(result.total),
    }


# ---------------------------------------------------------
# PREVIEW (bound HTML, never touches the counter)
# ---------------------------------------------------------
class PreviewRequest(BaseModel):
    document: Dict[str, Any]
    config: Dict[str, Any]
    customer: Optional[Dict[str, Any]] = None


@app.post("/preview/{document_type}", response_class=HTMLResponse)
def preview(
    document_type: str, req: PreviewRequest, settings: Settings = Depends(get_settings)
):
    _require_type(document_type)
    data = prepare_document_data(req.document, req.customer)

    errors = validate_freelancer_config(req.config).errors
    errors.extend(validate_document(document_type, data).errors)
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    if data["documentNumber"] == AUTO_NUMBER:
        try:
            data = {**data, "documentNumber": _counter(settings).peek_next(document_type)}
        except CounterStateError as e:
            raise HTTPException(status_code=409, detail=str(e))

    try:
        document, config = parse_inputs(document_type, data, req.config)
    except DocumentValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    try:
        template = load_template(document_type, settings.templates_dir)
    except TemplateNotFound as e:
        raise HTTPException(status_code=500, detail=str(e))
    return HTMLResponse(bind_template(template, document, config))


# ---------------------------------------------------------
# COUNTER
# ---------------------------------------------------------
@app.get("/counter/{document_type}/next")
def next_number(document_type: str, settings: Settings = Depends(get_settings)):
    _require_type(document_type)
    try:
        number = _counter(settings).peek_next(document_type)
    except CounterStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"documentType": document_type, "documentNumber": number}

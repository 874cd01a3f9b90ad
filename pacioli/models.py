# pacioli/models.py
from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .config_labels import COUNTER_STATE_VERSION, DOCUMENT_TYPES


def _number_to_text(value: Any) -> Any:
    # Free-text fields take JSON numbers as written, e.g. a numeric reference
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


OptionalText = Annotated[Optional[str], BeforeValidator(_number_to_text)]


class CamelModel(BaseModel):
    """JSON keys are camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineItem(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    description: str
    quantity: float = Field(gt=0)
    unit: str
    unit_price: float = Field(ge=0)

    @property
    def line_total(self) -> Decimal:
        return Decimal(str(self.quantity)) * Decimal(str(self.unit_price))


class Customer(CamelModel):
    name: str
    company: OptionalText = None
    phone: str


class BankInfo(CamelModel):
    bank_name: str
    account_name: str
    account_number: str
    branch: OptionalText = None
    swift: OptionalText = None


class FreelancerConfig(CamelModel):
    name: str
    title: OptionalText = None
    email: str
    phone: str
    address: str
    bank_info: BankInfo


class BaseDocument(CamelModel):
    document_number: str
    issue_date: str  # YYYY-MM-DD
    customer: Customer
    items: List[LineItem] = Field(min_length=1)
    tax_rate: float = Field(ge=0, le=1)
    tax_type: Literal["withholding", "vat"]
    tax_label: str
    notes: OptionalText = None
    payment_terms: Optional[List[Any]] = None


class InvoiceDocument(BaseDocument):
    kind: Literal["invoice"] = "invoice"
    due_date: str


class QuotationDocument(BaseDocument):
    kind: Literal["quotation"] = "quotation"
    valid_until: str


class ReceiptDocument(BaseDocument):
    kind: Literal["receipt"] = "receipt"
    payment_date: str
    payment_method: str
    reference_number: OptionalText = None
    paid_amount: float = Field(ge=0)


Document = Annotated[
    Union[InvoiceDocument, QuotationDocument, ReceiptDocument],
    Field(discriminator="kind"),
]

_DOCUMENT_MODELS = {
    "invoice": InvoiceDocument,
    "quotation": QuotationDocument,
    "receipt": ReceiptDocument,
}


def parse_document(document_type: str, data: Dict[str, Any]) -> Document:
    """Build the typed variant for already-validated document data."""
    try:
        model = _DOCUMENT_MODELS[document_type]
    except KeyError:
        raise ValueError(f"Unknown document type: {document_type}") from None
    return model.model_validate({**data, "kind": document_type})


class DocumentTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str]

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=len(errors) == 0, errors=list(errors))


def describe_model_errors(exc: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into ``path: message`` lines."""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"])
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return messages


class CounterEntry(CamelModel):
    last_number: int = Field(ge=0, strict=True)
    prefix: str = Field(min_length=1)
    year: int = Field(strict=True)
    month: int = Field(ge=1, le=12, strict=True)

    @property
    def period(self) -> tuple[int, int]:
        return (self.year, self.month)


class CounterState(CamelModel):
    version: int = COUNTER_STATE_VERSION
    invoice: CounterEntry
    quotation: CounterEntry
    receipt: CounterEntry

    def entry(self, document_type: str) -> CounterEntry:
        if document_type not in DOCUMENT_TYPES:
            raise ValueError(f"Unknown document type: {document_type}")
        return getattr(self, document_type)

    def with_entry(self, document_type: str, entry: CounterEntry) -> "CounterState":
        return self.model_copy(update={document_type: entry})


class GenerationResult(BaseModel):
    document_type: str
    document_number: str
    output_path: Path
    auto_numbered: bool = False
    committed: bool = False
    totals: DocumentTotals

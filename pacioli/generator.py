# pacioli/generator.py
"""Document generation pipeline.

Stages: validate -> resolve number (only for ``"auto"``) -> totals ->
bind template -> render -> commit counter (only when auto-numbered).

Nothing persistent is touched before rendering succeeds. A render failure
removes whatever the renderer left at the output path and leaves the counter
alone. A commit failure after a successful render is logged and reported in
the result; the PDF is kept and that number may be spent without being
recorded.
"""
from __future__ import annotations

import json
import logging
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .binder import bind_template, load_template
from .config_labels import AUTO_NUMBER, DOCUMENT_TYPES
from .counter import DocumentCounter
from .exceptions import (
    CounterStateError,
    DocumentValidationError,
    InputFileError,
    PacioliError,
)
from .format_utils import safe_filename
from .models import (
    FreelancerConfig,
    GenerationResult,
    describe_model_errors,
    parse_document,
)
from .renderer import PdfRenderer
from .totals import calculate_totals
from .validator import validate_document, validate_freelancer_config

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_json(path: PathLike) -> Any:
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise InputFileError(f"File not found: {p}") from None
    except json.JSONDecodeError as e:
        raise InputFileError(f"Invalid JSON in {p}: {e}") from e
    except OSError as e:
        raise InputFileError(f"Cannot read {p}: {e}") from e


def check_input_files(paths: Dict[str, Optional[PathLike]]) -> None:
    """Fail before any processing if a named input file is missing."""
    missing: List[str] = []
    for label, path in paths.items():
        if path is not None and not Path(path).is_file():
            missing.append(f"{label} file not found: {path}")
    if missing:
        raise InputFileError("; ".join(missing))


def default_output_path(output_dir: PathLike, document_type: str, document_number: str) -> Path:
    return Path(output_dir) / f"{document_type}-{safe_filename(document_number)}.pdf"


def prepare_document_data(data: Any, customer: Any = None) -> Any:
    """Attach a separately supplied customer record to the document data."""
    if customer is None or not isinstance(data, dict):
        return data
    return {**data, "customer": customer}


def parse_inputs(document_type: str, data: Any, config: Any):
    """Build the typed document and config from validated data.

    Anything the models still reject is reported as a DocumentValidationError.
    """
    try:
        document = parse_document(document_type, data)
        freelancer = FreelancerConfig.model_validate(config)
    except ValidationError as e:
        raise DocumentValidationError(describe_model_errors(e), subject=document_type) from e
    return document, freelancer


class DocumentGenerator:
    def __init__(
        self,
        counter: Optional[DocumentCounter],
        renderer: PdfRenderer,
        templates_dir: Optional[PathLike] = None,
        output_dir: PathLike = "output",
        render_timeout: float = 60.0,
    ):
        self.counter = counter
        self.renderer = renderer
        self.templates_dir = templates_dir
        self.output_dir = Path(output_dir)
        self.render_timeout = render_timeout

    def validate(self, document_type: str, data: Any, config: Any) -> None:
        """Raise DocumentValidationError listing every config and document error."""
        errors = validate_freelancer_config(config).errors
        errors.extend(validate_document(document_type, data).errors)
        if errors:
            raise DocumentValidationError(errors, subject=document_type)

    def generate(
        self,
        document_type: str,
        data: Any,
        config: Any,
        customer: Any = None,
        output_path: Optional[PathLike] = None,
    ) -> GenerationResult:
        if document_type not in DOCUMENT_TYPES:
            raise DocumentValidationError(
                [f"Document type must be one of: {', '.join(DOCUMENT_TYPES)}"]
            )

        data = prepare_document_data(data, customer)
        logger.info("Validating %s data", document_type)
        self.validate(document_type, data, config)

        auto_numbered = data["documentNumber"] == AUTO_NUMBER
        if auto_numbered and self.counter is None:
            raise CounterStateError("Auto-numbering requested but no counter is configured")

        # Held from peek to commit so concurrent runs cannot share a number
        guard = self.counter.locked() if auto_numbered else nullcontext()
        with guard:
            if auto_numbered:
                number = self.counter.peek_next(document_type)
                logger.info("Assigned %s number %s", document_type, number)
                data = {**data, "documentNumber": number}

            document, freelancer = parse_inputs(document_type, data, config)
            totals = calculate_totals(document.items, document.tax_rate, document.tax_type)

            template = load_template(document_type, self.templates_dir)
            markup = bind_template(template, document, freelancer, totals)

            target = Path(output_path) if output_path else default_output_path(
                self.output_dir, document_type, document.document_number
            )
            self._render(markup, target)

            committed = False
            if auto_numbered:
                try:
                    self.counter.commit(document_type, document.document_number)
                    committed = True
                except PacioliError:
                    logger.error(
                        "PDF %s was written but number %s could not be recorded",
                        target,
                        document.document_number,
                        exc_info=True,
                    )

        return GenerationResult(
            document_type=document_type,
            document_number=document.document_number,
            output_path=target,
            auto_numbered=auto_numbered,
            committed=committed,
            totals=totals,
        )

    def _render(self, markup: str, target: Path) -> None:
        before = _stat_or_none(target)
        logger.info("Rendering PDF to %s", target)
        try:
            self.renderer.render(markup, target, self.render_timeout)
        except BaseException:
            _discard_partial_output(target, before)
            raise

    def generate_from_files(
        self,
        document_type: str,
        input_path: PathLike,
        config_path: PathLike,
        customer_path: Optional[PathLike] = None,
        output_path: Optional[PathLike] = None,
    ) -> GenerationResult:
        check_input_files(
            {"Input": input_path, "Config": config_path, "Customer": customer_path}
        )
        config = read_json(config_path)
        customer = read_json(customer_path) if customer_path else None
        data = read_json(input_path)
        return self.generate(
            document_type, data, config, customer=customer, output_path=output_path
        )


def _stat_or_none(path: Path):
    try:
        return path.stat()
    except OSError:
        return None


def _discard_partial_output(target: Path, before) -> None:
    after = _stat_or_none(target)
    if after is None:
        return
    if before is None or (after.st_mtime_ns, after.st_size) != (before.st_mtime_ns, before.st_size):
        logger.warning("Removing incomplete output %s", target)
        target.unlink(missing_ok=True)

# pacioli/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import Settings
from .config_labels import DOCUMENT_TYPES
from .counter import DocumentCounter, FileCounterStore
from .exceptions import DocumentValidationError, PacioliError
from .generator import DocumentGenerator, check_input_files, prepare_document_data, read_json
from .renderer import WeasyPrintRenderer
from .scaffold import init_project
from .validator import validate_document

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {}
    if getattr(args, "config", None):
        overrides["config_path"] = Path(args.config)
    if getattr(args, "metadata", None):
        overrides["metadata_path"] = Path(args.metadata)
    if getattr(args, "templates", None):
        overrides["templates_dir"] = Path(args.templates)
    if getattr(args, "timeout", None):
        overrides["render_timeout"] = args.timeout
    return settings.model_copy(update=overrides)


def _print_errors(title: str, errors: List[str]) -> None:
    print(f"Error: {title}", file=sys.stderr)
    for err in errors:
        print(f"  - {err}", file=sys.stderr)


def cmd_generate(args: argparse.Namespace) -> int:
    settings = _settings(args)
    counter = DocumentCounter(
        FileCounterStore(settings.metadata_path, lock_timeout=settings.lock_timeout)
    )
    generator = DocumentGenerator(
        counter=counter,
        renderer=WeasyPrintRenderer(base_url=settings.templates_dir),
        templates_dir=settings.templates_dir,
        output_dir=settings.output_dir,
        render_timeout=settings.render_timeout,
    )

    print(f"Generating {args.type}...")
    result = generator.generate_from_files(
        args.type,
        input_path=args.input,
        config_path=settings.config_path,
        customer_path=args.customer,
        output_path=args.output,
    )

    if result.auto_numbered:
        print(f"Document number: {result.document_number}")
        if not result.committed:
            print(
                f"Warning: {result.document_number} was used but not recorded in "
                f"{settings.metadata_path}",
                file=sys.stderr,
            )
    print(f"Success! PDF saved to: {result.output_path}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    check_input_files({"Input": args.input, "Customer": args.customer})
    data = read_json(args.input)
    customer = read_json(args.customer) if args.customer else None
    result = validate_document(args.type, prepare_document_data(data, customer))

    if not result.valid:
        _print_errors(f"Invalid {args.type} data:", result.errors)
        return 1
    print(f"{args.input}: valid {args.type}")
    return 0


def cmd_next_number(args: argparse.Namespace) -> int:
    settings = _settings(args)
    counter = DocumentCounter(
        FileCounterStore(settings.metadata_path, lock_timeout=settings.lock_timeout)
    )
    print(counter.peek_next(args.type))
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    target = Path(args.dir)
    created = init_project(target, force=args.force)
    for path in created:
        print(f"  Created {path}")
    print(f"\nProject initialized in {target.resolve()}")
    print("Next: cp config/freelancer.example.json config/freelancer.json and edit it.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pacioli", description="Generate invoice, quotation and receipt PDFs from JSON."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_gen = sub.add_parser("generate", help="Generate a PDF document")
    p_gen.add_argument("type", choices=DOCUMENT_TYPES, help="Document type")
    p_gen.add_argument("input", help="Document JSON file")
    p_gen.add_argument("--customer", help="Customer JSON file")
    p_gen.add_argument("--output", help="Output PDF path (default: output/{type}-{number}.pdf)")
    p_gen.add_argument("--config", help="Freelancer config (default: config/freelancer.json)")
    p_gen.add_argument("--templates", help="Template directory (default: templates)")
    p_gen.add_argument("--metadata", help="Counter state file (default: .metadata.json)")
    p_gen.add_argument("--timeout", type=float, help="Render timeout in seconds")
    p_gen.set_defaults(func=cmd_generate)

    p_val = sub.add_parser("validate", help="Validate a document JSON file")
    p_val.add_argument("type", choices=DOCUMENT_TYPES, help="Document type")
    p_val.add_argument("input", help="Document JSON file")
    p_val.add_argument("--customer", help="Customer JSON file")
    p_val.set_defaults(func=cmd_validate)

    p_next = sub.add_parser("next-number", help="Show the next auto-generated number")
    p_next.add_argument("type", choices=DOCUMENT_TYPES, help="Document type")
    p_next.add_argument("--metadata", help="Counter state file (default: .metadata.json)")
    p_next.set_defaults(func=cmd_next_number)

    p_init = sub.add_parser("init", help="Create a new project")
    p_init.add_argument("--dir", default=".", help="Target directory")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing files")
    p_init.set_defaults(func=cmd_init)

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else Settings.from_env().log_level)

    try:
        return args.func(args)
    except DocumentValidationError as e:
        _print_errors(f"Invalid {e.subject} data:", e.errors)
        return 1
    except PacioliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> None:
    sys.exit(run(argv))


if __name__ == "__main__":
    main()

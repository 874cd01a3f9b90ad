# pacioli/exceptions.py
"""Exceptions raised by the document pipeline.

Validation problems are normally returned as data (see ``validator``); the
orchestrator only wraps them in ``DocumentValidationError`` to abort a run.
"""
from __future__ import annotations

from typing import List


class PacioliError(Exception):
    """Base exception for the document generator."""


class DocumentValidationError(PacioliError):
    """One or more validation failures, always fully enumerated."""

    def __init__(self, errors: List[str], subject: str = "document"):
        self.errors = list(errors)
        self.subject = subject
        super().__init__(f"Invalid {subject} data: " + "; ".join(self.errors))


class InputFileError(PacioliError):
    """An input JSON file is missing or unreadable."""


class TemplateNotFound(PacioliError):
    """No template markup exists for the requested document type."""


class CounterStateError(PacioliError):
    """Persisted counter state is missing, corrupt or inconsistent."""


class CounterLockTimeout(CounterStateError):
    """The counter lock could not be acquired in time."""


class RenderError(PacioliError):
    """The PDF renderer failed or timed out."""

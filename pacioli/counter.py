# pacioli/counter.py
"""Auto-numbering state for generated documents.

Numbers look like ``INV-202406-0005``: prefix, issuing period (year and
month) and a four-digit serial that restarts at 1 in every new period.

``peek_next`` never mutates state. ``commit`` records a number only after
the PDF exists. A caller that needs a number to be unique across
concurrent processes holds ``locked()`` for the whole peek/render/commit
sequence; the lock is reentrant so ``peek_next`` and ``commit`` can take it
again inside.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, NamedTuple, Optional

from filelock import FileLock, Timeout
from pydantic import ValidationError

from .config_labels import (
    COUNTER_STATE_VERSION,
    DEFAULT_PREFIXES,
    DOCUMENT_NUMBER_FORMAT,
    DOCUMENT_NUMBER_PATTERN,
    DOCUMENT_TYPES,
)
from .exceptions import CounterLockTimeout, CounterStateError
from .models import CounterEntry, CounterState

logger = logging.getLogger(__name__)


class ParsedNumber(NamedTuple):
    prefix: str
    year: int
    month: int
    serial: int


def format_document_number(prefix: str, year: int, month: int, serial: int) -> str:
    return DOCUMENT_NUMBER_FORMAT.format(
        prefix=prefix, year=year, month=month, serial=serial
    )


def parse_document_number(number: str) -> ParsedNumber:
    m = DOCUMENT_NUMBER_PATTERN.match(number or "")
    if not m:
        raise CounterStateError(f"Not a generated document number: {number!r}")
    month = int(m.group("month"))
    if not 1 <= month <= 12:
        raise CounterStateError(f"Invalid month in document number: {number!r}")
    return ParsedNumber(
        prefix=m.group("prefix"),
        year=int(m.group("year")),
        month=month,
        serial=int(m.group("serial")),
    )


def initial_counter_state(today: date) -> CounterState:
    entries = {
        doc_type: CounterEntry(
            last_number=0,
            prefix=DEFAULT_PREFIXES[doc_type],
            year=today.year,
            month=today.month,
        )
        for doc_type in DOCUMENT_TYPES
    }
    return CounterState(version=COUNTER_STATE_VERSION, **entries)


def state_from_json(raw: object) -> CounterState:
    """Validate decoded JSON into a CounterState, or raise CounterStateError.

    Files written before versioning have no ``version`` key and are read as
    version 1.
    """
    if not isinstance(raw, dict):
        raise CounterStateError("Counter state must be a JSON object")
    version = raw.get("version", COUNTER_STATE_VERSION)
    if version != COUNTER_STATE_VERSION:
        raise CounterStateError(f"Unsupported counter state version: {version!r}")
    missing = [t for t in DOCUMENT_TYPES if t not in raw]
    if missing:
        raise CounterStateError(
            f"Counter state has no entry for: {', '.join(missing)}"
        )
    try:
        return CounterState.model_validate({**raw, "version": version})
    except ValidationError as e:
        raise CounterStateError(f"Corrupt counter state: {e}") from e


class CounterStore:
    """Persistence for CounterState plus the lock guarding it."""

    def load(self) -> CounterState:
        raise NotImplementedError

    def save(self, state: CounterState) -> None:
        raise NotImplementedError

    def locked(self):
        raise NotImplementedError


class InMemoryCounterStore(CounterStore):
    def __init__(self, state: Optional[CounterState] = None):
        self._state = state
        self._lock = threading.RLock()

    def load(self) -> CounterState:
        if self._state is None:
            raise CounterStateError("Counter state has not been initialized")
        return self._state

    def save(self, state: CounterState) -> None:
        self._state = state

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield


class FileCounterStore(CounterStore):
    """JSON counter file guarded by ``<file>.lock``."""

    def __init__(self, path, lock_timeout: float = 10.0):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout
        self._lock = FileLock(str(self.lock_path), timeout=lock_timeout)

    @contextmanager
    def locked(self) -> Iterator[None]:
        try:
            self._lock.acquire()
        except Timeout as e:
            raise CounterLockTimeout(
                f"Could not lock {self.path} within {self.lock_timeout}s"
            ) from e
        try:
            yield
        finally:
            self._lock.release()

    def load(self) -> CounterState:
        if not self.path.exists():
            raise CounterStateError(
                f"Counter state not found: {self.path} (run 'pacioli init')"
            )
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CounterStateError(f"Counter state is not valid JSON: {self.path}: {e}") from e
        except OSError as e:
            raise CounterStateError(f"Cannot read counter state {self.path}: {e}") from e
        return state_from_json(raw)

    def save(self, state: CounterState) -> None:
        payload = json.dumps(state.model_dump(by_alias=True), indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=self.path.name, suffix=".tmp"
            )
        except OSError as e:
            raise CounterStateError(f"Cannot write counter state {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException as e:
            Path(tmp_name).unlink(missing_ok=True)
            if isinstance(e, OSError):
                raise CounterStateError(f"Cannot write counter state {self.path}: {e}") from e
            raise

    def initialize(self, today: date, force: bool = False) -> bool:
        """Write a fresh state file. Returns False if one exists and not force."""
        with self.locked():
            if self.path.exists() and not force:
                return False
            self.save(initial_counter_state(today))
            return True


class DocumentCounter:
    def __init__(self, store: CounterStore, today: Callable[[], date] = date.today):
        self.store = store
        self._today = today

    def locked(self):
        return self.store.locked()

    def _current_period(self) -> tuple[int, int]:
        today = self._today()
        return (today.year, today.month)

    def peek_next(self, document_type: str) -> str:
        """Number the next document of this type would get. No side effects."""
        with self.store.locked():
            state = self.store.load()
        entry = state.entry(document_type)
        year, month = self._current_period()

        if entry.period != (year, month):
            # New numbering period: serial restarts
            serial = 1
        else:
            serial = entry.last_number + 1

        return format_document_number(entry.prefix, year, month, serial)

    def commit(self, document_type: str, issued_number: str) -> CounterEntry:
        """Record that ``issued_number`` was used for a produced document."""
        parsed = parse_document_number(issued_number)

        with self.store.locked():
            state = self.store.load()
            entry = state.entry(document_type)

            if parsed.prefix != entry.prefix:
                raise CounterStateError(
                    f"{issued_number} does not use the {document_type} prefix {entry.prefix!r}"
                )
            if (parsed.year, parsed.month) < entry.period:
                raise CounterStateError(
                    f"{issued_number} belongs to a period before the recorded "
                    f"{entry.year}-{entry.month:02d}"
                )
            if (parsed.year, parsed.month) == entry.period and parsed.serial <= entry.last_number:
                raise CounterStateError(
                    f"{issued_number} is not newer than the last recorded "
                    f"{document_type} number ({entry.last_number})"
                )

            updated = entry.model_copy(
                update={
                    "last_number": parsed.serial,
                    "year": parsed.year,
                    "month": parsed.month,
                }
            )
            self.store.save(state.with_entry(document_type, updated))

        logger.info("Recorded %s number %s", document_type, issued_number)
        return updated

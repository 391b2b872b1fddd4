"""Writing calendar gestures back into the task line they came from.

Each gesture becomes an :class:`Edit` that moves through three states::

    pending ──(write ok)──► committed
       │
       └──(any failure)──► rolled_back

A status toggle is applied to the in-memory event while the edit is still
pending, so the calendar can repaint before any I/O. :func:`reconcile` is the
only place an edit leaves ``pending``; on failure it restores what the
toggle changed. A reschedule changes nothing in memory up front, so rolling
it back only tells the widget to put the dragged event back.

The rewrite itself goes through ``store.process(document, transform)``, which
reads, transforms and persists one document as a unit. Transforms raise an
:class:`EditError` to abort without writing.
"""

import logging
from dataclasses import dataclass
from datetime import date

from .errors import (
    DocumentNotFound,
    DocumentWriteError,
    EditError,
    HeaderNotEditable,
    InvalidDate,
    LineOutOfBounds,
    NoDateMarker,
    StaleLineReference,
    StatusWriteFailed,
)
from .events import HeaderEvent, TaskEvent
from .extractor import DATE_RE, replace_marker_date
from .grammar import STATUS_CLASSES, next_status, set_status_char

logger = logging.getLogger(__name__)

PENDING = 'pending'
COMMITTED = 'committed'
ROLLED_BACK = 'rolled_back'

RESCHEDULE = 'reschedule'
TOGGLE_STATUS = 'toggle_status'


@dataclass
class Edit:
    kind: str
    event: object
    state: str = PENDING
    new_date: str | None = None
    previous_status: str | None = None
    previous_class: str | None = None
    target_status: str | None = None
    written_line: str | None = None
    wrote: bool = False
    error: EditError | None = None

    @property
    def ok(self) -> bool:
        return self.state == COMMITTED

    @property
    def noop(self) -> bool:
        return self.state == COMMITTED and not self.wrote


def reconcile(edit: Edit, error: EditError | None = None) -> Edit:
    """Settle a pending edit: keep it on success, undo its in-memory effects on failure."""
    if edit.state != PENDING:
        return edit

    if error is None:
        edit.state = COMMITTED
        if edit.kind == TOGGLE_STATUS and edit.written_line is not None:
            edit.event.raw_line = edit.written_line
        return edit

    edit.state = ROLLED_BACK
    edit.error = error
    if edit.kind == TOGGLE_STATUS and isinstance(edit.event, TaskEvent):
        edit.event.status = edit.previous_status
        edit.event.status_class = edit.previous_class
    return edit


def normalize_date(value) -> str:
    """Canonical ``YYYY-MM-DD`` for a date or an already formatted string."""
    if isinstance(value, date):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, str) and DATE_RE.fullmatch(value):
        return value
    raise InvalidDate(f"Invalid date: {value!r}. Use YYYY-MM-DD.")


def begin_reschedule(event, new_date) -> Edit:
    edit = Edit(kind=RESCHEDULE, event=event)
    if isinstance(event, HeaderEvent):
        return reconcile(edit, HeaderNotEditable(f"Header event {event.event_id} cannot be moved"))
    try:
        edit.new_date = normalize_date(new_date)
    except InvalidDate as exc:
        return reconcile(edit, exc)
    if edit.new_date == event.date:
        logger.debug(f"Date unchanged for {event.event_id}, skipping file update")
        return reconcile(edit)
    return edit


def begin_toggle(event) -> Edit:
    """Start a status toggle, applying the next status to ``event`` right away."""
    edit = Edit(kind=TOGGLE_STATUS, event=event)
    if isinstance(event, HeaderEvent):
        return reconcile(edit, HeaderNotEditable(f"Header event {event.event_id} has no status"))

    edit.previous_status = event.status
    edit.previous_class = event.status_class
    edit.target_status = next_status(event.status)
    event.status = edit.target_status
    event.status_class = STATUS_CLASSES[edit.target_status]
    logger.debug(f"Optimistic status {edit.previous_status} -> {edit.target_status} for {event.event_id}")
    return edit


def _target_line(lines: list[str], line_index: int, expected: str | None, path: str) -> str:
    if line_index >= len(lines):
        raise LineOutOfBounds(
            f"Line {line_index} out of bounds for {path} ({len(lines)} lines)"
        )
    line = lines[line_index]
    if expected is not None and line != expected:
        raise StaleLineReference(
            f"Line {line_index} of {path} changed since the last scan"
        )
    return line


def rewrite_date(text: str, line_index: int, new_date: str, expected_line: str | None = None,
                 path: str = '') -> str:
    """Return ``text`` with the calendar date marker on ``line_index`` set to ``new_date``."""
    lines = text.split('\n')
    original = _target_line(lines, line_index, expected_line, path)
    updated = replace_marker_date(original, new_date)
    if updated is None:
        raise NoDateMarker(f"No date marker on line {line_index} of {path}")
    lines[line_index] = updated
    return '\n'.join(lines)


def rewrite_status(text: str, line_index: int, status: str, expected_line: str | None = None,
                   path: str = '') -> str:
    """Return ``text`` with the checkbox on ``line_index`` set to ``status``."""
    lines = text.split('\n')
    original = _target_line(lines, line_index, expected_line, path)
    updated = set_status_char(original, status)
    if updated is None:
        raise StatusWriteFailed(f"Checkbox pattern not found on line {line_index} of {path}")
    if updated == original:
        raise StatusWriteFailed(
            f"Line {line_index} of {path} did not change when setting status to {status}"
        )
    lines[line_index] = updated
    return '\n'.join(lines)


def apply_edit(edit: Edit, store) -> Edit:
    """Write a pending edit through ``store`` and reconcile it with the outcome."""
    if edit.state != PENDING:
        return edit

    event = edit.event
    document = store.get_document(event.document_path)
    if document is None:
        return reconcile(edit, DocumentNotFound(f"Could not find file {event.document_path}"))

    def transform(text: str) -> str:
        if edit.kind == RESCHEDULE:
            updated = rewrite_date(text, event.line_index, edit.new_date, event.raw_line, document.path)
        else:
            updated = rewrite_status(text, event.line_index, edit.target_status, event.raw_line, document.path)
        edit.written_line = updated.split('\n')[event.line_index]
        return updated

    try:
        store.process(document, transform)
    except EditError as exc:
        return reconcile(edit, exc)
    except (PermissionError, UnicodeDecodeError, OSError) as exc:
        return reconcile(edit, DocumentWriteError(f"Failed to update {document.path}: {exc}"))

    edit.wrote = True
    logger.debug(f"Rewrote line {event.line_index} of {document.path}: {edit.written_line!r}")
    return reconcile(edit)

"""In-memory calendar state and the gestures the calendar widget reports."""

import logging

from .edits import (
    PENDING,
    RESCHEDULE,
    TOGGLE_STATUS,
    Edit,
    apply_edit,
    begin_reschedule,
    begin_toggle,
    reconcile,
)
from .errors import UnknownEvent
from .events import HeaderEvent, assemble_events, event_to_dict
from .records import ScanResult, parse_task_id, scan_documents
from .settings import CalendarSettings, DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


class CalendarSession:
    """Holds the current event list for one calendar and routes gestures to edits.

    ``store`` is the document store: ``list_documents()``, ``read(document)``,
    ``get_document(path)`` and ``process(document, transform)``. ``notify``
    receives user-facing messages (defaults to the log).
    """

    def __init__(self, store, settings: CalendarSettings = DEFAULT_SETTINGS, notify=None):
        self.store = store
        self.settings = settings
        self.notify = notify or logger.info
        self.events: list = []
        self.last_scan = ScanResult()

    def refresh(self) -> list[dict]:
        """Rescan every document and replace the event list wholesale."""
        scan = scan_documents(self.store)
        self.last_scan = scan
        self.events = assemble_events(scan.records, self.settings)
        logger.debug(f"Refreshed calendar: {len(self.events)} event(s)")
        return self.event_dicts()

    def event_dicts(self) -> list[dict]:
        return [event_to_dict(event) for event in self.events]

    def find_event(self, event_id: str):
        for event in self.events:
            if event.event_id == event_id:
                return event
        return None

    def _lookup(self, event_id: str, kind: str) -> tuple[object, Edit | None]:
        event = self.find_event(event_id)
        if event is not None:
            return event, None
        if parse_task_id(event_id) is None:
            error = UnknownEvent(f"Invalid event ID: {event_id}")
        else:
            error = UnknownEvent(f"No task on the calendar with ID {event_id}")
        return None, reconcile(Edit(kind=kind, event=None), error)

    def reschedule(self, event_id: str, new_date) -> Edit:
        """Move a task to ``new_date``; on success the whole calendar is rebuilt.

        A rolled-back result means the widget must put the dragged event back.
        """
        event, failed = self._lookup(event_id, RESCHEDULE)
        if failed is not None:
            return self._report(failed)

        edit = begin_reschedule(event, new_date)
        apply_edit(edit, self.store)
        if edit.ok and edit.wrote:
            self.refresh()
        return self._report(edit)

    def toggle_status(self, event_id: str, on_pending=None) -> Edit:
        """Cycle a task's status.

        The new status is applied to the event before the document is touched;
        ``on_pending(edit)`` is called at that point. A failed write restores
        the previous status.
        """
        event, failed = self._lookup(event_id, TOGGLE_STATUS)
        if failed is not None:
            return self._report(failed)

        edit = begin_toggle(event)
        if on_pending is not None and edit.state == PENDING:
            on_pending(edit)
        apply_edit(edit, self.store)
        return self._report(edit)

    def _report(self, edit: Edit) -> Edit:
        event = edit.event
        name = event.document_name if event is not None else ''
        if edit.ok:
            if edit.noop:
                logger.debug("Date hasn't changed, skipping file update")
            elif edit.kind == RESCHEDULE:
                self.notify(f"Task date updated in {name}")
            else:
                self.notify(f"Task status set to {edit.target_status} in {name}")
            return edit

        if isinstance(event, HeaderEvent):
            logger.debug(f"Ignored {edit.kind} on header {event.event_id}")
            return edit

        logger.error(f"{edit.kind} failed: {edit.error}")
        if edit.kind == RESCHEDULE:
            self.notify(f"Error updating task in {name or 'calendar'}: {edit.error}")
        else:
            self.notify(f"Error toggling task status: {edit.error}. Reverting change.")
        return edit

"""Calendar events: per-document day headers followed by their tasks.

Every document gets its own block of sort keys (``DOCUMENT_STRIDE`` apart),
so on any given day one document's header and tasks stay together::

    1000  📄 Work Tasks (2)        header
    1001  Ship release ❇️           in progress
    1002  Write changelog ❎        incomplete
    2000  📄 Home (1)              header
    2003  Pay rent ✅              completed
"""

from collections import defaultdict
from dataclasses import dataclass

from .grammar import STATUS_CLASSES, STATUS_EMOJI, STATUS_WEIGHTS
from .records import TaskRecord, make_task_id
from .settings import CalendarSettings, DEFAULT_SETTINGS

DOCUMENT_STRIDE = 1000
HEADER_OFFSET = 0
HEADER_CLASS = 'task-group-header'
HEADER_ICON = '📄'


@dataclass
class HeaderEvent:
    document_path: str
    document_name: str
    date: str
    task_count: int
    sort_origin: int
    sort_order: int

    @property
    def event_id(self) -> str:
        return f"header:{self.document_path}:{self.date}"

    @property
    def title(self) -> str:
        return f"{HEADER_ICON} {self.document_name} ({self.task_count})"


@dataclass
class TaskEvent:
    """A task on the calendar. ``status`` and ``status_class`` change on click."""
    document_path: str
    document_name: str
    line_index: int
    date: str
    description: str
    raw_line: str
    status: str
    status_class: str
    sort_order: int
    show_file_name: bool = True

    @property
    def event_id(self) -> str:
        return make_task_id(self.document_path, self.line_index)

    @property
    def title(self) -> str:
        title = f"{self.description} {STATUS_EMOJI[self.status]}"
        if self.show_file_name:
            title = f"{self.document_name}\n{title}"
        return title


def assemble_events(records: list[TaskRecord], settings: CalendarSettings = DEFAULT_SETTINGS) -> list:
    """Group records by (document, date) and emit headers followed by their tasks.

    The returned list is ordered by date, then document, then sort order; it is
    meant to replace whatever the calendar showed before.
    """
    groups = defaultdict(list)
    names = {}
    for record in records:
        groups[(record.date, record.document_path)].append(record)
        names[record.document_path] = record.document_name

    bases = {
        path: (index + 1) * DOCUMENT_STRIDE
        for index, path in enumerate(sorted(names))
    }
    min_weight = min(STATUS_WEIGHTS.values())

    events = []
    for (day, path), members in sorted(groups.items()):
        base = bases[path]
        events.append(HeaderEvent(
            document_path=path,
            document_name=names[path],
            date=day,
            task_count=len(members),
            sort_origin=base,
            sort_order=base + HEADER_OFFSET,
        ))
        members.sort(key=lambda r: (r.status_weight, r.description, r.line_index))
        for record in members:
            events.append(TaskEvent(
                document_path=record.document_path,
                document_name=record.document_name,
                line_index=record.line_index,
                date=record.date,
                description=record.description,
                raw_line=record.raw_line,
                status=record.status,
                status_class=STATUS_CLASSES[record.status],
                sort_order=base + HEADER_OFFSET + (record.status_weight - min_weight + 1),
                show_file_name=settings.show_file_name,
            ))
    return events


def event_to_dict(event) -> dict:
    """Render an event in the shape the calendar widget consumes."""
    if isinstance(event, HeaderEvent):
        is_header = True
        status_class = HEADER_CLASS
        extended = {
            'documentPath': event.document_path,
            'documentName': event.document_name,
            'taskCount': event.task_count,
            'sortOrigin': event.sort_origin,
        }
    elif isinstance(event, TaskEvent):
        is_header = False
        status_class = event.status_class
        extended = {
            'filePath': event.document_path,
            'documentName': event.document_name,
            'lineNumber': event.line_index,
            'status': event.status,
            'description': event.description,
        }
    else:
        raise TypeError(f"not a calendar event: {event!r}")

    return {
        'id': event.event_id,
        'title': event.title,
        'date': event.date,
        'start': event.date,
        'allDay': True,
        'sortOrder': event.sort_order,
        'statusClass': status_class,
        'className': status_class,
        'isHeader': is_header,
        'editable': not is_header,
        'extendedProps': extended,
    }


def calendar_options(settings: CalendarSettings = DEFAULT_SETTINGS) -> dict:
    """Widget options derived from settings."""
    return {
        'initialView': 'dayGridMonth',
        'views': ['dayGridMonth', 'dayGridWeek'],
        'weekNumbers': True,
        'weekNumberCalculation': 'ISO',
        'firstDay': 0 if settings.start_week_on_sunday else 1,
        'direction': settings.text_direction,
        'editable': True,
        'eventOrder': 'sortOrder,description',
    }

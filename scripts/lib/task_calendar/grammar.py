"""Checklist line grammar and the task status cycle."""

import re

INCOMPLETE = 'incomplete'
IN_PROGRESS = 'inprogress'
COMPLETED = 'completed'

# Click order on the calendar.
STATUS_CYCLE = (INCOMPLETE, IN_PROGRESS, COMPLETED)

STATUS_CHARS = {
    INCOMPLETE: ' ',
    IN_PROGRESS: '/',
    COMPLETED: 'x',
}

STATUS_CLASSES = {
    INCOMPLETE: 'task-incomplete',
    IN_PROGRESS: 'task-inprogress',
    COMPLETED: 'task-completed',
}

STATUS_EMOJI = {
    INCOMPLETE: '❎',
    IN_PROGRESS: '❇️',
    COMPLETED: '✅',
}

# In-progress work floats to the top of a day, finished work sinks.
STATUS_WEIGHTS = {
    IN_PROGRESS: 1,
    INCOMPLETE: 2,
    COMPLETED: 3,
}

# A note may open with a byte order mark, which stays part of the first line.
TASK_LINE_RE = re.compile(r'^\ufeff?\s*- \[(X|x|/|\s)\] (.*)$')
CHECKBOX_RE = re.compile(r'^(\ufeff?\s*- \[)[\sxX/](\].*)$')


def status_from_char(char: str) -> str | None:
    """Map a checkbox character to a status, or None if it is not one we track."""
    if char in ('x', 'X'):
        return COMPLETED
    if char == '/':
        return IN_PROGRESS
    if len(char) == 1 and char.isspace():
        return INCOMPLETE
    return None


def parse_task_line(line: str) -> tuple[str, str] | None:
    """Parse one line as a checklist task.

    Returns (status, remainder) for lines like ``- [/] Write docs 📅 2024-06-01``
    and None for everything else, including checkboxes with other markers
    such as ``- [-]`` or ``- [>]``.
    """
    match = TASK_LINE_RE.match(line)
    if not match:
        return None
    status = status_from_char(match.group(1))
    if status is None:
        return None
    return status, match.group(2)


def next_status(status: str) -> str:
    """Return the status that follows ``status`` in the click cycle."""
    if status not in STATUS_CYCLE:
        raise ValueError(f"unknown task status: {status!r}")
    index = STATUS_CYCLE.index(status)
    return STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)]


def set_status_char(line: str, status: str) -> str | None:
    """Rewrite only the checkbox character of ``line``; None if there is no checkbox."""
    if not CHECKBOX_RE.match(line):
        return None
    return CHECKBOX_RE.sub(lambda m: f"{m.group(1)}{STATUS_CHARS[status]}{m.group(2)}", line, count=1)

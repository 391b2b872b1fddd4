"""Date markers and annotations embedded in task text.

Tasks carry their dates as emoji markers in the Tasks plugin style::

    - [x] Finish report ✅ 2024-06-02 📅 2024-06-05 ⏳ 2024-06-01

The calendar shows each task on one day, picked by :func:`select_date`. The
description shown on the calendar has every marker and recurrence/auxiliary
annotation removed by :func:`clean_description`.

Dates stay ``YYYY-MM-DD`` strings. They are never calendar-validated here so
that whatever the user typed survives a rewrite byte for byte.
"""

import re

from .grammar import COMPLETED, parse_task_line

COMPLETION_ICON = '✅'
DUE_ICON = '📅'
SCHEDULED_ICON = '⏳'
RECURRENCE_ICON = '🔁'

# start, created, reminder, date
AUX_ICONS = ('🛫', '➕', '⏰', '\U0001F5D3')

ICON_CHARS = COMPLETION_ICON + DUE_ICON + SCHEDULED_ICON + RECURRENCE_ICON + ''.join(AUX_ICONS)

DATE_PATTERN = r'[0-9]{4}-[0-9]{2}-[0-9]{2}'
DATE_RE = re.compile(DATE_PATTERN)


def _marker_re(icon: str) -> re.Pattern:
    return re.compile(rf'({re.escape(icon)} )({DATE_PATTERN})')


COMPLETION_RE = _marker_re(COMPLETION_ICON)
DUE_RE = _marker_re(DUE_ICON)
SCHEDULED_RE = _marker_re(SCHEDULED_ICON)

DATE_MARKERS = {
    'completion': COMPLETION_RE,
    'due': DUE_RE,
    'scheduled': SCHEDULED_RE,
}

RECURRENCE_RE = re.compile(rf'{RECURRENCE_ICON}[^{ICON_CHARS}]*')
AUX_RE = re.compile(rf'[{"".join(AUX_ICONS)}][^{ICON_CHARS}]*')
RECURRENCE_PHRASE_RE = re.compile(
    r'\bevery\s+(?:\d+\s+)?(?:day|week|month|year)s?\b',
    re.IGNORECASE,
)
WHITESPACE_RE = re.compile(r'\s+')


def _selected_marker(text: str, status: str) -> tuple[str, re.Match] | None:
    """Return (kind, match) for the marker that dates this task on the calendar."""
    if status == COMPLETED:
        match = COMPLETION_RE.search(text)
        if match:
            return 'completion', match
    for kind, regex in (('due', DUE_RE), ('scheduled', SCHEDULED_RE)):
        match = regex.search(text)
        if match:
            return kind, match
    return None


def select_date(text: str, status: str) -> str | None:
    """Pick the calendar date: completion (done tasks only), then due, then scheduled."""
    selected = _selected_marker(text, status)
    if selected is None:
        return None
    return selected[1].group(2)


def _clean_once(text: str) -> str:
    for regex in DATE_MARKERS.values():
        text = regex.sub('', text)
    text = RECURRENCE_RE.sub('', text)
    text = AUX_RE.sub('', text)
    text = RECURRENCE_PHRASE_RE.sub('', text)
    return WHITESPACE_RE.sub(' ', text).strip()


def clean_description(text: str) -> str:
    """Strip markers and annotations from task text.

    Runs until nothing changes: removing one marker can join whitespace into
    a new one (``📅 📅 2024-06-01 2024-06-02``), and a cleaned description
    must not clean any further.
    """
    cleaned = _clean_once(text)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again


def extract(remainder: str, status: str) -> tuple[str | None, str]:
    """Return (calendar date or None, cleaned description) for a task remainder."""
    return select_date(remainder, status), clean_description(remainder)


def find_date_marker(line: str) -> tuple[str, re.Match] | None:
    """Locate the marker a reschedule should rewrite.

    That is the marker the calendar date came from; when the line would not
    date at all, the first present of due, scheduled, completion.
    """
    parsed = parse_task_line(line)
    if parsed is not None:
        selected = _selected_marker(parsed[1], parsed[0])
        if selected is not None:
            kind, _ = selected
            return kind, DATE_MARKERS[kind].search(line)
    for kind in ('due', 'scheduled', 'completion'):
        match = DATE_MARKERS[kind].search(line)
        if match:
            return kind, match
    return None


def replace_marker_date(line: str, new_date: str) -> str | None:
    """Swap the date of the calendar marker in ``line``; None when there is no marker."""
    found = find_date_marker(line)
    if found is None:
        return None
    _, match = found
    return line[:match.start(2)] + new_date + line[match.end(2):]

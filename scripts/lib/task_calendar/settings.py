"""Calendar settings and the JSON settings blob they persist to."""

import json
import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import SettingsError

DEFAULT_WEEK_TAG_PREFIX = '#week'
TEXT_DIRECTIONS = ('ltr', 'rtl')

# Settings blob key -> CalendarSettings attribute
BLOB_KEYS = {
    'showFileName': 'show_file_name',
    'startWeekOnSunday': 'start_week_on_sunday',
    'weekTagPrefix': 'week_tag_prefix',
    'textDirection': 'text_direction',
}


@dataclass(frozen=True)
class CalendarSettings:
    """Options the scan, the assembler and the calendar widget consume.

    ``week_tag_prefix`` is stored and normalized but not yet used by the
    extractor. ``start_week_on_sunday`` and ``text_direction`` only affect
    the widget options.
    """
    show_file_name: bool = True
    start_week_on_sunday: bool = True
    week_tag_prefix: str = DEFAULT_WEEK_TAG_PREFIX
    text_direction: str = 'ltr'

    def __post_init__(self):
        if self.text_direction not in TEXT_DIRECTIONS:
            raise ValueError(f"text_direction must be one of {TEXT_DIRECTIONS}, got {self.text_direction!r}")
        object.__setattr__(self, 'week_tag_prefix', normalize_week_tag_prefix(self.week_tag_prefix))

    @property
    def enable_rtl(self) -> bool:
        return self.text_direction == 'rtl'

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for key, attr in BLOB_KEYS.items()}


def normalize_week_tag_prefix(value: str) -> str:
    """Trim, ensure a leading ``#``, and fall back to the default for empty input."""
    prefix = (value or '').strip()
    if prefix and not prefix.startswith('#'):
        prefix = '#' + prefix
    if prefix in ('', '#'):
        return DEFAULT_WEEK_TAG_PREFIX
    return prefix


DEFAULT_SETTINGS = CalendarSettings()


def settings_from_dict(data: dict, base: CalendarSettings = DEFAULT_SETTINGS) -> CalendarSettings:
    """Merge a settings blob over ``base``. Unknown keys are ignored."""
    changes = {}
    if 'enableRtl' in data and 'textDirection' not in data:
        changes['text_direction'] = 'rtl' if data['enableRtl'] else 'ltr'
    for key, attr in BLOB_KEYS.items():
        if key in data:
            changes[attr] = data[key]
    return replace(base, **changes)


def load_settings(path: Path) -> CalendarSettings:
    """Load the settings blob at ``path``; defaults when the file does not exist."""
    if not path.exists():
        return DEFAULT_SETTINGS
    try:
        data = json.loads(path.read_text(encoding='utf-8') or '{}')
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Settings file is not valid JSON: {path} ({exc})") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file must hold a JSON object: {path}")
    try:
        return settings_from_dict(data)
    except ValueError as exc:
        raise SettingsError(f"Invalid settings in {path}: {exc}") from exc


def save_settings(path: Path, settings: CalendarSettings) -> None:
    """Write the settings blob atomically via tempfile + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    blob = dict(settings.to_dict(), enableRtl=settings.enable_rtl)
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            json.dump(blob, handle, indent=2)
            handle.write('\n')
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)

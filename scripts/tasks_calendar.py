#!/usr/bin/env python3
"""
Tasks Calendar CLI - dated checklist tasks from an Obsidian vault as calendar events.

Usage:
    tasks_calendar.py events [--json]
    tasks_calendar.py reschedule "Areas/Work Tasks.md:12" 2024-06-03 [--json]
    tasks_calendar.py toggle "Areas/Work Tasks.md:12" [--json]
    tasks_calendar.py watch [--interval 1.0]
    tasks_calendar.py settings show
    tasks_calendar.py settings set showFileName false

Configuration via environment variables:
- TASKS_CALENDAR_VAULT: Vault root (default ~/Obsidian)
- TASKS_CALENDAR_SETTINGS: Settings JSON file (default <vault>/.tasks-calendar.json)
- TASKS_CALENDAR_REFRESH_DELAY: Seconds to wait after the last change before refreshing
"""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path

_SCRIPT_DIR = Path(__file__).parent.resolve()
sys.path.insert(0, str(_SCRIPT_DIR))
if str(_SCRIPT_DIR / "lib") not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR / "lib"))

from task_calendar.errors import SettingsError
from task_calendar.events import calendar_options
from task_calendar.session import CalendarSession
from task_calendar.settings import BLOB_KEYS, load_settings, save_settings, settings_from_dict
from vault_store import VaultStore
from vault_watch import RefreshDebouncer, diff_snapshots

logger = logging.getLogger(__name__)

CALENDAR_SCHEMA_VERSION = "v1"

VAULT_DIR = Path(os.getenv(
    'TASKS_CALENDAR_VAULT',
    Path.home() / "Obsidian"
)).expanduser()
REFRESH_DELAY = float(os.getenv('TASKS_CALENDAR_REFRESH_DELAY', '0.5'))

BOOL_KEYS = {'showFileName', 'startWeekOnSunday'}


def _new_schema(command: str) -> dict:
    return {
        "schema_version": CALENDAR_SCHEMA_VERSION,
        "command": command,
    }


def get_settings_file(vault: Path) -> Path:
    explicit = os.getenv('TASKS_CALENDAR_SETTINGS')
    if explicit:
        return Path(explicit).expanduser()
    return vault / ".tasks-calendar.json"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(f"Expected true/false, got {value!r}")


def _open_session(args, notices: list | None = None) -> CalendarSession:
    settings = load_settings(get_settings_file(args.vault))
    notify = notices.append if notices is not None else print
    session = CalendarSession(VaultStore(args.vault), settings, notify=notify)
    session.refresh()
    return session


def _edit_payload(command: str, event_id: str, edit, session: CalendarSession, notices: list) -> dict:
    payload = _new_schema(command)
    payload.update({
        'id': event_id,
        'state': edit.state,
        'wrote': edit.wrote,
        'error': str(edit.error) if edit.error else None,
        'error_type': type(edit.error).__name__ if edit.error else None,
        'notices': notices,
    })
    if edit.event is not None and not edit.noop:
        payload['status'] = getattr(edit.event, 'status', None)
    if edit.new_date:
        payload['date'] = edit.new_date
    payload['events'] = session.event_dicts()
    return payload


def cmd_events(args) -> int:
    notices = []
    session = _open_session(args, notices)
    scan = session.last_scan
    if args.json:
        payload = _new_schema('events')
        payload.update({
            'options': calendar_options(session.settings),
            'documents_scanned': scan.documents_scanned,
            'events': session.event_dicts(),
            'scan_errors': [{'path': e.path, 'error': str(e.cause)} for e in scan.errors],
        })
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    if not session.events:
        print("No dated tasks found.")
    for event in session.event_dicts():
        indent = "" if event['isHeader'] else "  "
        title = event['title'].replace("\n", " · ")
        print(f"{event['date']}  {indent}{title}  [{event['id']}]")
    for error in scan.errors:
        print(f"⚠️  {error}", file=sys.stderr)
    return 0


def cmd_reschedule(args) -> int:
    notices = []
    session = _open_session(args, notices)
    edit = session.reschedule(args.id, args.date)
    if args.json:
        print(json.dumps(_edit_payload('reschedule', args.id, edit, session, notices), indent=2, ensure_ascii=False))
    else:
        for notice in notices:
            print(notice, file=sys.stdout if edit.ok else sys.stderr)
        if edit.noop:
            print("Date unchanged; nothing to do.")
    return 0 if edit.ok else 1


def cmd_toggle(args) -> int:
    notices = []
    session = _open_session(args, notices)
    edit = session.toggle_status(args.id)
    if args.json:
        print(json.dumps(_edit_payload('toggle', args.id, edit, session, notices), indent=2, ensure_ascii=False))
    else:
        for notice in notices:
            print(notice, file=sys.stdout if edit.ok else sys.stderr)
    return 0 if edit.ok else 1


def cmd_watch(args) -> int:
    session = _open_session(args)
    store = session.store
    debouncer = RefreshDebouncer(delay=args.delay)
    snapshot = store.snapshot()
    print(f"Watching {args.vault} ({len(session.events)} event(s)). Ctrl-C to stop.")
    try:
        while True:
            time.sleep(args.interval)
            current = store.snapshot()
            for path in diff_snapshots(snapshot, current):
                debouncer.notify(path)
            snapshot = current
            if debouncer.ready():
                changed = debouncer.drain()
                logger.info(f"Refreshing due to vault change in: {', '.join(changed)}")
                session.refresh()
                print(f"Refreshed: {len(session.events)} event(s)")
    except KeyboardInterrupt:
        debouncer.cancel()
    return 0


def cmd_settings(args) -> int:
    settings_file = get_settings_file(args.vault)
    settings = load_settings(settings_file)

    if args.settings_command == 'set':
        if args.key not in BLOB_KEYS and args.key != 'enableRtl':
            print(f"❌ Unknown setting: {args.key}", file=sys.stderr)
            return 1
        try:
            value = _parse_bool(args.value) if args.key in BOOL_KEYS | {'enableRtl'} else args.value
            settings = settings_from_dict({args.key: value}, base=settings)
        except ValueError as exc:
            print(f"❌ {exc}", file=sys.stderr)
            return 1
        save_settings(settings_file, settings)

    print(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    parser = argparse.ArgumentParser(description='Tasks Calendar CLI')
    parser.add_argument('--vault', type=Path, default=VAULT_DIR, help='Vault root directory')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    events_parser = subparsers.add_parser('events', help='List calendar events')
    events_parser.add_argument('--json', action='store_true', help='Output as JSON')
    events_parser.set_defaults(func=cmd_events)

    reschedule_parser = subparsers.add_parser('reschedule', help='Move a task to another day')
    reschedule_parser.add_argument('id', help='Task ID (path:line)')
    reschedule_parser.add_argument('date', help='New date (YYYY-MM-DD)')
    reschedule_parser.add_argument('--json', action='store_true', help='Output as JSON')
    reschedule_parser.set_defaults(func=cmd_reschedule)

    toggle_parser = subparsers.add_parser('toggle', help='Cycle a task status')
    toggle_parser.add_argument('id', help='Task ID (path:line)')
    toggle_parser.add_argument('--json', action='store_true', help='Output as JSON')
    toggle_parser.set_defaults(func=cmd_toggle)

    watch_parser = subparsers.add_parser('watch', help='Refresh when vault notes change')
    watch_parser.add_argument('--interval', type=float, default=1.0, help='Polling interval in seconds')
    watch_parser.add_argument('--delay', type=float, default=REFRESH_DELAY, help='Refresh delay in seconds')
    watch_parser.set_defaults(func=cmd_watch)

    settings_parser = subparsers.add_parser('settings', help='Show or change settings')
    settings_sub = settings_parser.add_subparsers(dest='settings_command', required=True)
    settings_sub.add_parser('show', help='Show settings').set_defaults(func=cmd_settings)
    settings_set = settings_sub.add_parser('set', help='Change one setting')
    settings_set.add_argument('key', help=f"One of: {', '.join(list(BLOB_KEYS) + ['enableRtl'])}")
    settings_set.add_argument('value')
    settings_set.set_defaults(func=cmd_settings)

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    args.vault = args.vault.expanduser()
    try:
        return args.func(args)
    except SettingsError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    raise SystemExit(main())

"""End-to-end tests for the tasks_calendar CLI run as a subprocess."""

import json
import os
import subprocess
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "tasks_calendar.py"


def _write_vault(tmp_path):
    vault = tmp_path / "vault"
    (vault / "Areas").mkdir(parents=True)
    (vault / "Areas" / "Work Tasks.md").write_text(
        """# Work Tasks

- [ ] Buy milk 📅 2024-06-01
- [/] Ship release 📅 2024-06-01 🔁 every week
- [x] Finish report ✅ 2024-06-02 📅 2024-06-05
- [ ] Someday
""",
        encoding="utf-8",
    )
    return vault


def _run(tmp_path, vault, *args):
    env = os.environ.copy()
    env["TASKS_CALENDAR_VAULT"] = str(vault)
    env["TASKS_CALENDAR_SETTINGS"] = str(tmp_path / "settings.json")
    env["PYTHONIOENCODING"] = "utf-8"
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=False,
        env=env,
    )


def test_events_json(tmp_path):
    vault = _write_vault(tmp_path)

    proc = _run(tmp_path, vault, "events", "--json")

    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["schema_version"] == "v1"
    assert payload["command"] == "events"
    assert payload["scan_errors"] == []
    assert payload["options"]["firstDay"] == 0
    ids = [event["id"] for event in payload["events"]]
    assert ids == [
        "header:Areas/Work Tasks.md:2024-06-01",
        "Areas/Work Tasks.md:3",
        "Areas/Work Tasks.md:2",
        "header:Areas/Work Tasks.md:2024-06-02",
        "Areas/Work Tasks.md:4",
    ]
    ship = payload["events"][1]
    assert ship["title"] == "Work Tasks\nShip release ❇️"
    assert ship["extendedProps"]["status"] == "inprogress"


def test_toggle_json_writes_line(tmp_path):
    vault = _write_vault(tmp_path)

    proc = _run(tmp_path, vault, "toggle", "Areas/Work Tasks.md:2", "--json")

    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["state"] == "committed"
    assert payload["status"] == "inprogress"
    lines = (vault / "Areas" / "Work Tasks.md").read_text(encoding="utf-8").splitlines()
    assert lines[2] == "- [/] Buy milk 📅 2024-06-01"


def test_reschedule_json(tmp_path):
    vault = _write_vault(tmp_path)

    proc = _run(tmp_path, vault, "reschedule", "Areas/Work Tasks.md:2", "2024-06-07", "--json")

    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["state"] == "committed"
    assert payload["notices"] == ["Task date updated in Work Tasks"]
    assert "header:Areas/Work Tasks.md:2024-06-07" in {e["id"] for e in payload["events"]}


def test_failed_edit_exits_non_zero(tmp_path):
    vault = _write_vault(tmp_path)

    proc = _run(tmp_path, vault, "reschedule", "Areas/Work Tasks.md:99", "2024-06-07", "--json")

    assert proc.returncode == 1
    payload = json.loads(proc.stdout)
    assert payload["state"] == "rolled_back"
    assert payload["error_type"] == "UnknownEvent"


def test_settings_set_and_show(tmp_path):
    vault = _write_vault(tmp_path)

    proc = _run(tmp_path, vault, "settings", "set", "showFileName", "false")
    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout)["showFileName"] is False

    events = json.loads(_run(tmp_path, vault, "events", "--json").stdout)["events"]
    assert events[1]["title"] == "Ship release ❇️"

    bad = _run(tmp_path, vault, "settings", "set", "textDirection", "sideways")
    assert bad.returncode == 1


def test_malformed_settings_reported(tmp_path):
    vault = _write_vault(tmp_path)
    (tmp_path / "settings.json").write_text("{not json", encoding="utf-8")

    proc = _run(tmp_path, vault, "events", "--json")

    assert proc.returncode == 1
    assert "❌" in proc.stderr
    assert "Traceback" not in proc.stderr

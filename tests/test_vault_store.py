"""Tests for the vault document store and refresh debouncing."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts" / "lib"))

from task_calendar.errors import StatusWriteFailed
from vault_store import VaultStore, is_markdown_path
from vault_watch import RefreshDebouncer, diff_snapshots


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Areas").mkdir()
    (tmp_path / "Areas" / "Work Tasks.md").write_text("- [ ] Task 📅 2024-06-01\n", encoding="utf-8")
    (tmp_path / "Inbox.MD").write_text("- [ ] Upper 📅 2024-06-01\n", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    return tmp_path


def test_list_documents(vault):
    docs = VaultStore(vault).list_documents()
    assert [(d.path, d.name) for d in docs] == [
        ("Areas/Work Tasks.md", "Work Tasks"),
        ("Inbox.MD", "Inbox"),
    ]


def test_missing_root_lists_nothing(tmp_path):
    assert VaultStore(tmp_path / "nope").list_documents() == []


def test_get_document(vault):
    store = VaultStore(vault)
    assert store.get_document("Areas/Work Tasks.md").name == "Work Tasks"
    assert store.get_document("Areas/Missing.md") is None
    assert store.get_document("image.png") is None


def test_read_preserves_crlf(vault):
    (vault / "Crlf.md").write_bytes("- [ ] Task\r\n".encode("utf-8"))
    store = VaultStore(vault)
    assert store.read(store.get_document("Crlf.md")) == "- [ ] Task\r\n"


def test_process_writes_transformed_text(vault):
    store = VaultStore(vault)
    doc = store.get_document("Areas/Work Tasks.md")

    result = store.process(doc, lambda text: text.replace("[ ]", "[x]"))

    assert result == "- [x] Task 📅 2024-06-01\n"
    assert (vault / "Areas" / "Work Tasks.md").read_text(encoding="utf-8") == result
    assert sorted(p.name for p in (vault / "Areas").iterdir()) == ["Work Tasks.md"]


def test_process_failure_leaves_document_untouched(vault):
    store = VaultStore(vault)
    doc = store.get_document("Areas/Work Tasks.md")

    def transform(text):
        raise StatusWriteFailed("pattern mismatch")

    with pytest.raises(StatusWriteFailed):
        store.process(doc, transform)

    assert (vault / "Areas" / "Work Tasks.md").read_text(encoding="utf-8") == "- [ ] Task 📅 2024-06-01\n"


def test_snapshot_and_diff(vault):
    store = VaultStore(vault)
    before = store.snapshot()
    assert set(before) == {"Areas/Work Tasks.md", "Inbox.MD"}

    after = dict(before)
    after["Areas/Work Tasks.md"] += 1
    after["New.md"] = 1
    del after["Inbox.MD"]

    assert diff_snapshots(before, after) == ["Areas/Work Tasks.md", "Inbox.MD", "New.md"]


def test_is_markdown_path():
    assert is_markdown_path("notes/a.md")
    assert not is_markdown_path("notes/a.canvas")
    assert not is_markdown_path("")


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestRefreshDebouncer:
    def test_burst_triggers_one_refresh(self):
        clock = FakeClock()
        debouncer = RefreshDebouncer(delay=0.5, clock=clock)

        debouncer.notify("a.md")
        clock.now += 0.3
        debouncer.notify("b.md")
        clock.now += 0.3
        assert debouncer.ready() is False

        clock.now += 0.3
        assert debouncer.ready() is True
        assert debouncer.ready() is False
        assert debouncer.drain() == ["a.md", "b.md"]

    def test_non_markdown_changes_ignored(self):
        debouncer = RefreshDebouncer(delay=0.5, clock=FakeClock())
        assert debouncer.notify("image.png") is False
        assert debouncer.notify("") is False
        assert debouncer.pending is False

    def test_cancel(self):
        clock = FakeClock()
        debouncer = RefreshDebouncer(delay=0.5, clock=clock)
        debouncer.notify("a.md")
        debouncer.cancel()
        clock.now += 1
        assert debouncer.ready() is False
        assert debouncer.drain() == []

#!/usr/bin/env python3
"""
Document store over a vault directory of markdown notes.

Documents are addressed by their vault-relative path ("Areas/Work Tasks.md").
Text is read and written without newline translation so that rewriting one
line leaves every other byte of the note alone.
"""

import os
import tempfile
import threading
from collections import defaultdict
from pathlib import Path

import sys
_SCRIPT_DIR = Path(__file__).parent.resolve()
if str(_SCRIPT_DIR / "lib") not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR / "lib"))

from task_calendar.records import Document

MARKDOWN_SUFFIXES = ('.md',)


def atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def is_markdown_path(path: str | Path) -> bool:
    return str(path).lower().endswith(MARKDOWN_SUFFIXES)


class VaultStore:
    """Enumerate, read and transactionally rewrite the notes under ``root``."""

    def __init__(self, root: Path):
        self.root = Path(root).expanduser()
        self._locks = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _document(self, file_path: Path) -> Document:
        relative = file_path.relative_to(self.root).as_posix()
        return Document(path=relative, name=file_path.stem)

    def _full_path(self, document_path: str) -> Path:
        return self.root / Path(document_path)

    def list_documents(self) -> list[Document]:
        if not self.root.is_dir():
            return []
        files = (
            p for p in self.root.rglob("*")
            if p.is_file() and is_markdown_path(p.name)
        )
        return sorted((self._document(p) for p in files), key=lambda d: d.path)

    def get_document(self, document_path: str) -> Document | None:
        full_path = self._full_path(document_path)
        if not is_markdown_path(full_path.name) or not full_path.is_file():
            return None
        return self._document(full_path)

    def read(self, document: Document) -> str:
        with open(self._full_path(document.path), encoding="utf-8", newline="") as handle:
            return handle.read()

    def process(self, document: Document, transform) -> str:
        """Read, transform and persist one document as a single step.

        If ``transform`` raises, nothing is written. Unchanged text is not
        rewritten.
        """
        with self._locks_guard:
            lock = self._locks[document.path]
        with lock:
            text = self.read(document)
            updated = transform(text)
            if updated != text:
                atomic_write(self._full_path(document.path), updated)
            return updated

    def snapshot(self) -> dict[str, int]:
        """Modification time (ns) for every note, keyed by document path."""
        stamps = {}
        for document in self.list_documents():
            try:
                stamps[document.path] = self._full_path(document.path).stat().st_mtime_ns
            except OSError:
                continue
        return stamps

#!/usr/bin/env python3
"""
Coalesce vault change notifications into calendar refreshes.

Editors and sync tools tend to touch a note several times in quick
succession; every change restarts the delay so one burst triggers one
refresh. Only markdown paths count.
"""

import time

from vault_store import is_markdown_path

REFRESH_DELAY_SECONDS = 0.5


def diff_snapshots(before: dict[str, int], after: dict[str, int]) -> list[str]:
    """Paths created, deleted or modified between two ``VaultStore.snapshot()`` calls."""
    changed = set(before.keys() ^ after.keys())
    changed.update(path for path in before.keys() & after.keys() if before[path] != after[path])
    return sorted(changed)


class RefreshDebouncer:
    def __init__(self, delay: float = REFRESH_DELAY_SECONDS, clock=time.monotonic):
        self.delay = delay
        self.clock = clock
        self.deadline = None
        self.changed_paths: set[str] = set()

    @property
    def pending(self) -> bool:
        return self.deadline is not None

    def notify(self, path: str) -> bool:
        """Record a change to ``path``. Returns False for non-markdown paths."""
        if not path or not is_markdown_path(path):
            return False
        self.changed_paths.add(path)
        self.deadline = self.clock() + self.delay
        return True

    def ready(self) -> bool:
        """True once per burst, when the delay has passed since the last change."""
        if self.deadline is None or self.clock() < self.deadline:
            return False
        self.deadline = None
        return True

    def drain(self) -> list[str]:
        paths = sorted(self.changed_paths)
        self.changed_paths.clear()
        return paths

    def cancel(self) -> None:
        self.deadline = None
        self.changed_paths.clear()

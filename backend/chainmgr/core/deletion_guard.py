"""Deletion Guard — process-wide "a chain is being removed" flag.

Invariants:
    - is_active() is True while at least one teardown holds the guard
    - hold() releases on every exit path, including exceptions
    - Overlapping holders are counted: one finishing teardown never clears another's flag

Design Decisions:
    - Global, not per chain: the reset-group-list task scans every chain, and a
      teardown anywhere can make rows disappear mid-scan. Coarse, but simple.
    - threading.Lock around the counter: safe even if a teardown runs in a worker thread
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class DeletionGuard:
    """Counted flag with scoped acquisition."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._holders = 0

    def is_active(self) -> bool:
        with self._lock:
            return self._holders > 0

    @contextmanager
    def hold(self) -> Iterator[None]:
        with self._lock:
            self._holders += 1
        try:
            yield
        finally:
            with self._lock:
                self._holders -= 1


# Singleton shared by ChainRemover and ChainTracker
deletion_guard = DeletionGuard()

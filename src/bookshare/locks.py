"""Per-book mutual exclusion.

Operations that read a book's lending state and then write it hold the
book's lock for the whole check-and-write sequence. Locks are created on
first use and dropped once no thread holds or waits on them.
"""

import threading
from contextlib import contextmanager
from typing import Generator


class BookLocks:
    """Registry of locks keyed by book id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # book_id -> [lock, users]

    @contextmanager
    def hold(self, book_id: str) -> Generator[None, None, None]:
        """Hold the lock for ``book_id`` for the duration of the block."""
        with self._guard:
            entry = self._locks.get(book_id)
            if entry is None:
                entry = self._locks[book_id] = [threading.Lock(), 0]
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[book_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

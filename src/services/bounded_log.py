"""
Bounded, append-only FIFO log shared by HistoryRecorder and EventLog.
"""

import threading
from collections import deque
from typing import Deque, Generic, List, TypeVar

T = TypeVar("T")


class BoundedLog(Generic[T]):
    """
    Fixed-capacity ring buffer: once full, every append evicts the oldest
    entry. Entries are never reordered.

    Disabling suppresses new appends but keeps what is already stored.
    """

    def __init__(self, capacity: int, enabled: bool = True):
        self._capacity = capacity
        self._entries: Deque[T] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self.enabled = enabled

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, entry: T) -> bool:
        """Store entry; returns False when recording is disabled"""
        if not self.enabled:
            return False
        with self._lock:
            self._entries.append(entry)
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def export(self, newest_first: bool = False) -> List[T]:
        """Copy of the entries, oldest first unless newest_first"""
        with self._lock:
            entries = list(self._entries)
        if newest_first:
            entries.reverse()
        return entries

    def __len__(self) -> int:
        return len(self._entries)

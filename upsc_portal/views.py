from __future__ import annotations

"""
In-memory view counters.

Counts live for the life of the process only.  A single lock serialises
writers so that concurrent viewers opening the same item never lose an
increment.
"""

import threading
from typing import Dict

from loguru import logger


class ViewCounter:
    """Grow-only map from catalog item id to visit count."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def record(self, item_id: str) -> int:
        """Increment the count for ``item_id`` by one and return the new value."""
        with self._lock:
            count = self._counts.get(item_id, 0) + 1
            self._counts[item_id] = count
        logger.debug("View recorded for {} (now {})", item_id, count)
        return count

    def get(self, item_id: str) -> int:
        with self._lock:
            return self._counts.get(item_id, 0)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

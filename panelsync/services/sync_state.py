from __future__ import annotations

import threading
from typing import Any, Iterable

from panelsync.models.records import OnlineUser


class SyncState:
    """Mutable state shared by concurrent sync operations.

    Holds the last node-config tree and the last reported online map. Every
    access goes through the lock; callers never hold it across network I/O.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._config_response: Any = None
        self._has_config = False
        self._last_report_online: dict[int, int] = {}

    def store_config(self, tree: Any) -> None:
        with self._lock:
            self._config_response = tree
            self._has_config = True

    def clear_config(self) -> None:
        with self._lock:
            self._config_response = None
            self._has_config = False

    def config_snapshot(self) -> tuple[bool, Any]:
        with self._lock:
            return self._has_config, self._config_response

    def replace_online(self, batch: Iterable[OnlineUser]) -> dict[int, int]:
        counts: dict[int, int] = {}
        for u in batch:
            counts[u.uid] = counts.get(u.uid, 0) + 1
        with self._lock:
            self._last_report_online = counts
        return dict(counts)

    def last_report_online(self) -> dict[int, int]:
        with self._lock:
            return dict(self._last_report_online)

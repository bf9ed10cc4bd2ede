"""Modification-time bookkeeping that lets pipeline runs skip unchanged work."""

from __future__ import annotations

import threading
from typing import Dict


class StalenessTracker:
    """Records the modification time at which each source path was processed.

    One tracker lives for one batch unit of a process invocation. It is
    created by the caller and handed to the orchestrator.
    """

    def __init__(self) -> None:
        self._records: Dict[str, float] = {}
        self._lock = threading.Lock()

    def is_newer(self, path: str, modified_at: float) -> bool:
        """True unless ``path`` was recorded at ``modified_at`` or later."""

        with self._lock:
            return self._is_newer(path, modified_at)

    def record_modified(self, path: str, modified_at: float) -> None:
        with self._lock:
            self._records[path] = modified_at

    def claim(self, path: str, modified_at: float) -> bool:
        """Atomically check and record ``path``; return whether it was newer."""

        with self._lock:
            if not self._is_newer(path, modified_at):
                return False
            self._records[path] = modified_at
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _is_newer(self, path: str, modified_at: float) -> bool:
        previous = self._records.get(path)
        return previous is None or modified_at > previous

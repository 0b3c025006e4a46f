"""In-memory store of upload processing status, kept for 24 hours."""

from __future__ import annotations

import dataclasses
import threading
import time
from dataclasses import dataclass
from typing import Callable

MAX_AGE_SECONDS = 24 * 60 * 60


@dataclass
class UploadStatus:
    """The processing state of one chunked upload."""

    chunk_id: str
    current_status: int
    file_id: str = ""
    error_message: str = ""
    creation: int = 0


class StatusStore:
    """Thread-safe map of chunk id to upload status.

    Entries older than 24 hours are dropped; with gc_interval set, a
    background thread does so every gc_interval seconds once the first
    status has been stored.
    """

    def __init__(
        self,
        gc_interval: float | None = 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._statuses: dict[str, UploadStatus] = {}
        self._lock = threading.Lock()
        self._gc_interval = gc_interval
        self._gc_started = False
        self._clock = clock

    def get_all(self) -> list[UploadStatus]:
        """Return all stored statuses."""
        with self._lock:
            return list(self._statuses.values())

    def set(self, status: UploadStatus) -> None:
        """Store a status unless a later stage is already recorded."""
        with self._lock:
            old = self._statuses.get(status.chunk_id)
            if old is not None and old.current_status > status.current_status:
                return
            self._statuses[status.chunk_id] = dataclasses.replace(
                status, creation=int(self._clock())
            )
            start_gc = self._gc_interval is not None and not self._gc_started
            self._gc_started = self._gc_started or start_gc
        if start_gc:
            threading.Thread(target=self._collect_periodically, daemon=True).start()

    def delete_expired(self) -> None:
        """Drop statuses created more than 24 hours ago."""
        cutoff = int(self._clock()) - MAX_AGE_SECONDS
        with self._lock:
            self._statuses = {
                key: status
                for key, status in self._statuses.items()
                if status.creation > cutoff
            }

    def _collect_periodically(self) -> None:
        while True:
            self.delete_expired()
            time.sleep(self._gc_interval)
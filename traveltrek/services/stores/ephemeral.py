"""In-process keyed store with expiry and a background sweep."""

import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

import schedule
import structlog

from traveltrek.clock import utcnow

logger = structlog.get_logger()

V = TypeVar("V")


@dataclass
class Entry(Generic[V]):
    value: V
    expires_at: datetime


class EphemeralStore(Generic[V]):
    """
    Short-lived values kept in process memory.

    Expired entries are dropped lazily by `get` and periodically by a sweep
    job that a daemon thread runs off its own `schedule.Scheduler`. Loss on
    restart is acceptable; callers re-request.

    Call `start()` to run the sweep thread (or pass `autostart=True`) and
    `stop()` on shutdown. Swapping this class for a shared cache only needs
    the same get/set/delete/sweep surface.
    """

    def __init__(
        self,
        name: str,
        sweep_interval: float = 300.0,
        clock: Callable[[], datetime] = utcnow,
        autostart: bool = False,
    ):
        self.name = name
        self.sweep_interval = sweep_interval
        self.clock = clock
        self._entries: dict[Hashable, Entry[V]] = {}
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._scheduler = schedule.Scheduler()

        if autostart:
            self.start()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: Hashable) -> Entry[V] | None:
        """Live entry for `key`, deleting it if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at < self.clock():
                del self._entries[key]
                return None
            return entry

    def set(self, key: Hashable, value: V, expires_at: datetime) -> None:
        with self._lock:
            self._entries[key] = Entry(value=value, expires_at=expires_at)

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at < now]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Swept ephemeral store", store=self.name, removed=len(expired))
        return len(expired)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._scheduler.clear()
        self._scheduler.every(self.sweep_interval).seconds.do(self._scheduled_sweep)
        self._thread = threading.Thread(
            target=self._run_sweeper, name=f"{self.name}-sweeper", daemon=True
        )
        self._thread.start()
        logger.info("Started ephemeral store sweeper", store=self.name, interval=self.sweep_interval)

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout=5)
        self._thread = None
        self._scheduler.clear()
        logger.info("Stopped ephemeral store sweeper", store=self.name)

    def _scheduled_sweep(self) -> None:
        try:
            self.sweep()
        except Exception as e:
            logger.error("Ephemeral store sweep failed", store=self.name, error=str(e))

    def _run_sweeper(self) -> None:
        tick = min(self.sweep_interval, 1.0)
        while not self._stop_event.wait(tick):
            self._scheduler.run_pending()

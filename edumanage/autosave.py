"""
Autosave scheduling for long-running sessions (interactive menu).

Two independent triggers call Repository.save():
- a periodic timer (every AUTOSAVE_INTERVAL_SECONDS)
- a debounce timer re-armed by touch(), so a burst of edits results in one
  save DEBOUNCE_SECONDS after the last edit

Both write a whole snapshot, so running them back to back is harmless.
flush() pre-empts a pending debounce with a forced save (session end).

Uses threading.Timer; timers are daemon threads so they never keep the
process alive.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from edumanage.repository import Repository

logger = logging.getLogger(__name__)

AUTOSAVE_INTERVAL_SECONDS = 30.0
DEBOUNCE_SECONDS = 2.0


class AutoSaver:
    def __init__(
        self,
        repository: Repository,
        interval: float = AUTOSAVE_INTERVAL_SECONDS,
        debounce: float = DEBOUNCE_SECONDS,
    ) -> None:
        self.repository = repository
        self.interval = interval
        self.debounce = debounce
        self._running = False
        self._lock = threading.Lock()
        self._periodic: Optional[threading.Timer] = None
        self._pending: Optional[threading.Timer] = None

    def __enter__(self) -> "AutoSaver":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
        self.flush()

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule_periodic()
        logger.info("Auto-save started (%ss intervals)", self.interval)

    def _schedule_periodic(self) -> None:
        # caller holds self._lock
        if not self._running:
            return
        self._periodic = threading.Timer(self.interval, self._run_periodic)
        self._periodic.daemon = True
        self._periodic.start()

    def _run_periodic(self) -> None:
        try:
            self.repository.save()
        finally:
            with self._lock:
                self._schedule_periodic()

    def touch(self) -> None:
        """
        Record an edit: (re)arm the debounce timer.
        """
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = threading.Timer(self.debounce, self._run_debounced)
            self._pending.daemon = True
            self._pending.start()

    def _run_debounced(self) -> None:
        with self._lock:
            # a newer touch() may already have replaced this timer
            if self._pending is threading.current_thread():
                self._pending = None
        self.repository.save()

    def flush(self) -> bool:
        """
        Cancel a pending debounced save and save now, forcing a backup.
        """
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        return self.repository.save(force=True)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._periodic is not None:
                self._periodic.cancel()
                self._periodic = None
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        logger.info("Auto-save stopped")

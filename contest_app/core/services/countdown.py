"""Background driver that ticks a contest session's countdown."""

from __future__ import annotations

import logging
from threading import Event, Lock, Thread

from contest_app.constants.contest_constants import COUNTDOWN_TICK_SECONDS
from contest_app.core.services.contest_session import ContestSession

logger = logging.getLogger(__name__)


class CountdownTimer:
    """Calls ``session.tick()`` once per interval until the session is finalized."""

    def __init__(self, session: ContestSession, interval_seconds: float = COUNTDOWN_TICK_SECONDS) -> None:
        if interval_seconds <= 0:
            raise ValueError("Countdown interval must be positive.")
        self._session = session
        self._interval = interval_seconds
        self._stop_event = Event()
        self._lock = Lock()
        self._thread: Thread | None = None

    def start(self) -> bool:
        """Start ticking. Untimed sessions and repeated calls are ignored."""
        with self._lock:
            if self._thread is not None or not self._session.is_timed():
                return False
            self._thread = Thread(
                target=self._run,
                name=f"countdown-{self._session.id}",
                daemon=True,
            )
            self._thread.start()
            return True

    def stop(self) -> None:
        self._stop_event.set()

    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            if self._session.is_finalized():
                break
            try:
                if self._session.tick():
                    break
            except Exception:
                logger.exception("Countdown expiry failed for session %s", self._session.id)
                break

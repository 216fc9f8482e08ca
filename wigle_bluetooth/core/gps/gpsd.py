# wigle_bluetooth/core/gps/gpsd.py
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from gps import gps, WATCH_ENABLE, WATCH_NEWSTYLE

from wigle_bluetooth.core.gps.location import LocationTracker

logger = logging.getLogger(__name__)


def _open_session(host: str, port: int):
    return gps(host=host, port=str(port), mode=WATCH_ENABLE | WATCH_NEWSTYLE)


class GpsdClient:
    """
    gpsd reader feeding a LocationTracker.
    Threaded, blocking reads on the session, so the asyncio loop never waits on gpsd.
    """

    def __init__(
        self,
        tracker: LocationTracker,
        host: str = "localhost",
        port: int = 2947,
        retry_interval_s: float = 1.0,
        session_factory: Callable[[str, int], Any] = _open_session,
    ):
        self.tracker = tracker
        self.host = host
        self.port = int(port)
        self.retry_interval_s = retry_interval_s
        self._session_factory = session_factory

        self.session = None
        self._thread: Optional[threading.Thread] = None
        self._stop_evt = threading.Event()

    # ------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------

    def connect(self) -> None:
        """Open the WATCH session. Raises on failure, callers treat that as fatal."""
        self.session = self._session_factory(self.host, self.port)
        logger.info("[GPS] Connected to gpsd at %s:%d", self.host, self.port)

    def start(self) -> None:
        if self.session is None:
            raise RuntimeError("gpsd session not connected")
        if self._thread and self._thread.is_alive():
            return

        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._loop, name="gpsd-reader", daemon=True)
        self._thread.start()
        logger.info("[GPS] GPS reader thread started")

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_evt.set()
        if self.session is not None:
            try:
                self.session.close()
            except OSError as e:
                logger.debug("[GPS] close failed: %s", e)
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    # ------------------------------------------------------------
    # Internal loop (threaded)
    # ------------------------------------------------------------

    def _loop(self) -> None:
        while not self._stop_evt.is_set():
            try:
                report = self.session.next()
            except StopIteration:
                # gpsd hung up; keep the last snapshot and wait to be stopped
                if self._stop_evt.wait(self.retry_interval_s):
                    break
                continue
            except Exception as e:
                if self._stop_evt.is_set():
                    break
                logger.debug("[GPS] read error: %s", e)
                self._stop_evt.wait(self.retry_interval_s)
                continue

            if report.get("class") != "TPV":
                continue

            self.tracker.update(report)

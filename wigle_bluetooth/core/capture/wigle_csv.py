# wigle_bluetooth/core/capture/wigle_csv.py
from __future__ import annotations

import csv
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

from wigle_bluetooth.core.bus.models import LOG_COLUMNS, LogRow

logger = logging.getLogger(__name__)

FILE_PREFIX = "wigle-bluetooth-"


def log_file_name(started_at: datetime) -> str:
    stamp = started_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H%M%S.%f%z")
    return f"{FILE_PREFIX}{stamp}.csv"


class WigleCsvSink:
    """
    Append-only WiGLE Bluetooth CSV log, one file per run.
    Every row is flushed and fsynced before append() returns.
    """

    def __init__(self, log_root: str | Path, started_at: Optional[datetime] = None):
        self.log_root = Path(log_root)
        self.started_at = started_at or datetime.now(timezone.utc)
        self.path: Optional[Path] = None
        self.rows_written = 0

        self._fh: Optional[TextIO] = None
        self._writer = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self) -> Path:
        """Create the directory and file, write the header. OSError propagates."""
        self.log_root.mkdir(parents=True, exist_ok=True)
        path = self.log_root / log_file_name(self.started_at)

        fh = open(path, "x", encoding="utf-8", newline="")
        with self._lock:
            self._fh = fh
            self._writer = csv.writer(fh, lineterminator="\n")
            self.path = path
            self._write_locked(LOG_COLUMNS)

        logger.info("[LOG] Writing to %s", path)
        return path

    def append(self, row: LogRow) -> None:
        with self._lock:
            if self._fh is None:
                raise ValueError("log sink is not open")
            self._write_locked(row.as_list())
            self.rows_written += 1

    def close(self) -> None:
        with self._lock:
            if self._fh is None:
                return
            try:
                self._fh.flush()
            finally:
                self._fh.close()
                self._fh = None
                self._writer = None
        logger.info("[LOG] Closed %s (%d rows)", self.path, self.rows_written)

    def _write_locked(self, values) -> None:
        self._writer.writerow(values)
        self._fh.flush()
        os.fsync(self._fh.fileno())

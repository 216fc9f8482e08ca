# wigle_bluetooth/core/gps/location.py
from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Mapping, Optional

from wigle_bluetooth.core.bus.models import LocationFix

logger = logging.getLogger(__name__)


def _num(report: Mapping[str, Any], key: str) -> float:
    value = report.get(key)
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


class LocationTracker:
    """
    Holds the one current LocationFix.

    gpsd reports come in on the GPS thread, the scan correlator reads from
    the asyncio loop. The snapshot is swapped as a whole under the lock, so a
    reader always gets the fields of a single report.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._fix = LocationFix()
        self.updates = 0
        self.last_update: Optional[float] = None

    def update(self, report: Mapping[str, Any]) -> LocationFix:
        """Consume a TPV report. Only the newest report is kept."""
        try:
            mode = int(report.get("mode") or 0)
        except (TypeError, ValueError):
            mode = 0

        fix = LocationFix(
            has_fix=mode >= 2,
            latitude=_num(report, "lat"),
            longitude=_num(report, "lon"),
            altitude=_num(report, "alt"),
            accuracy_m=_num(report, "eph"),
        )

        with self._lock:
            self._fix = fix
            self.updates += 1
            self.last_update = time.time()

        logger.info(
            "[GPS] update: Fix %s Lat %.6f Lon %.6f Alt %.1f m Acc %.1f m",
            fix.has_fix, fix.latitude, fix.longitude, fix.altitude, fix.accuracy_m,
        )
        return fix

    def snapshot(self) -> LocationFix:
        with self._lock:
            return self._fix

    def get_status(self) -> dict:
        fix = self.snapshot()
        age = time.time() - self.last_update if self.last_update else None
        return {
            "fix": fix.has_fix,
            "lat": fix.latitude,
            "lon": fix.longitude,
            "alt_m": fix.altitude,
            "accuracy_m": fix.accuracy_m,
            "updates": self.updates,
            "age_s": age,
        }

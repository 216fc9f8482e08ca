# wigle_bluetooth/core/scan/correlator.py
"""
Joins each BLE discovery event with the current GPS fix, the device's
first-seen time and its BlueZ device class, and writes one WiGLE row.

Discovery callbacks only enqueue, together with the fix and time the
event was observed at. A single worker task owns the first-seen registry
and the CSV sink, so rows are produced strictly in arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Tuple

from wigle_bluetooth.core.bus.event_bus import EventBus
from wigle_bluetooth.core.bus.models import DeviceObservation, LocationFix, LogRow
from wigle_bluetooth.core.classify.capabilities import (
    DEVICE_TYPE_LEGEND,
    device_type_code,
    encode_capabilities,
)
from wigle_bluetooth.core.scan.first_seen import FirstSeenRegistry

logger = logging.getLogger(__name__)

TOPIC_DEVICE_LOGGED = "device_logged"

FIRST_SEEN_FORMAT = "%Y-%m-%d %H:%M:%S"


def canonical_address(address: str) -> str:
    """AA:BB:CC:DD:EE:FF, uppercase, colon separated."""
    return address.strip().upper().replace("-", ":")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanCorrelator:
    def __init__(
        self,
        tracker,
        first_seen: FirstSeenRegistry,
        resolver,
        sink,
        bus: Optional[EventBus] = None,
        legend: Mapping[int, str] = DEVICE_TYPE_LEGEND,
        clock: Callable[[], datetime] = _utcnow,
        max_queue: int = 1024,
    ):
        self.tracker = tracker
        self.first_seen = first_seen
        self.resolver = resolver
        self.sink = sink
        self.bus = bus
        self.legend = legend
        self._clock = clock

        # (observation, fix when observed, time when observed)
        self._q: asyncio.Queue[Tuple[DeviceObservation, LocationFix, datetime]] = asyncio.Queue(maxsize=max_queue)
        self._worker: Optional[asyncio.Task] = None
        self._running = False

        # Counters (status endpoint)
        self.accepted = 0
        self.dropped_no_fix = 0
        self.dropped_queue_full = 0
        self.errors = 0

    # --------------------------------------------------
    # Lifecycle
    # --------------------------------------------------
    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._worker = asyncio.create_task(self._loop(), name="scan_correlator_loop")
        logger.debug("[SCAN] Correlator worker started")

    async def stop(self) -> None:
        """Process whatever is still queued, then stop the worker."""
        if self._worker is None:
            return
        if not self._worker.done():
            await self._q.join()
        self._running = False
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.debug("[SCAN] Correlator worker stopped")

    # --------------------------------------------------
    # Submission (scan callback side)
    # --------------------------------------------------
    def submit_nowait(self, obs: DeviceObservation) -> bool:
        """
        Pair the event with the current fix and time, then queue it.
        Events observed without a fix are dropped here, never at dequeue.
        """
        loc = self.tracker.snapshot()
        if not loc.has_fix:
            self._drop_no_fix(obs)
            return False
        try:
            self._q.put_nowait((obs, loc, self._clock()))
        except asyncio.QueueFull:
            self.dropped_queue_full += 1
            logger.warning("[SCAN] Queue full, dropping %s", obs.address)
            return False
        return True

    def pending(self) -> int:
        return self._q.qsize()

    # --------------------------------------------------
    # Worker loop
    # --------------------------------------------------
    async def _loop(self) -> None:
        while self._running:
            obs, loc, seen_at = await self._q.get()
            try:
                await self.process(obs, loc=loc, now=seen_at)
            except Exception:
                self.errors += 1
                logger.exception("[SCAN] Failed to log %s", obs.address)
            finally:
                self._q.task_done()

    # --------------------------------------------------
    # Correlation
    # --------------------------------------------------
    def _drop_no_fix(self, obs: DeviceObservation) -> None:
        self.dropped_no_fix += 1
        logger.info("[SCAN] No GPS fix, skipping device: %s", obs.address)

    async def process(
        self,
        obs: DeviceObservation,
        loc: Optional[LocationFix] = None,
        now: Optional[datetime] = None,
    ) -> Optional[LogRow]:
        """
        Correlate one event. `loc` and `now` are the fix and time it was
        observed at; when omitted they are read from the tracker and clock.
        """
        if loc is None:
            loc = self.tracker.snapshot()
        if not loc.has_fix:
            self._drop_no_fix(obs)
            return None

        addr = canonical_address(obs.address)
        self.first_seen.touch(addr, now if now is not None else self._clock())
        first_seen = self.first_seen.first_seen_of(addr)

        device_class = await self.resolver.class_of(addr)
        capabilities = encode_capabilities(device_class, self.legend)
        type_code = device_type_code(device_class)

        mfgr_id = str(obs.manufacturer_ids[0]) if obs.manufacturer_ids else ""

        row = LogRow(
            mac=addr,
            ssid=obs.local_name or "",
            auth_mode=capabilities,
            first_seen=first_seen.strftime(FIRST_SEEN_FORMAT),
            channel="0",
            frequency=str(type_code),
            rssi=str(int(obs.rssi)),
            latitude=f"{loc.latitude:f}",
            longitude=f"{loc.longitude:f}",
            altitude_m=str(int(loc.altitude)),
            accuracy_m=f"{loc.accuracy_m:f}",
            rcois="",
            mfgr_id=mfgr_id,
            type="BLE",
        )

        self.sink.append(row)
        self.accepted += 1

        if self.bus is not None:
            self.bus.publish_nowait(TOPIC_DEVICE_LOGGED, row.as_dict())

        logger.info(
            "[SCAN] Found device: %s (%s) Class: 0x%06X Capabilities: %s",
            addr, obs.local_name, device_class, capabilities,
        )
        return row

    def get_status(self) -> dict:
        return {
            "accepted": self.accepted,
            "dropped_no_fix": self.dropped_no_fix,
            "dropped_queue_full": self.dropped_queue_full,
            "errors": self.errors,
            "pending": self.pending(),
            "devices_seen": len(self.first_seen),
        }

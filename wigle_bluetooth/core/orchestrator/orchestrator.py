# wigle_bluetooth/core/orchestrator/orchestrator.py
"""
Runtime owner of the logging pipeline.
Responsibilities:
- Bring up the log file, gpsd, BlueZ lookups and the BLE scan in order
- Treat missing preconditions as fatal before any event is processed
- Tear everything down on shutdown so the log is flushed and closed

Lifecycle: idle -> running -> terminated. There is no pause.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from wigle_bluetooth.core.bluez.device_class import DeviceClassResolver
from wigle_bluetooth.core.bus.event_bus import EventBus
from wigle_bluetooth.core.capture.wigle_csv import WigleCsvSink
from wigle_bluetooth.core.gps.gpsd import GpsdClient
from wigle_bluetooth.core.gps.location import LocationTracker
from wigle_bluetooth.core.scan.ble_scanner import BleScanSource
from wigle_bluetooth.core.scan.correlator import ScanCorrelator
from wigle_bluetooth.core.scan.first_seen import FirstSeenRegistry

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_TERMINATED = "terminated"


class StartupError(RuntimeError):
    """A precondition for logging could not be met. Not retried."""


class Orchestrator:
    def __init__(
        self,
        sink: WigleCsvSink,
        tracker: Optional[LocationTracker] = None,
        gps_client: Optional[GpsdClient] = None,
        resolver: Optional[DeviceClassResolver] = None,
        first_seen: Optional[FirstSeenRegistry] = None,
        bus: Optional[EventBus] = None,
        scanner: Optional[BleScanSource] = None,
        max_queue: int = 1024,
        adapter: str = "hci0",
    ):
        self.sink = sink
        self.tracker = tracker or LocationTracker()
        self.gps = gps_client or GpsdClient(self.tracker)
        self.resolver = resolver or DeviceClassResolver(adapter=adapter)
        self.first_seen = first_seen or FirstSeenRegistry()
        self.bus = bus or EventBus()

        self.correlator = ScanCorrelator(
            tracker=self.tracker,
            first_seen=self.first_seen,
            resolver=self.resolver,
            sink=self.sink,
            bus=self.bus,
            max_queue=max_queue,
        )
        self.scanner = scanner or BleScanSource(self.correlator.submit_nowait, adapter=adapter)

        self.state: str = STATE_IDLE  # idle | running | terminated
        self._shutdown_lock = asyncio.Lock()

    # --------------------------------------------------
    # Lifecycle
    # --------------------------------------------------
    async def start(self) -> None:
        if self.state != STATE_IDLE:
            raise RuntimeError(f"cannot start from state {self.state!r}")

        try:
            await self._start_all()
        except StartupError:
            await self.shutdown()
            raise

        self.state = STATE_RUNNING
        logger.info("[ORCH] Running, logging to %s", self.sink.path)

    async def _start_all(self) -> None:
        try:
            self.sink.open()
        except OSError as e:
            raise StartupError(f"failed to create log file: {e}") from e

        try:
            self.gps.connect()
            self.gps.start()
        except Exception as e:
            raise StartupError(f"failed to connect to gpsd: {e}") from e

        # Device classes are enrichment only
        await self.resolver.connect()

        await self.correlator.start()

        try:
            await self.scanner.start()
        except Exception as e:
            raise StartupError(f"failed to start BLE scan: {e}") from e

    async def run_until(self, stop_event: asyncio.Event) -> None:
        """Start, block until stop_event is set, then shut down cleanly."""
        await self.start()
        try:
            await stop_event.wait()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        async with self._shutdown_lock:
            if self.state == STATE_TERMINATED:
                return
            logger.info("[ORCH] Shutting down")

            await self.scanner.stop()
            await self.correlator.stop()
            self.gps.stop()
            self.resolver.disconnect()
            self.sink.close()

            self.state = STATE_TERMINATED

    # --------------------------------------------------
    # Status
    # --------------------------------------------------
    def get_status(self) -> dict:
        return {
            "state": self.state,
            "log_path": str(self.sink.path) if self.sink.path else None,
            "rows_written": self.sink.rows_written,
            "gps": self.tracker.get_status(),
            "scan": self.correlator.get_status(),
            "bluez_connected": self.resolver.connected,
        }

# wigle_bluetooth/core/scan/ble_scanner.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from wigle_bluetooth.core.bus.models import DeviceObservation
from wigle_bluetooth.core.scan.correlator import canonical_address

logger = logging.getLogger(__name__)


def observation_from_advertisement(device: BLEDevice, adv: AdvertisementData) -> DeviceObservation:
    return DeviceObservation(
        address=canonical_address(device.address),
        local_name=adv.local_name or "",
        rssi=int(adv.rssi),
        manufacturer_ids=tuple(int(k) for k in (adv.manufacturer_data or {}).keys()),
    )


class BleScanSource:
    """
    Passive BLE discovery via bleak. Every advertisement is turned into a
    DeviceObservation and handed to `on_observation` on the event loop.
    """

    def __init__(
        self,
        on_observation: Callable[[DeviceObservation], Any],
        adapter: str = "hci0",
        scanner_factory: Callable[..., Any] = BleakScanner,
    ):
        self.on_observation = on_observation
        self.adapter = adapter
        self._scanner_factory = scanner_factory
        self._scanner: Optional[Any] = None
        self.advertisements = 0

    @property
    def running(self) -> bool:
        return self._scanner is not None

    async def start(self) -> None:
        """Bring up the scanner. Errors are left to the caller (fatal at startup)."""
        if self._scanner is not None:
            return
        scanner = self._scanner_factory(
            detection_callback=self._detection_callback,
            adapter=self.adapter,
        )
        await scanner.start()
        self._scanner = scanner
        logger.info("[SCAN] BLE scan started on %s", self.adapter)

    async def stop(self) -> None:
        scanner, self._scanner = self._scanner, None
        if scanner is None:
            return
        try:
            await scanner.stop()
        except Exception as e:
            logger.warning("[SCAN] Error stopping BLE scan: %s", e)
        logger.info("[SCAN] BLE scan stopped")

    def _detection_callback(self, device: BLEDevice, adv: AdvertisementData) -> None:
        self.advertisements += 1
        self.on_observation(observation_from_advertisement(device, adv))

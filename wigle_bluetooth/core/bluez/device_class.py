# wigle_bluetooth/core/bluez/device_class.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from dbus_fast import BusType, Message, MessageType
from dbus_fast.aio import MessageBus

logger = logging.getLogger(__name__)

BLUEZ_SERVICE = "org.bluez"
DEVICE_INTERFACE = "org.bluez.Device1"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"


def device_object_path(address: str, adapter: str = "hci0") -> str:
    """/org/bluez/hci0/dev_AA_BB_CC_DD_EE_FF"""
    return f"/org/bluez/{adapter}/dev_{address.upper().replace(':', '_')}"


async def _connect_system_bus() -> MessageBus:
    return await MessageBus(bus_type=BusType.SYSTEM).connect()


class DeviceClassResolver:
    """
    Reads org.bluez.Device1.Class for a device from BlueZ over the system bus.

    Best effort: any failure (no bus, error reply, timeout, wrong type)
    resolves to 0 and is never raised to the caller.
    """

    def __init__(
        self,
        adapter: str = "hci0",
        timeout_s: float = 1.0,
        bus_factory: Callable[[], Awaitable[Any]] = _connect_system_bus,
    ):
        self.adapter = adapter
        self.timeout_s = float(timeout_s)
        self._bus_factory = bus_factory
        self._bus: Optional[Any] = None

        self.lookups = 0
        self.failures = 0

    @property
    def connected(self) -> bool:
        return self._bus is not None

    async def connect(self) -> bool:
        try:
            self._bus = await self._bus_factory()
        except Exception as e:
            logger.warning("[BLUEZ] System bus unavailable, device classes will be 0: %s", e)
            self._bus = None
            return False
        logger.info("[BLUEZ] Connected to system bus")
        return True

    def disconnect(self) -> None:
        if self._bus is not None:
            self._bus.disconnect()
            self._bus = None

    async def class_of(self, address: str) -> int:
        self.lookups += 1
        if self._bus is None:
            self.failures += 1
            return 0

        try:
            msg = Message(
                destination=BLUEZ_SERVICE,
                path=device_object_path(address, self.adapter),
                interface=PROPERTIES_INTERFACE,
                member="Get",
                signature="ss",
                body=[DEVICE_INTERFACE, "Class"],
            )
            reply = await asyncio.wait_for(self._bus.call(msg), timeout=self.timeout_s)
        except Exception as e:
            logger.debug("[BLUEZ] Class lookup for %s failed: %s", address, e)
            self.failures += 1
            return 0

        if reply is None or reply.message_type == MessageType.ERROR:
            logger.debug("[BLUEZ] No Class for %s: %s", address, getattr(reply, "error_name", None))
            self.failures += 1
            return 0

        variant = reply.body[0] if reply.body else None
        if getattr(variant, "signature", None) != "u":
            self.failures += 1
            return 0
        return int(variant.value)

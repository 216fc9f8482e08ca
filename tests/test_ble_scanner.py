"""Tests for the bleak scan adapter."""

import asyncio
from types import SimpleNamespace

import pytest

from wigle_bluetooth.core.scan.ble_scanner import BleScanSource, observation_from_advertisement


def advert(local_name=None, rssi=-55, manufacturer_data=None):
    return SimpleNamespace(local_name=local_name, rssi=rssi, manufacturer_data=manufacturer_data or {})


class FakeBleakScanner:
    instances = []

    def __init__(self, detection_callback=None, adapter=None, fail=False):
        self.detection_callback = detection_callback
        self.adapter = adapter
        self.fail = fail
        self.running = False
        FakeBleakScanner.instances.append(self)

    async def start(self):
        if self.fail:
            raise OSError("org.bluez.Error.NotReady")
        self.running = True

    async def stop(self):
        self.running = False


class TestObservationFromAdvertisement:
    """Tests for converting bleak callbacks into observations."""

    def test_fields(self):
        device = SimpleNamespace(address="aa:bb:cc:dd:ee:ff")
        adv = advert("Tile", -71, {76: b"\x02\x15", 6: b"\x01"})
        obs = observation_from_advertisement(device, adv)

        assert obs.address == "AA:BB:CC:DD:EE:FF"
        assert obs.local_name == "Tile"
        assert obs.rssi == -71
        assert obs.manufacturer_ids == (76, 6)

    def test_missing_name_and_data(self):
        obs = observation_from_advertisement(SimpleNamespace(address="AA:BB:CC:DD:EE:FF"), advert())
        assert obs.local_name == ""
        assert obs.manufacturer_ids == ()


class TestBleScanSource:
    """Tests for scanner lifecycle."""

    def test_detections_forwarded(self):
        seen = []

        async def go():
            source = BleScanSource(seen.append, adapter="hci1", scanner_factory=FakeBleakScanner)
            await source.start()
            scanner = FakeBleakScanner.instances[-1]
            assert scanner.adapter == "hci1"
            assert scanner.running

            scanner.detection_callback(SimpleNamespace(address="11:22:33:44:55:66"), advert("Watch"))
            await source.stop()
            assert not scanner.running
            assert not source.running
            return source

        source = asyncio.run(go())
        assert [o.address for o in seen] == ["11:22:33:44:55:66"]
        assert source.advertisements == 1

    def test_start_failure_propagates(self):
        def factory(**kwargs):
            return FakeBleakScanner(fail=True, **kwargs)

        async def go():
            source = BleScanSource(lambda obs: None, scanner_factory=factory)
            with pytest.raises(OSError):
                await source.start()
            assert not source.running

        asyncio.run(go())

    def test_stop_when_not_started(self):
        asyncio.run(BleScanSource(lambda obs: None, scanner_factory=FakeBleakScanner).stop())

"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from wigle_bluetooth.core.capture.wigle_csv import WigleCsvSink
from wigle_bluetooth.core.gps.location import LocationTracker
from wigle_bluetooth.core.scan.first_seen import FirstSeenRegistry


START = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start=START):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class FakeResolver:
    """Stands in for BlueZ: address -> class code, 0 when unknown."""

    def __init__(self, classes=None):
        self.classes = dict(classes or {})
        self.calls = []
        self.connected = False

    async def connect(self):
        self.connected = True
        return True

    def disconnect(self):
        self.connected = False

    async def class_of(self, address):
        self.calls.append(address)
        return self.classes.get(address, 0)


class FakeGps:
    def __init__(self, fail_connect=False):
        self.fail_connect = fail_connect
        self.started = False
        self.stopped = False

    def connect(self):
        if self.fail_connect:
            raise ConnectionRefusedError("gpsd not running")

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True


class FakeScanner:
    def __init__(self, fail_start=False):
        self.fail_start = fail_start
        self.started = False
        self.stopped = False

    async def start(self):
        if self.fail_start:
            raise OSError("No Bluetooth adapters found.")
        self.started = True

    async def stop(self):
        self.stopped = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker():
    return LocationTracker()


@pytest.fixture
def fixed_tracker(tracker):
    """Tracker holding a 3D fix at 37.0, -122.0."""
    tracker.update({"class": "TPV", "mode": 3, "lat": 37.0, "lon": -122.0, "alt": 10.0, "eph": 5.0})
    return tracker


@pytest.fixture
def first_seen():
    return FirstSeenRegistry()


@pytest.fixture
def sink(tmp_path):
    s = WigleCsvSink(tmp_path / "loot" / "wigle-bluetooth", started_at=START)
    s.open()
    yield s
    s.close()

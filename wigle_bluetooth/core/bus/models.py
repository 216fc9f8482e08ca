# wigle_bluetooth/core/bus/models.py
from __future__ import annotations
from dataclasses import dataclass, astuple
from typing import Tuple


# WiGLE Bluetooth CSV header. Downstream tools match on this line byte for byte.
LOG_COLUMNS: Tuple[str, ...] = (
    "MAC", "SSID", "AuthMode", "FirstSeen", "Channel",
    "Frequency", "RSSI", "CurrentLatitude", "CurrentLongitude",
    "AltitudeMeters", "AccuracyMeters", "RCOIs", "MfgrId", "Type",
)


@dataclass(frozen=True)
class LocationFix:
    has_fix: bool = False
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0
    accuracy_m: float = 0.0


@dataclass(frozen=True)
class DeviceObservation:
    address: str
    local_name: str = ""
    rssi: int = 0
    manufacturer_ids: Tuple[int, ...] = ()  # advertisement order


@dataclass(frozen=True)
class LogRow:
    mac: str
    ssid: str
    auth_mode: str
    first_seen: str
    channel: str
    frequency: str
    rssi: str
    latitude: str
    longitude: str
    altitude_m: str
    accuracy_m: str
    rcois: str
    mfgr_id: str
    type: str

    def as_list(self) -> list[str]:
        return list(astuple(self))

    def as_dict(self) -> dict[str, str]:
        return dict(zip(LOG_COLUMNS, astuple(self)))

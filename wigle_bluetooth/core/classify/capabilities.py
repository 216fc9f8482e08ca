# wigle_bluetooth/core/classify/capabilities.py
"""
Bluetooth Class of Device -> WiGLE capabilities string.

Only the major+minor bits (2-12) of the CoD are used, the same value
Android's BluetoothClass.getDeviceClass() returns. Names mirror the WiGLE
Android app's DEVICE_TYPE_LEGEND.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

DEVICE_CLASS_MASK = 0x1FFC

LE_SUFFIX = " [LE]"
FALLBACK_NAME = "Misc"

DEVICE_TYPE_LEGEND: Mapping[int, str] = MappingProxyType({
    # Misc
    0x0000: "Misc",
    # Computer
    0x0100: "Computer",
    0x0104: "Desktop",
    0x0108: "Server",
    0x010C: "Laptop",
    0x0110: "PDA",
    0x0114: "Palm",
    0x0118: "Wearable Computer",
    # Phone
    0x0200: "Phone",
    0x0204: "Cellphone",
    0x0208: "Cordless Phone",
    0x020C: "Smartphone",
    0x0210: "Modem/GW",
    0x0214: "ISDN",
    # Audio/Video
    0x0400: "A/V",
    0x0404: "Headset",
    0x0408: "Handsfree",
    0x0410: "Mic",
    0x0414: "Speaker",
    0x0418: "Headphones",
    0x041C: "Portable Audio",
    0x0420: "Car Audio",
    0x0428: "HiFi",
    0x0430: "Monitor",
    0x0434: "Settop",
    0x0438: "Camera",
    0x043C: "VCR",
    0x0440: "Videoconf",
    0x0448: "AV Toy",
    0x044C: "Display/Speaker",
    # Legend lists 0x0456, which has bit 1 set and never survives the mask.
    # Keyed by its masked form, so 0x0454 reads "Camcorder" rather than "Misc".
    0x0454: "Camcorder",
    # Peripheral
    0x0500: "Keyboard !p",
    0x0540: "Keyboard",
    0x0580: "Pointer",
    0x05C0: "Keyboard+p",
    # Imaging (0x0600) is not in the WiGLE legend
    # Wearable
    0x0700: "Wearable",
    0x0704: "Watch",
    0x0708: "Jacket",
    0x070C: "Pager",
    0x0710: "Helmet",
    0x0714: "Glasses",
    # Toy
    0x0800: "Toy",
    0x0804: "Robot",
    0x0808: "Vehicle",
    0x080C: "Doll",
    0x0814: "Game",
    0x0820: "Controller",
    # Health
    0x0900: "Health",
    0x0904: "Blood Pressure",
    0x0908: "Thermometer",
    0x090C: "Scale",
    0x0910: "Glucose",
    0x0914: "PulseOxy",
    0x0918: "Pulse",
    0x091C: "Health Display",
    # Major.UNCATEGORIZED
    0x1F00: "Uncategorized",
})


def device_type_code(class_code: int) -> int:
    """Major+minor device class bits of a raw CoD value."""
    return int(class_code) & DEVICE_CLASS_MASK


def encode_capabilities(class_code: int, legend: Mapping[int, str] = DEVICE_TYPE_LEGEND) -> str:
    """
    WiGLE AuthMode/capabilities string for a BLE device, e.g. "Smartphone [LE]".
    Defined for every integer input; anything not in the legend is "Misc".
    """
    name = legend.get(device_type_code(class_code), FALLBACK_NAME)
    return name + LE_SUFFIX

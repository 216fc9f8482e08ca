# wigle_bluetooth/core/capture/combine.py
"""
Merge a BLE log with a WiGLE Wi-Fi log into one uploadable file.

BLE logs: line 1 is the column header, data from line 2.
Wi-Fi logs may carry a "WigleWifi-x.y,..." pre-header before their column
header; it is kept at the top of the combined file when present.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from wigle_bluetooth.core.bus.models import LOG_COLUMNS

logger = logging.getLogger(__name__)

PRE_HEADER_PREFIX = "WigleWifi-"
COMBINED_PREFIX = "wigle-combined_"


class CombineError(Exception):
    pass


def latest_csv(directory: str | Path) -> Optional[Path]:
    d = Path(directory)
    if not d.is_dir():
        return None
    files = [
        p for p in d.glob("*.csv")
        if p.is_file() and not p.name.startswith(COMBINED_PREFIX)
    ]
    if not files:
        return None
    return max(files, key=lambda p: p.stat().st_mtime)


def _split_log(path: Path) -> Tuple[Optional[List[str]], Optional[List[str]], List[List[str]]]:
    """(pre-header, header, data rows) of a WiGLE CSV."""
    with open(path, "r", encoding="utf-8", newline="") as fh:
        rows = [r for r in csv.reader(fh) if r]

    pre_header = None
    if rows and rows[0][0].startswith(PRE_HEADER_PREFIX):
        pre_header = rows.pop(0)
    header = rows.pop(0) if rows else None
    return pre_header, header, rows


def combine_logs(
    bluetooth_csv: str | Path,
    wifi_csv: str | Path,
    out_dir: str | Path,
    now: Optional[datetime] = None,
) -> Path:
    bluetooth_csv, wifi_csv = Path(bluetooth_csv), Path(wifi_csv)
    for p in (bluetooth_csv, wifi_csv):
        if not p.is_file():
            raise CombineError(f"no such log: {p}")

    bt_pre, bt_header, bt_rows = _split_log(bluetooth_csv)
    wifi_pre, _wifi_header, wifi_rows = _split_log(wifi_csv)

    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{COMBINED_PREFIX}{stamp}.csv"

    with open(out_path, "w", encoding="utf-8", newline="") as out:
        writer = csv.writer(out, lineterminator="\n")
        pre = wifi_pre or bt_pre
        if pre:
            writer.writerow(pre)
        writer.writerow(bt_header or LOG_COLUMNS)
        writer.writerows(bt_rows)
        writer.writerows(wifi_rows)

    logger.info(
        "[LOG] Combined %d BLE rows and %d Wi-Fi rows into %s",
        len(bt_rows), len(wifi_rows), out_path,
    )
    return out_path


def combine_latest(bluetooth_root: str | Path, wifi_root: str | Path) -> Path:
    bt = latest_csv(bluetooth_root)
    if bt is None:
        raise CombineError(f"No Bluetooth CSV file found in {bluetooth_root}.")
    wifi = latest_csv(wifi_root)
    if wifi is None:
        raise CombineError(f"No Wi-Fi CSV file found in {wifi_root}.")
    return combine_logs(bt, wifi, wifi_root)

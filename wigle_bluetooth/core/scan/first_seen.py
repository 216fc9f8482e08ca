# wigle_bluetooth/core/scan/first_seen.py
from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict


class FirstSeenRegistry:
    """
    address -> first time it was observed this session.
    Entries are write-once and never pruned.
    """

    def __init__(self):
        self._seen: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def touch(self, address: str, now: datetime) -> None:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        stamp = now.astimezone(timezone.utc).replace(microsecond=0)
        with self._lock:
            self._seen.setdefault(address, stamp)

    def first_seen_of(self, address: str) -> datetime:
        with self._lock:
            return self._seen[address]

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

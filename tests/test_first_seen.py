"""Tests for FirstSeenRegistry."""

from datetime import datetime, timedelta, timezone

import pytest

from wigle_bluetooth.core.scan.first_seen import FirstSeenRegistry


T0 = datetime(2026, 10, 18, 12, 0, 0, 750000, tzinfo=timezone.utc)


class TestFirstSeenRegistry:
    """Tests for touch() / first_seen_of()."""

    def test_first_touch_records(self):
        reg = FirstSeenRegistry()
        reg.touch("AA:BB:CC:DD:EE:FF", T0)
        assert reg.first_seen_of("AA:BB:CC:DD:EE:FF") == T0.replace(microsecond=0)

    def test_later_touches_are_no_ops(self):
        reg = FirstSeenRegistry()
        for i in range(10):
            reg.touch("AA:BB:CC:DD:EE:FF", T0 + timedelta(seconds=i * 5))
            assert reg.first_seen_of("AA:BB:CC:DD:EE:FF") == T0.replace(microsecond=0)

    def test_earlier_time_does_not_overwrite(self):
        reg = FirstSeenRegistry()
        reg.touch("AA:BB:CC:DD:EE:FF", T0)
        reg.touch("AA:BB:CC:DD:EE:FF", T0 - timedelta(hours=1))
        assert reg.first_seen_of("AA:BB:CC:DD:EE:FF") == T0.replace(microsecond=0)

    def test_keys_independent(self):
        reg = FirstSeenRegistry()
        reg.touch("AA:BB:CC:DD:EE:FF", T0)
        reg.touch("11:22:33:44:55:66", T0 + timedelta(seconds=30))
        assert reg.first_seen_of("11:22:33:44:55:66") == (T0 + timedelta(seconds=30)).replace(microsecond=0)
        assert len(reg) == 2
        assert "AA:BB:CC:DD:EE:FF" in reg

    def test_naive_time_treated_as_utc(self):
        reg = FirstSeenRegistry()
        reg.touch("AA:BB:CC:DD:EE:FF", datetime(2026, 1, 1, 8, 30, 15))
        assert reg.first_seen_of("AA:BB:CC:DD:EE:FF") == datetime(2026, 1, 1, 8, 30, 15, tzinfo=timezone.utc)

    def test_unknown_address(self):
        reg = FirstSeenRegistry()
        with pytest.raises(KeyError):
            reg.first_seen_of("AA:BB:CC:DD:EE:FF")

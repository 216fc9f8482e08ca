"""Tests for the settings module."""

import importlib

import pytest

import wigle_bluetooth.settings as settings_module


@pytest.fixture
def reload_settings(monkeypatch):
    def _reload():
        return importlib.reload(settings_module).settings

    yield _reload
    for name in ("WIGLE_BT_GPSD_PORT", "WIGLE_BT_LOG_ROOT", "WIGLE_BT_API_ENABLED", "WIGLE_BT_DBUS_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)
    importlib.reload(settings_module)


class TestSettingsEnvVars:
    """Tests for environment variable configuration."""

    def test_default_values(self, reload_settings, monkeypatch):
        for name in ("WIGLE_BT_GPSD_PORT", "WIGLE_BT_LOG_ROOT", "WIGLE_BT_API_ENABLED"):
            monkeypatch.delenv(name, raising=False)
        s = reload_settings()

        assert s.LOG_ROOT == "/root/loot/wigle-bluetooth"
        assert s.GPSD_HOST == "localhost"
        assert s.GPSD_PORT == 2947
        assert s.ADAPTER == "hci0"
        assert s.API_ENABLED is False

    def test_env_override(self, reload_settings, monkeypatch):
        monkeypatch.setenv("WIGLE_BT_GPSD_PORT", "2948")
        monkeypatch.setenv("WIGLE_BT_LOG_ROOT", "/tmp/bt")
        monkeypatch.setenv("WIGLE_BT_API_ENABLED", "true")
        s = reload_settings()

        assert s.GPSD_PORT == 2948
        assert s.LOG_ROOT == "/tmp/bt"
        assert s.API_ENABLED is True

    def test_invalid_env_values(self, reload_settings, monkeypatch):
        """Invalid numbers fall back to defaults."""
        monkeypatch.setenv("WIGLE_BT_GPSD_PORT", "invalid")
        monkeypatch.setenv("WIGLE_BT_DBUS_TIMEOUT_S", "soon")
        s = reload_settings()

        assert s.GPSD_PORT == 2947
        assert s.DBUS_TIMEOUT_S == 1.0

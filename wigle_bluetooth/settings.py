from pydantic import BaseModel
import os


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    APP_NAME: str = "wigle-bluetooth"

    # Log output
    LOG_ROOT: str = os.getenv("WIGLE_BT_LOG_ROOT", "/root/loot/wigle-bluetooth")
    WIFI_LOG_ROOT: str = os.getenv("WIGLE_BT_WIFI_LOG_ROOT", "/root/loot/wigle")
    LOG_LEVEL: str = os.getenv("WIGLE_BT_LOG_LEVEL", "INFO").upper()

    # gpsd
    GPSD_HOST: str = os.getenv("WIGLE_BT_GPSD_HOST", "localhost")
    GPSD_PORT: int = _env_int("WIGLE_BT_GPSD_PORT", 2947)

    # BlueZ
    ADAPTER: str = os.getenv("WIGLE_BT_ADAPTER", "hci0")
    DBUS_TIMEOUT_S: float = _env_float("WIGLE_BT_DBUS_TIMEOUT_S", 1.0)

    # Pending discovery events waiting for the correlator
    QUEUE_MAXSIZE: int = _env_int("WIGLE_BT_QUEUE_MAXSIZE", 1024)

    # Status API (off unless asked for)
    API_ENABLED: bool = _env_bool("WIGLE_BT_API_ENABLED", False)
    HOST: str = os.getenv("WIGLE_BT_HOST", "127.0.0.1")
    PORT: int = _env_int("WIGLE_BT_PORT", 8080)

settings = Settings()

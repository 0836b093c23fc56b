import os
import logging


def _csv(name: str, default: str):
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class BaseConfig:
    LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO"))

    # Chart retention, in seconds
    WINDOW_LENGTH = float(os.getenv("STATLINE_WINDOW_LENGTH", "3600"))
    CLEANUP_INTERVAL = float(os.getenv("STATLINE_CLEANUP_INTERVAL", "300"))

    # Battery devices in priority order; the first present one is charted
    MAIN_BATTERY = _csv("STATLINE_MAIN_BATTERY", "BAT0,BAT1")

    # Backend settings sent once at startup
    STATS_MODULES = _csv("STATLINE_MODULES", "cpu,dropbox,io,memory,net,power,system,temperature,topCPU,topMemory")
    NET_IGNORE_DEVICES = _csv("STATLINE_NET_IGNORE", "lo,wg0,tun0")
    NET_IGNORE_NO_IP = os.getenv("STATLINE_NET_IGNORE_NO_IP", "true").lower() == "true"
    TOP_PROCESS_COUNT = 5
    POLL_FREQUENCY = {"dropbox": 2000, "io": 5000, "memory": 5000, "net": 5000, "temperature": 5000}
    DEFAULT_POLL_FREQUENCY = int(os.getenv("STATLINE_POLL_FREQUENCY", "1000"))
    PUSH_INTERVAL = float(os.getenv("STATLINE_PUSH_INTERVAL", "1"))
    WIDGET_GEOMETRY = {"left": -10, "top": 40, "width": 240, "height": 1000}

    # Run the backend, janitor and consumer threads (never while testing)
    WORKERS_ENABLED = os.getenv("STATLINE_WORKERS_ENABLED", "true").lower() == "true"

    API_KEY = os.getenv("STATLINE_API_KEY")


class DevConfig(BaseConfig):
    DEBUG = True


class TestConfig(BaseConfig):
    TESTING = True
    DEBUG = False
    WORKERS_ENABLED = False


class ProdConfig(BaseConfig):
    DEBUG = False

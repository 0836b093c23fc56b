"""Link to the stats-producing backend.

The dashboard talks to the backend through a `BackendChannel`: at startup it
sends, once, the list of modules to enable, the backend settings and the
widget placement. `LocalStatsBackend` is an in-process implementation that
samples the host with psutil and pushes snapshots on its own schedule.
"""
import abc
import logging
import socket
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

import psutil

logger = logging.getLogger(__name__)

STATS_REGISTER = "statsRegister"
STATS_SETTINGS = "statsSettings"
SET_POSITION = "setPosition"


class BackendChannel(abc.ABC):
    @abc.abstractmethod
    def send(self, channel: str, payload: Any) -> None:
        """Deliver one named request to the backend."""


def build_settings(config: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "topProcessCount": config.get("TOP_PROCESS_COUNT", 5),
        "net": {
            "ignoreNoIP": bool(config.get("NET_IGNORE_NO_IP", True)),
            "ignoreDevice": list(config.get("NET_IGNORE_DEVICES", [])),
        },
        "pollFrequency": dict(config.get("POLL_FREQUENCY", {})),
    }


def send_startup_requests(channel: BackendChannel, config: Mapping[str, Any]) -> None:
    requests = [
        (STATS_REGISTER, list(config.get("STATS_MODULES", []))),
        (STATS_SETTINGS, build_settings(config)),
        (SET_POSITION, dict(config.get("WIDGET_GEOMETRY", {}))),
    ]
    for name, payload in requests:
        logger.info("Sending %s request", name)
        channel.send(name, payload)


class LocalStatsBackend(BackendChannel):
    """psutil-backed stats producer with per-module poll frequencies.

    Each registered module is polled when its own period elapses; its
    `lastUpdate` stamp (epoch ms) only changes when it was actually
    re-sampled. A full snapshot is published every `push_interval` seconds.
    """

    def __init__(
        self,
        publish: Callable[[Dict[str, Any]], None],
        push_interval: float = 1.0,
        default_poll: int = 1000,
        clock: Callable[[], float] = time.time,
    ):
        self.publish = publish
        self.push_interval = float(push_interval)
        self.default_poll = int(default_poll)
        self.clock = clock
        self.modules: List[str] = []
        self.settings: Dict[str, Any] = {"net": {}, "pollFrequency": {}}
        self.geometry: Optional[Dict[str, Any]] = None

        self._data: Dict[str, Any] = {}
        self._last_update: Dict[str, int] = {}
        self._next_poll: Dict[str, float] = {}
        self._previous: Dict[str, Any] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.collectors: Dict[str, Callable[[float], Any]] = {
            "cpu": self._collect_cpu,
            "memory": self._collect_memory,
            "io": self._collect_io,
            "net": self._collect_net,
            "power": self._collect_power,
        }

    def send(self, channel: str, payload: Any) -> None:
        handlers = {
            STATS_REGISTER: self.register,
            STATS_SETTINGS: self.configure,
            SET_POSITION: self.set_position,
        }
        handler = handlers.get(channel)
        if handler is None:
            logger.warning("Unknown backend request %r ignored", channel)
            return
        handler(payload)

    def register(self, modules) -> None:
        unsupported = [m for m in modules if m not in self.collectors]
        if unsupported:
            logger.warning("Modules not provided by local backend: %s", ", ".join(unsupported))
        self.modules = [m for m in modules if m in self.collectors]
        self._next_poll = {}

    def configure(self, settings: Mapping[str, Any]) -> None:
        self.settings = {
            "net": dict(settings.get("net") or {}),
            "pollFrequency": dict(settings.get("pollFrequency") or {}),
            "topProcessCount": settings.get("topProcessCount"),
        }

    def set_position(self, geometry: Mapping[str, Any]) -> None:
        self.geometry = dict(geometry)

    def poll_frequency(self, module: str) -> int:
        return int(self.settings["pollFrequency"].get(module, self.default_poll))

    def poll(self, now: float) -> None:
        for module in self.modules:
            if now < self._next_poll.get(module, 0):
                continue
            self._next_poll[module] = now + self.poll_frequency(module) / 1000.0
            try:
                data = self.collectors[module](now)
            except Exception:
                logger.exception("Error when sampling module %s", module)
                continue
            if data is None:
                continue
            self._data[module] = data
            self._last_update[module] = int(now * 1000)

    def build_snapshot(self) -> Dict[str, Any]:
        snapshot: Dict[str, Any] = dict(self._data)
        snapshot["lastUpdate"] = dict(self._last_update)
        return snapshot

    def tick(self) -> Dict[str, Any]:
        self.poll(self.clock())
        snapshot = self.build_snapshot()
        self.publish(snapshot)
        return snapshot

    def _rate(self, key: str, now: float, value: float) -> Optional[float]:
        previous = self._previous.get(key)
        self._previous[key] = (now, value)
        if previous is None:
            return None
        elapsed = now - previous[0]
        if elapsed <= 0:
            return None
        return max(0.0, (value - previous[1]) / elapsed)

    def _collect_cpu(self, now: float):
        return {"usage": psutil.cpu_percent(interval=None)}

    def _collect_memory(self, now: float):
        vm = psutil.virtual_memory()
        return {"used": vm.used, "total": vm.total}

    def _collect_io(self, now: float):
        counters = psutil.disk_io_counters()
        if counters is None:
            return None
        rate = self._rate("io", now, counters.read_bytes)
        if rate is None:
            return None
        return {"totalRead": rate}

    def _collect_net(self, now: float):
        net_settings = self.settings["net"]
        ignored = set(net_settings.get("ignoreDevice") or [])
        ignore_no_ip = net_settings.get("ignoreNoIP", False)
        addresses = psutil.net_if_addrs() if ignore_no_ip else {}

        adapters = []
        for name, counters in sorted(psutil.net_io_counters(pernic=True).items()):
            if name in ignored:
                continue
            if ignore_no_ip and not any(
                a.family in (socket.AF_INET, socket.AF_INET6) for a in addresses.get(name, [])
            ):
                continue
            adapter: Dict[str, Any] = {"interface": name}
            down = self._rate(f"net.{name}.down", now, counters.bytes_recv)
            up = self._rate(f"net.{name}.up", now, counters.bytes_sent)
            if down is not None:
                adapter["downSpeed"] = down
            if up is not None:
                adapter["upSpeed"] = up
            adapters.append(adapter)
        return adapters

    def _collect_power(self, now: float):
        battery = psutil.sensors_battery() if hasattr(psutil, "sensors_battery") else None
        if battery is None:
            return []
        return [{
            "device": "BAT0",
            "percent": battery.percent,
            "charging": bool(battery.power_plugged),
            "remainingTime": battery.secsleft if battery.secsleft and battery.secsleft > 0 else None,
        }]

    def _run(self) -> None:
        while not self._stop.wait(self.push_interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Error when pushing stats snapshot")

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True, name="statline-backend")
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

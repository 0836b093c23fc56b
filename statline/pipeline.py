"""Turn backend snapshots into chart samples.

A snapshot looks like::

    {
        "cpu": {"usage": 12.5},
        "memory": {"used": 123, "total": 456},
        "io": {"totalRead": 789},
        "net": [{"interface": "eth0", "downSpeed": 10, "upSpeed": 2}],
        "power": [{"device": "BAT0", "percent": 80}],
        "lastUpdate": {"cpu": 1700000000000, "memory": ...},
    }

Every module is optional and handled independently. Missing or malformed
values are skipped without raising; that is the normal state for modules the
backend has not sampled yet.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .charts import ADAPTER_CHART
from .state import DashboardState
from .timeseries import is_finite_number

logger = logging.getLogger(__name__)


def _stamp(snapshot: Mapping[str, Any], module: str):
    last_update = snapshot.get("lastUpdate")
    if not isinstance(last_update, Mapping):
        return None
    return last_update.get(module)


def _field(snapshot: Mapping[str, Any], module: str, name: str):
    data = snapshot.get(module)
    if not isinstance(data, Mapping):
        return None
    return data.get(name)


def _adapters(value) -> List[Dict[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [a for a in value if isinstance(a, Mapping)]


def select_battery(devices: Iterable[Mapping[str, Any]], candidates: Sequence[str]) -> Optional[Mapping[str, Any]]:
    """Pick the device matching the earliest candidate name, whatever the device order."""
    by_name = {}
    for dev in devices:
        if isinstance(dev, Mapping) and isinstance(dev.get("device"), str):
            by_name.setdefault(dev["device"], dev)
    for name in candidates:
        if name in by_name:
            return by_name[name]
    return None


def compute_net_total(adapters: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    total = {"downSpeed": 0.0, "upSpeed": 0.0}
    for adapter in adapters:
        for key in ("downSpeed", "upSpeed"):
            value = adapter.get(key)
            if is_finite_number(value):
                total[key] += value
    return total


def _ingest_power(state: DashboardState, snapshot, now: float) -> None:
    devices = snapshot.get("power")
    if not isinstance(devices, (list, tuple)):
        return
    if not state.gate.accept("power", _stamp(snapshot, "power")):
        return
    state.battery = select_battery(devices, state.battery_candidates)
    if state.battery:
        state.registry.get("battery").track(0).append(now, state.battery.get("percent"))


def _ingest_scalar(state: DashboardState, snapshot, now: float, module: str, name: str, chart: str) -> bool:
    value = _field(snapshot, module, name)
    if not is_finite_number(value):
        return False
    if not state.gate.accept(module, _stamp(snapshot, module)):
        return False
    state.registry.get(chart).track(0).append(now, value)
    return True


def _ingest_net(state: DashboardState, snapshot, now: float) -> None:
    if "net" not in snapshot:
        return
    # Even when deduped below, this is the backend's current adapter set
    state.adapters = _adapters(snapshot.get("net"))
    if not state.gate.accept("net", _stamp(snapshot, "net")):
        return
    for adapter in state.adapters:
        key = adapter.get("interface")
        if not isinstance(key, str) or not key:
            continue
        if key not in state.registry:
            logger.info("Discovered network adapter %s", key)
        entry = state.registry.get_or_create(key, ADAPTER_CHART)
        if len(entry.tracks) < 2:
            # Interface named like a fixed chart (e.g. "io")
            logger.debug("Skipping adapter %s: key taken by a fixed chart", key)
            continue
        entry.track(0).append(now, adapter.get("downSpeed"))
        entry.track(1).append(now, adapter.get("upSpeed"))


def ingest(state: DashboardState, snapshot: Mapping[str, Any], now: float) -> None:
    """Apply one snapshot to `state` as of wall-clock time `now`."""
    if not isinstance(snapshot, Mapping):
        logger.debug("Ignoring non-mapping snapshot: %r", type(snapshot))
        return
    state.stats = dict(snapshot)

    _ingest_power(state, snapshot, now)
    _ingest_scalar(state, snapshot, now, "io", "totalRead", "io")
    if _ingest_scalar(state, snapshot, now, "memory", "used", "memory"):
        total = _field(snapshot, "memory", "total")
        if is_finite_number(total) and total > 0:
            state.registry.get("memory").options.y_max = total
    _ingest_net(state, snapshot, now)
    _ingest_scalar(state, snapshot, now, "cpu", "usage", "cpu")

    state.net_total = compute_net_total(state.adapters)
    state.advance_window(now)

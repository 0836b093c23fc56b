"""Dashboard state shared by the ingestion pipeline, the janitor and readers."""
import threading
from typing import Any, Dict, List, Optional, Sequence

from .charts import FIXED_CHARTS, ChartOptions, ChartRegistry
from .gate import UpdateGate
from .retention import RetentionPolicy

DEFAULT_BATTERIES = ("BAT0", "BAT1")


class DashboardState:
    """Everything the pipeline and janitor mutate, created once per process.

    `lock` is held around each whole ingest or janitor pass and by readers
    while they serialise, so readers never see a half-applied update.
    """

    def __init__(
        self,
        policy: Optional[RetentionPolicy] = None,
        battery_candidates: Sequence[str] = DEFAULT_BATTERIES,
        template: Optional[ChartOptions] = None,
    ):
        self.policy = policy or RetentionPolicy()
        self.battery_candidates = list(battery_candidates)
        self.registry = ChartRegistry(template)
        self.gate = UpdateGate()
        self.lock = threading.RLock()

        self.stats: Dict[str, Any] = {}
        self.adapters: List[Dict[str, Any]] = []
        self.battery: Optional[Dict[str, Any]] = None
        self.net_total: Dict[str, float] = {"downSpeed": 0.0, "upSpeed": 0.0}
        self.window_start: Optional[float] = None

        for key, override in FIXED_CHARTS.items():
            self.registry.get_or_create(key, override)

    @classmethod
    def from_config(cls, config) -> "DashboardState":
        return cls(
            policy=RetentionPolicy.from_config(config),
            battery_candidates=config.get("MAIN_BATTERY", DEFAULT_BATTERIES),
        )

    def advance_window(self, now: float) -> float:
        start = self.policy.cutoff(now)
        self.window_start = start
        for entry in self.registry:
            entry.window_start = start
        return start

    def snapshot_stats(self) -> Dict[str, Any]:
        with self.lock:
            out = dict(self.stats)
            out["battery"] = dict(self.battery) if self.battery else None
            out["netTotal"] = dict(self.net_total)
            return out

    def charts_as_dict(self) -> Dict[str, Any]:
        with self.lock:
            return {entry.key: entry.to_dict() for entry in self.registry}

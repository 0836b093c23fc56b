"""Per-module freshness tracking.

The backend pushes snapshots more often than individual modules refresh, so
a snapshot often repeats data already charted. Each module carries a
`lastUpdate` stamp; a module is only ingested when its stamp changed.
"""
from typing import Any, Dict, Hashable, Optional


class UpdateGate:
    def __init__(self):
        self._stamps: Dict[str, Any] = {}

    def accept(self, module: str, stamp: Optional[Hashable]) -> bool:
        """Record `stamp` and return True if it is new for `module`.

        A module without a recorded stamp (or whose recorded stamp is None)
        is always accepted.
        """
        prior = self._stamps.get(module)
        if prior is not None and prior == stamp:
            return False
        self._stamps[module] = stamp
        return True

    def last_stamp(self, module: str) -> Optional[Any]:
        return self._stamps.get(module)

    def reset(self) -> None:
        self._stamps.clear()

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._stamps)

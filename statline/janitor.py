"""Periodic eviction of samples that scrolled out of the chart window."""
import logging
import threading
import time
from typing import Callable, Optional

from .state import DashboardState

logger = logging.getLogger(__name__)


def janitor_pass(state: DashboardState, now: float) -> int:
    """Drop every sample older than the window and move the window start.

    Returns the total number of evicted samples.
    """
    logger.info("Beginning data clean")
    started = time.perf_counter()
    cutoff = state.policy.cutoff(now)
    evicted = 0
    for entry in state.registry:
        for index, series in enumerate(entry.tracks):
            before = len(series)
            evicted += series.evict_older_than(cutoff)
            logger.debug(
                "Cleaned charts.%s.series.%d from length=%d now=%d",
                entry.key, index, before, len(series),
            )
    state.advance_window(now)
    logger.info(
        "End data clean. Evicted %d sample(s), time taken=%.1fms",
        evicted, (time.perf_counter() - started) * 1000,
    )
    return evicted


class JanitorTimer:
    """Calls `fire` every `interval` seconds for the life of the process.

    The next tick is scheduled no matter what `fire` did, so one failed pass
    only delays cleanup by a single interval.
    """

    def __init__(self, interval: float, fire: Callable[[], None]):
        self.interval = float(interval)
        self._fire = fire
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self._fire()
            except Exception:
                logger.exception("Error when scheduling data clean")

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True, name="statline-janitor")
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

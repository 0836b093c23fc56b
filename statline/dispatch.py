"""Single-consumer command queue serialising ingestion and cleanup.

Snapshots (from the backend or the HTTP endpoint) and janitor ticks are
producers; one consumer applies them strictly in arrival order, each command
running to completion under the state lock.
"""
import logging
import queue
import threading
import time
from typing import Any, Callable, Mapping, Optional

from .janitor import janitor_pass
from .pipeline import ingest
from .state import DashboardState

logger = logging.getLogger(__name__)

SNAPSHOT = "snapshot"
CLEANUP = "cleanup"


class CommandQueue:
    def __init__(self, state: DashboardState, clock: Callable[[], float] = time.time):
        self.state = state
        self.clock = clock
        self._queue: "queue.Queue" = queue.Queue()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.processed = 0
        self.failed = 0

    def submit_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        self._queue.put((SNAPSHOT, snapshot))

    def submit_cleanup(self) -> None:
        self._queue.put((CLEANUP, None))

    def pending(self) -> int:
        return self._queue.qsize()

    def _apply(self, kind: str, payload) -> None:
        now = self.clock()
        with self.state.lock:
            if kind == SNAPSHOT:
                ingest(self.state, payload, now)
            elif kind == CLEANUP:
                janitor_pass(self.state, now)
            else:
                logger.warning("Unknown command %r dropped", kind)

    def _handle(self, kind: str, payload) -> None:
        try:
            self._apply(kind, payload)
            self.processed += 1
        except Exception:
            self.failed += 1
            logger.exception("Error when processing %s command", kind)

    def process_pending(self) -> int:
        """Synchronously apply every queued command. Returns how many ran."""
        count = 0
        while True:
            try:
                kind, payload = self._queue.get_nowait()
            except queue.Empty:
                return count
            self._handle(kind, payload)
            count += 1

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                kind, payload = self._queue.get(timeout=0.5)
            except queue.Empty:
                continue
            self._handle(kind, payload)

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True, name="statline-consumer")
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

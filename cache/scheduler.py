import logging
import threading
import time
from dataclasses import dataclass, asdict
from typing import Callable, Optional

from config import REFRESH_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshTiming:
    """Epoch milliseconds of the last refresh and the next scheduled one."""

    last_refresh_time: Optional[int] = None
    next_refresh_time: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


class RefreshScheduler:
    """
    Runs a refresh job on a daemon thread every `interval` seconds.

    start() runs the job once right away, then on every interval until
    stop(). Tests call tick() instead to run one refresh synchronously
    without a thread or wall-clock waits.
    """

    def __init__(self, job: Callable[[], object],
                 interval: float = REFRESH_INTERVAL_SECONDS,
                 clock: Callable[[], float] = time.time,
                 name: str = "refresh-scheduler"):
        self._job = job
        self.interval = interval
        self.name = name
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._timing_lock = threading.Lock()
        self._timing = RefreshTiming()
        self.ticks = 0

    @property
    def timing(self) -> RefreshTiming:
        with self._timing_lock:
            return self._timing

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, run_immediately: bool = True):
        if self.running:
            return
        self._stop.clear()
        self._mark()
        self._thread = threading.Thread(
            target=self._run,
            args=(run_immediately,),
            daemon=True,
            name=self.name,
        )
        self._thread.start()
        logger.info(f"[Scheduler] Started, refreshing every {self.interval:g}s.")

    def stop(self, timeout: float = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("[Scheduler] Stopped.")

    def join(self):
        """Block until the scheduler stops (Ctrl-C still gets through)."""
        thread = self._thread
        while thread is not None and thread.is_alive():
            thread.join(timeout=1.0)

    def tick(self) -> bool:
        """Run the job once. Returns False if it raised."""
        self._mark()
        self.ticks += 1
        try:
            self._job()
        except Exception as e:
            logger.error(f"[Scheduler] Refresh failed: {e}")
            return False
        return True

    def _run(self, run_immediately: bool):
        # Fixed rate: ticks start every interval regardless of how long the job takes
        next_at = time.monotonic()
        if run_immediately:
            self.tick()
        while True:
            next_at = max(next_at + self.interval, time.monotonic())
            if self._stop.wait(max(0.0, next_at - time.monotonic())):
                return
            self.tick()

    def _mark(self):
        last = int(self._clock() * 1000)
        with self._timing_lock:
            self._timing = RefreshTiming(
                last_refresh_time=last,
                next_refresh_time=last + int(self.interval * 1000),
            )

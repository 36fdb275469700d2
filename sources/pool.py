import logging
import threading
from typing import List

from collector.settle import settle_all
from config import INIT_TIMEOUT_SECONDS, MAX_WORKERS
from exceptions import SourceUnavailable
from sources.base_source import BaseSource

logger = logging.getLogger(__name__)


class SourcePool:
    """
    Process-wide set of exchange sources.

    initialize() loads markets for every configured source in parallel.
    A source that fails is dropped for the lifetime of the process; the
    pool never re-probes it. After that the pool is read-only and can be
    shared by overlapping scan cycles.
    """

    def __init__(self, sources: List[BaseSource],
                 init_timeout: float = INIT_TIMEOUT_SECONDS,
                 max_workers: int = MAX_WORKERS):
        self._configured = list(sources)
        self.init_timeout = init_timeout
        self.max_workers = max_workers
        self._active: List[BaseSource] = []
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def active(self) -> List[BaseSource]:
        return list(self._active)

    def __len__(self):
        return len(self._active)

    def initialize(self) -> List[BaseSource]:
        """Load every source once; later calls return the same active set."""
        with self._lock:
            if self._initialized:
                return list(self._active)

            results = settle_all(
                [source.load_markets for source in self._configured],
                timeout=self.init_timeout,
                max_workers=self.max_workers,
                name="source-init",
            )

            active = []
            for source, result in zip(self._configured, results):
                if result.ok:
                    active.append(source)
                    continue
                source.alive = False
                error = result.error
                if not isinstance(error, SourceUnavailable):
                    error = SourceUnavailable(source.name, str(error) or type(error).__name__)
                logger.warning(f"[Pool] Failed to initialize {source.name}: {error.reason}")

            self._active = active
            self._initialized = True

        logger.info(
            f"[Pool] {len(active)}/{len(self._configured)} sources ready: "
            f"{', '.join(s.name for s in active) or 'none'}"
        )
        return list(active)

    def close(self):
        for source in self._configured:
            source.close()

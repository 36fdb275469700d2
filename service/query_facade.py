"""
Read-side entry point for the HTTP layer and the dashboard.

Nothing here talks to an exchange directly: reads go through the cache
store, which only falls through to the aggregation pipeline on a miss.
The ranked list is additionally refreshed by the scheduler on a timer,
so it stays warm without any traffic.
"""

import json
import logging
import threading
import time
from typing import List

from cache.keys import CacheKey, CacheKind
from cache.scheduler import RefreshScheduler, RefreshTiming
from cache.store import CacheStore
from config import REFRESH_INTERVAL_SECONDS
from models.opportunity import Opportunity, ScanResult, SizedOpportunity
from processor.opportunity_sizer import OpportunitySizer, parse_investment
from service.pipeline import AggregationPipeline

logger = logging.getLogger(__name__)


class QueryFacade:

    def __init__(self, pipeline: AggregationPipeline, store: CacheStore = None,
                 sizer: OpportunitySizer = None, publisher=None,
                 refresh_interval: float = REFRESH_INTERVAL_SECONDS, clock=time.time):
        self.pipeline = pipeline
        self.store = store if store is not None else CacheStore()
        self.sizer = sizer if sizer is not None else OpportunitySizer()
        self.publisher = publisher
        self.scheduler = RefreshScheduler(self.refresh, interval=refresh_interval, clock=clock)
        self._last_published = None
        self._ranked_generation = None
        self._lock = threading.Lock()

    # ---------- Queries ----------

    def get_ranked_payload(self) -> str:
        """JSON of the latest ScanResult, ranked by profitability."""
        return self._load_ranked()

    def get_ranked_result(self) -> ScanResult:
        return ScanResult.from_json(self.get_ranked_payload())

    def get_ranked_opportunities(self) -> List[Opportunity]:
        return self.get_ranked_result().opportunities

    def get_sized_payload(self, investment=None) -> str:
        amount = parse_investment(investment, self.sizer.default_investment)
        key = CacheKey.sized(amount)
        return self.store.get_or_compute(key, lambda: self._compute_sized(key.investment))

    def get_sized_opportunities(self, investment=None) -> List[SizedOpportunity]:
        data = json.loads(self.get_sized_payload(investment))
        return [SizedOpportunity.from_dict(o) for o in data["opportunities"]]

    def get_refresh_timing(self) -> RefreshTiming:
        return self.scheduler.timing

    # ---------- Refresh cycle ----------

    def refresh(self) -> ScanResult:
        """Scheduled job: rebuild the ranked list and retire sized results."""
        payload = self._load_ranked(force=True)

        result = ScanResult.from_json(payload)
        if self.publisher is not None and result.timestamp != self._last_published:
            self.publisher.publish(result)
            self._last_published = result.timestamp
        return result

    def start(self):
        self.scheduler.start()

    def stop(self):
        self.scheduler.stop()

    def _load_ranked(self, force: bool = False) -> str:
        key = CacheKey.ranked()
        if force:
            payload = self.store.refresh(key, self._compute_ranked)
        else:
            payload = self.store.get_or_compute(key, self._compute_ranked)
        self._retire_sized()
        return payload

    def _retire_sized(self):
        # Sized entries derived from an older cycle must not outlive it
        entry = self.store.get(CacheKey.ranked())
        if entry is None:
            return
        with self._lock:
            previous = self._ranked_generation
            if entry.generation == previous:
                return
            self._ranked_generation = entry.generation
        if previous is not None:
            self.store.invalidate(CacheKind.SIZED)
            self.store.purge(older_than=self.store.ttl, kind=CacheKind.SIZED)

    def _compute_ranked(self) -> str:
        return self.pipeline.run().to_json()

    def _compute_sized(self, investment: float) -> str:
        # Sized from the cached cycle, so every amount sees the same quotes
        result = self.get_ranked_result()
        sized = self.sizer.size_all(result.opportunities, investment)
        return json.dumps(
            {
                "investment": investment,
                "timestamp": result.timestamp,
                "opportunities": [s.to_dict() for s in sized],
            }
        )

import logging
from collections import defaultdict
from functools import partial
from typing import Dict, List

from collector.settle import Settled, settle_all
from config import MIN_VOLUME, FETCH_TIMEOUT_SECONDS, MAX_WORKERS
from models.quote import Quote
from sources.base_source import BaseSource

logger = logging.getLogger(__name__)


class QuoteCollector:
    """
    Fetches one ticker for every (asset, source) pair.

    Each source gets its own lane of workers and its own deadline, and all
    lanes run side by side. A failed or timed-out request only removes its
    own pair from the cycle. Quotes whose 24h quote-currency volume is
    below min_volume are dropped so thin markets cannot produce fake spreads.
    """

    def __init__(self, min_volume: float = MIN_VOLUME,
                 timeout: float = FETCH_TIMEOUT_SECONDS,
                 max_workers: int = MAX_WORKERS):
        self.min_volume = min_volume
        self.timeout = timeout
        self.max_workers = max_workers

    def collect(self, assets: List[str], sources: List[BaseSource]) -> Dict[str, List[Quote]]:
        lanes = []
        for source in sources:
            supported = []
            for asset in assets:
                if not source.supports(asset):
                    logger.debug(f"[Collector] {source.name} does not support {source.market_symbol(asset)}")
                    continue
                supported.append(asset)
            if supported:
                lanes.append((source, supported))

        # A throttled exchange only ever delays its own tickers
        lane_results = settle_all(
            [partial(self._fetch_lane, source, lane_assets, len(lanes)) for source, lane_assets in lanes],
            max_workers=len(lanes) or None,
            name="lane",
        )

        pairs, results = [], []
        for (source, lane_assets), lane in zip(lanes, lane_results):
            pairs.extend((asset, source) for asset in lane_assets)
            if lane.ok:
                results.extend(lane.value)
            else:
                results.extend(Settled(error=lane.error) for _ in lane_assets)

        quotes_by_asset = defaultdict(list)
        failed = thin = 0
        for (asset, source), result in zip(pairs, results):
            if not result.ok:
                failed += 1
                logger.warning(f"[Collector] Error fetching {asset} from {source.name}: {result.error}")
                continue

            quote = result.value
            if quote.volume < self.min_volume:
                thin += 1
                logger.info(
                    f"[Collector] {asset} on {source.name} has insufficient volume "
                    f"({quote.volume:,.2f} < {self.min_volume:,.0f})"
                )
                continue
            quotes_by_asset[asset].append(quote)

        kept = sum(len(q) for q in quotes_by_asset.values())
        logger.info(
            f"[Collector] {kept} quotes kept from {len(pairs)} requests "
            f"({failed} failed, {thin} below volume floor)"
        )
        return dict(quotes_by_asset)

    def _fetch_lane(self, source: BaseSource, assets: List[str], lane_count: int) -> List[Settled]:
        return settle_all(
            [partial(source.fetch_ticker, asset) for asset in assets],
            timeout=self.timeout,
            max_workers=max(1, self.max_workers // lane_count),
            name=f"ticker-{source.name}",
        )

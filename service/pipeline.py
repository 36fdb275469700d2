import logging
from typing import List

from collector.quote_collector import QuoteCollector
from config import ASSETS
from exceptions import ArbitrageError
from models.opportunity import ScanResult
from processor.spread_detector import SpreadDetector
from sources.pool import SourcePool

logger = logging.getLogger(__name__)


class AggregationPipeline:
    """One full scan: collect quotes from every live source, detect spreads."""

    def __init__(self, pool: SourcePool, assets: List[str] = ASSETS,
                 collector: QuoteCollector = None, detector: SpreadDetector = None):
        self.pool = pool
        self.assets = list(assets)
        self.collector = collector if collector is not None else QuoteCollector()
        self.detector = detector if detector is not None else SpreadDetector()

    def run(self) -> ScanResult:
        sources = self.pool.initialize()
        if not sources:
            raise ArbitrageError("no exchange sources available")

        logger.info(f"[Pipeline] Scanning {len(self.assets)} assets on {len(sources)} exchanges...")
        quotes_by_asset = self.collector.collect(self.assets, sources)
        opportunities = self.detector.detect(quotes_by_asset)

        result = ScanResult(
            opportunities=opportunities,
            exchange_count=len(sources),
            scanned_pairs=len(quotes_by_asset),
        )
        for opp in opportunities:
            logger.info(
                f"[Pipeline] {opp.asset}: Buy {opp.lowest_exchange} @ {opp.lowest_price}, "
                f"Sell {opp.highest_exchange} @ {opp.highest_price}, "
                f"{opp.profit_percentage}% on up to {opp.max_trade_size:,.2f}"
            )
        logger.info(
            f"[Pipeline] Scan complete. Found {len(opportunities)} opportunities "
            f"across {len(sources)} exchanges."
        )
        return result

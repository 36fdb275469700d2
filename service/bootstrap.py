from cache.store import CacheStore
from collector.quote_collector import QuoteCollector
from config import (
    ASSETS,
    CACHE_TTL_SECONDS,
    DEFAULT_INVESTMENT,
    FETCH_TIMEOUT_SECONDS,
    MAX_WORKERS,
    MIN_PROFIT_PCT,
    MIN_VOLUME,
    QUOTE_CURRENCY,
    REFRESH_INTERVAL_SECONDS,
    SOURCES,
    USE_KAFKA,
)
from processor.opportunity_sizer import OpportunitySizer
from processor.spread_detector import SpreadDetector
from service.pipeline import AggregationPipeline
from service.query_facade import QueryFacade
from sources.pool import SourcePool
from sources.registry import build_sources


def build_facade(use_kafka: bool = USE_KAFKA) -> QueryFacade:
    """Wire sources, pipeline, cache and (optionally) the Kafka publisher."""
    sources = build_sources(SOURCES, quote_currency=QUOTE_CURRENCY, timeout=FETCH_TIMEOUT_SECONDS)
    pipeline = AggregationPipeline(
        pool=SourcePool(sources),
        assets=ASSETS,
        collector=QuoteCollector(min_volume=MIN_VOLUME, timeout=FETCH_TIMEOUT_SECONDS, max_workers=MAX_WORKERS),
        detector=SpreadDetector(min_profit_pct=MIN_PROFIT_PCT),
    )

    publisher = None
    if use_kafka:
        from producers.opportunity_producer import OpportunityProducer
        publisher = OpportunityProducer()

    return QueryFacade(
        pipeline=pipeline,
        store=CacheStore(ttl=CACHE_TTL_SECONDS),
        sizer=OpportunitySizer(default_investment=DEFAULT_INVESTMENT),
        publisher=publisher,
        refresh_interval=REFRESH_INTERVAL_SECONDS,
    )

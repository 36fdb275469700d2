import json
import threading
import time

import pytest

from cache.store import CacheStore
from exceptions import CacheComputationFailed
from models.opportunity import Opportunity, ScanResult
from service.pipeline import AggregationPipeline
from service.query_facade import QueryFacade
from sources.pool import SourcePool


def opportunity(asset="BTC", profit=1.2, max_trade_size=300_000.0, timestamp=1):
    return Opportunity(
        asset=asset,
        highest_exchange="exchange_b",
        lowest_exchange="exchange_a",
        highest_price=50_600.0,
        lowest_price=50_000.0,
        profit_percentage=profit,
        volume_highest=300_000.0,
        volume_lowest=1_000_000.0,
        max_trade_size=max_trade_size,
        potential_profit=round(max_trade_size * profit / 100, 2),
        timestamp=timestamp,
    )


def scan(timestamp, *opps):
    return ScanResult(opportunities=list(opps), exchange_count=2, scanned_pairs=len(opps), timestamp=timestamp)


class FakePipeline:
    def __init__(self, *results, delay=0.0):
        self.results = list(results)
        self.delay = delay
        self.runs = 0

    def run(self):
        self.runs += 1
        if self.delay:
            time.sleep(self.delay)
        item = self.results[min(self.runs, len(self.results)) - 1]
        if isinstance(item, Exception):
            raise item
        return item


class FakePublisher:
    def __init__(self):
        self.published = []

    def publish(self, result):
        self.published.append(result)
        return len(result.opportunities)


def make_facade(pipeline, clock, publisher=None):
    return QueryFacade(pipeline, store=CacheStore(ttl=300, clock=clock), publisher=publisher, clock=clock)


def test_ranked_payload_is_identical_within_ttl(clock):
    pipeline = FakePipeline(scan(1, opportunity()), scan(2, opportunity(profit=2.0)))
    facade = make_facade(pipeline, clock)

    first = facade.get_ranked_payload()
    clock.advance(120)
    second = facade.get_ranked_payload()

    assert first == second
    assert pipeline.runs == 1
    assert facade.get_ranked_opportunities() == [opportunity()]


def test_ranked_recomputes_after_ttl(clock):
    pipeline = FakePipeline(scan(1, opportunity()), scan(2, opportunity(profit=2.0)))
    facade = make_facade(pipeline, clock)

    facade.get_ranked_payload()
    clock.advance(301)

    assert facade.get_ranked_opportunities()[0].profit_percentage == 2.0
    assert pipeline.runs == 2


def test_sized_example(clock):
    facade = make_facade(FakePipeline(scan(1, opportunity())), clock)

    [sized] = facade.get_sized_opportunities(100_000)

    assert sized.sized_amount == 100_000
    assert sized.projected_profit == 1_200.00
    assert sized.opportunity.max_trade_size == 300_000


def test_sized_results_reuse_the_cached_cycle(clock):
    pipeline = FakePipeline(scan(1, opportunity(), opportunity("ETH", 0.8, 50_000.0)))
    facade = make_facade(pipeline, clock)

    small = facade.get_sized_opportunities(10_000)
    large = facade.get_sized_opportunities(1_000_000)

    assert pipeline.runs == 1
    assert [s.opportunity for s in small] == [s.opportunity for s in large]
    assert [s.sized_amount for s in large] == [300_000.0, 50_000.0]
    for s in small + large:
        assert s.sized_amount == min(s.investment, s.opportunity.max_trade_size)


def test_injected_store_is_kept_even_when_empty(clock):
    store = CacheStore(ttl=5, clock=clock)
    facade = QueryFacade(FakePipeline(scan(1)), store=store)

    assert len(store) == 0
    assert facade.store is store
    assert facade.store.ttl == 5


def test_sub_cent_investment_uses_default(clock):
    facade = make_facade(FakePipeline(scan(1, opportunity())), clock)

    [sized] = facade.get_sized_opportunities(0.004)

    assert sized.investment == 100_000
    assert sized.sized_amount == min(sized.investment, sized.opportunity.max_trade_size)


def test_smallest_positive_investment_is_sized_as_given(clock):
    facade = make_facade(FakePipeline(scan(1, opportunity())), clock)

    [sized] = facade.get_sized_opportunities(0.01)

    assert sized.investment == 0.01
    assert sized.sized_amount == 0.01


def test_garbage_investment_uses_default(clock):
    facade = make_facade(FakePipeline(scan(1, opportunity())), clock)

    [sized] = facade.get_sized_opportunities("abc")

    assert sized.investment == 100_000
    assert facade.get_sized_payload("abc") == facade.get_sized_payload(100_000)


def test_refresh_retires_sized_results_from_the_old_cycle(clock):
    pipeline = FakePipeline(scan(1, opportunity(profit=1.2)), scan(2, opportunity(profit=3.0)))
    facade = make_facade(pipeline, clock)

    facade.scheduler.tick()
    assert json.loads(facade.get_sized_payload(100_000))["timestamp"] == 1

    facade.scheduler.tick()
    [sized] = facade.get_sized_opportunities(100_000)

    assert json.loads(facade.get_sized_payload(100_000))["timestamp"] == 2
    assert sized.projected_profit == 3_000.0


def test_timer_keeps_ranked_warm_without_queries(clock):
    pipeline = FakePipeline(scan(1, opportunity()))
    facade = make_facade(pipeline, clock)

    facade.scheduler.tick()
    assert pipeline.runs == 1

    facade.get_ranked_payload()
    assert pipeline.runs == 1


def test_refresh_timing(clock):
    facade = make_facade(FakePipeline(scan(1)), clock)
    facade.scheduler.tick()

    timing = facade.get_refresh_timing()
    assert timing.last_refresh_time == 1_000_000
    assert timing.next_refresh_time == 1_300_000


def test_failed_refresh_keeps_serving_last_good_result(clock):
    pipeline = FakePipeline(scan(1, opportunity()), RuntimeError("binance down"))
    facade = make_facade(pipeline, clock)

    facade.scheduler.tick()
    good = facade.get_ranked_payload()
    clock.advance(600)

    assert facade.scheduler.tick() is True
    assert facade.get_ranked_payload() == good
    assert pipeline.runs == 2


def test_failure_with_nothing_cached_is_user_visible(clock):
    facade = make_facade(FakePipeline(RuntimeError("connection refused to 10.0.0.5")), clock)

    with pytest.raises(CacheComputationFailed) as exc_info:
        facade.get_ranked_opportunities()
    assert str(exc_info.value) == "Failed to fetch crypto data"

    with pytest.raises(CacheComputationFailed):
        facade.get_sized_opportunities(100_000)


def test_each_new_cycle_is_published_once(clock):
    publisher = FakePublisher()
    pipeline = FakePipeline(scan(1, opportunity()), RuntimeError("down"), scan(3, opportunity()))
    facade = make_facade(pipeline, clock, publisher=publisher)

    facade.scheduler.tick()
    facade.scheduler.tick()  # served stale, nothing new to publish
    facade.scheduler.tick()

    assert [r.timestamp for r in publisher.published] == [1, 3]


def test_concurrent_queries_trigger_one_scan():
    pipeline = FakePipeline(scan(1, opportunity()), delay=0.2)
    facade = QueryFacade(pipeline, store=CacheStore(ttl=300))

    results = []

    def query():
        results.append(facade.get_ranked_payload())

    threads = [threading.Thread(target=query) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert pipeline.runs == 1
    assert len(set(results)) == 1
    assert len(results) == 10


def test_end_to_end_with_partial_source_failure(fake_source, clock):
    sources = [
        fake_source("exchange_a", {"BTC": (50_000, 1_000_000), "ETH": (3_000, 500_000)}),
        fake_source("exchange_b", {"BTC": (50_600, 300_000), "ETH": (3_001, 500_000)}),
        fake_source("exchange_c", {"BTC": (10, 1_000_000)}, fail_init=True),
        fake_source("exchange_d", {"XRP": (0.5, 150_000)}),
        fake_source("exchange_e", {"XRP": (0.6, 900_000)}),
    ]
    pipeline = AggregationPipeline(SourcePool(sources), assets=["BTC", "ETH", "XRP"])
    facade = make_facade(pipeline, clock)

    result = facade.get_ranked_result()
    [btc] = result.opportunities

    assert result.exchange_count == 4
    assert btc.asset == "BTC"
    assert btc.profit_percentage == 1.2
    assert btc.max_trade_size == 300_000
    assert btc.potential_profit == 3_600.0

    [sized] = facade.get_sized_opportunities(100_000)
    assert sized.sized_amount == 100_000
    assert sized.projected_profit == 1_200.0

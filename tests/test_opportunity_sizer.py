import pytest

from models.opportunity import Opportunity
from models.quote import Quote
from processor.opportunity_sizer import OpportunitySizer, parse_investment
from processor.spread_detector import SpreadDetector


def make_opportunity(max_trade_size=300_000.0, profit_percentage=1.2):
    return Opportunity(
        asset="BTC",
        highest_exchange="exchange_b",
        lowest_exchange="exchange_a",
        highest_price=50_600.0,
        lowest_price=50_000.0,
        profit_percentage=profit_percentage,
        volume_highest=300_000.0,
        volume_lowest=1_000_000.0,
        max_trade_size=max_trade_size,
        potential_profit=3_600.0,
        timestamp=0,
    )


def test_example_sizing():
    sized = OpportunitySizer().size(make_opportunity(), 100_000)
    assert sized.investment == 100_000
    assert sized.sized_amount == 100_000
    assert sized.projected_profit == 1_200.00


def test_investment_capped_by_max_trade_size():
    sized = OpportunitySizer().size(make_opportunity(max_trade_size=40_000.0), 100_000)
    assert sized.sized_amount == 40_000.0
    assert sized.projected_profit == 480.0


@pytest.mark.parametrize("value", [None, "abc", "", 0, -5, "-1", float("nan"), float("inf"), True, [1]])
def test_bad_investment_falls_back_to_default(value):
    assert parse_investment(value) == 100_000


def test_numeric_strings_are_accepted():
    assert parse_investment("250000") == 250_000
    assert parse_investment(" 1500.5 ") == 1_500.5


def test_sizer_uses_its_own_default():
    sized = OpportunitySizer(default_investment=5_000).size(make_opportunity(), "abc")
    assert sized.investment == 5_000
    assert sized.sized_amount == 5_000


def test_size_all_keeps_order_and_bound():
    opps = [make_opportunity(max_trade_size=m) for m in (10.0, 500_000.0, 75_000.0)]
    sized = OpportunitySizer().size_all(opps, 80_000)
    assert [s.sized_amount for s in sized] == [10.0, 80_000, 75_000.0]
    for s in sized:
        assert s.sized_amount == min(80_000, s.opportunity.max_trade_size)
        assert s.sized_amount <= s.opportunity.max_trade_size


def test_sized_dict_round_trips_through_cache_payload():
    sized = OpportunitySizer().size(make_opportunity(), 100_000)
    data = sized.to_dict()
    assert data["asset"] == "BTC"
    assert data["sized_amount"] == 100_000
    assert type(sized).from_dict(data) == sized


def test_sub_cent_investment_counts_as_missing():
    assert parse_investment(0.004) == 100_000
    assert parse_investment("0.001") == 100_000
    assert parse_investment(0.006) == 0.01


def test_amounts_are_kept_to_the_cent():
    assert parse_investment(1_500.456) == 1_500.46


def test_sizing_at_max_size_matches_potential_profit():
    quotes = {"LINK": [Quote("LINK", "a", 100.0, 100_000.0, 0), Quote("LINK", "b", 100.567, 100_000.0, 0)]}
    [opp] = SpreadDetector().detect(quotes)

    for investment in (opp.max_trade_size, 10 * opp.max_trade_size):
        assert OpportunitySizer().size(opp, investment).projected_profit == opp.potential_profit

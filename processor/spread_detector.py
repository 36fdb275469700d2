import logging
from typing import Dict, List, Optional

from config import MIN_PROFIT_PCT
from models.opportunity import Opportunity
from models.quote import Quote, now_ms

logger = logging.getLogger(__name__)


class SpreadDetector:
    """
    Finds the widest cross-exchange spread for each asset.

    For every asset quoted by 2+ exchanges the highest and the lowest last
    price are compared. If the spread reaches min_profit_pct an Opportunity
    is emitted: buy on the cheapest exchange, sell on the most expensive.
    The trade size is capped by the thinner of the two markets.
    """

    def __init__(self, min_profit_pct: float = MIN_PROFIT_PCT):
        self.min_profit_pct = min_profit_pct

    def detect(self, quotes_by_asset: Dict[str, List[Quote]], timestamp: int = None) -> List[Opportunity]:
        if timestamp is None:
            timestamp = now_ms()

        opportunities = []
        for asset, quotes in quotes_by_asset.items():
            opportunity = self._check_arbitrage(asset, quotes, timestamp)
            if opportunity is not None:
                opportunities.append(opportunity)

        # Best spread first; symbol breaks ties so output is reproducible
        opportunities.sort(key=lambda o: (-o.profit_percentage, o.asset))
        return opportunities

    def _check_arbitrage(self, asset: str, quotes: List[Quote], timestamp: int) -> Optional[Opportunity]:
        if len(quotes) < 2:
            return None  # Need at least 2 exchanges to compare

        # max()/min() keep the first quote seen on ties
        highest = max(quotes, key=lambda q: q.price)
        lowest = min(quotes, key=lambda q: q.price)

        profit_pct = ((highest.price - lowest.price) / lowest.price) * 100
        if profit_pct < self.min_profit_pct:
            return None

        max_trade_size = round(min(highest.volume, lowest.volume), 2)
        # potential_profit equals the sizer's projected profit at max_trade_size
        profit_percentage = round(profit_pct, 2)
        logger.debug(
            f"[Detector] {asset}: Buy {lowest.source} @ ${lowest.price:,.8g}, "
            f"Sell {highest.source} @ ${highest.price:,.8g} ({profit_pct:.2f}%)"
        )
        return Opportunity(
            asset=asset,
            highest_exchange=highest.source,
            lowest_exchange=lowest.source,
            highest_price=round(highest.price, 8),
            lowest_price=round(lowest.price, 8),
            profit_percentage=profit_percentage,
            volume_highest=round(highest.volume, 2),
            volume_lowest=round(lowest.volume, 2),
            max_trade_size=max_trade_size,
            potential_profit=round(max_trade_size * profit_percentage / 100, 2),
            timestamp=timestamp,
        )

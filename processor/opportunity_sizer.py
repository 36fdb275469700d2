import math
from typing import List

from config import DEFAULT_INVESTMENT
from models.opportunity import Opportunity, SizedOpportunity


def parse_investment(value, default: float = DEFAULT_INVESTMENT) -> float:
    """
    Turn user input into a positive amount in cents, falling back to default.

    Amounts are rounded to 2 decimals; anything that rounds to zero counts
    as no investment at all.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(amount):
        return default
    amount = round(amount, 2)
    if amount <= 0:
        return default
    return amount


class OpportunitySizer:
    """Sizes already-detected opportunities; never touches the exchanges."""

    def __init__(self, default_investment: float = DEFAULT_INVESTMENT):
        self.default_investment = default_investment

    def size(self, opportunity: Opportunity, investment=None) -> SizedOpportunity:
        amount = parse_investment(investment, self.default_investment)
        sized_amount = min(amount, opportunity.max_trade_size)
        return SizedOpportunity(
            opportunity=opportunity,
            investment=amount,
            sized_amount=sized_amount,
            projected_profit=round(sized_amount * opportunity.profit_percentage / 100, 2),
        )

    def size_all(self, opportunities: List[Opportunity], investment=None) -> List[SizedOpportunity]:
        amount = parse_investment(investment, self.default_investment)
        return [self.size(o, amount) for o in opportunities]

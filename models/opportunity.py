import json
from dataclasses import dataclass, asdict, field
from typing import List

from models.quote import now_ms


@dataclass(frozen=True)
class Opportunity:
    """Best spread for one asset in one scan cycle.

    Prices keep 8 fractional digits; percentages, volumes and money amounts
    keep 2, matching what the dashboard and the alert consumer print.
    """

    asset: str
    highest_exchange: str
    lowest_exchange: str
    highest_price: float
    lowest_price: float
    profit_percentage: float
    volume_highest: float
    volume_lowest: float
    max_trade_size: float
    potential_profit: float
    timestamp: int

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "Opportunity":
        return cls(**data)


@dataclass(frozen=True)
class SizedOpportunity:
    """An Opportunity sized against a notional investment."""

    opportunity: Opportunity
    investment: float
    sized_amount: float
    projected_profit: float

    def to_dict(self) -> dict:
        data = self.opportunity.to_dict()
        data.update(
            investment=self.investment,
            sized_amount=self.sized_amount,
            projected_profit=self.projected_profit,
        )
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SizedOpportunity":
        data = dict(data)
        investment = data.pop("investment")
        sized_amount = data.pop("sized_amount")
        projected_profit = data.pop("projected_profit")
        return cls(
            opportunity=Opportunity.from_dict(data),
            investment=investment,
            sized_amount=sized_amount,
            projected_profit=projected_profit,
        )


@dataclass
class ScanResult:
    """Output of one full aggregation cycle."""

    opportunities: List[Opportunity]
    exchange_count: int
    scanned_pairs: int
    timestamp: int = field(default_factory=now_ms)

    def to_json(self) -> str:
        return json.dumps(
            {
                "opportunities": [o.to_dict() for o in self.opportunities],
                "timestamp": self.timestamp,
                "exchange_count": self.exchange_count,
                "scanned_pairs": self.scanned_pairs,
            }
        )

    @classmethod
    def from_json(cls, data: str) -> "ScanResult":
        raw = json.loads(data)
        return cls(
            opportunities=[Opportunity.from_dict(o) for o in raw["opportunities"]],
            exchange_count=raw["exchange_count"],
            scanned_pairs=raw["scanned_pairs"],
            timestamp=raw["timestamp"],
        )

import time
from dataclasses import dataclass


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Quote:
    """One ticker observation: last price and 24h quote-currency volume."""

    asset: str
    source: str
    price: float
    volume: float
    timestamp: int = None

    def __post_init__(self):
        if self.timestamp is None:
            object.__setattr__(self, "timestamp", now_ms())

from dataclasses import dataclass
from enum import Enum


class CacheKind(Enum):
    RANKED = "ranked"
    SIZED = "sized"


@dataclass(frozen=True)
class CacheKey:
    """Typed cache key; ranked and sized entries can never collide."""

    kind: CacheKind
    investment: float = None

    def __post_init__(self):
        if self.kind is CacheKind.RANKED and self.investment is not None:
            raise ValueError("ranked key takes no investment")
        if self.kind is CacheKind.SIZED and self.investment is None:
            raise ValueError("sized key needs an investment")

    @classmethod
    def ranked(cls) -> "CacheKey":
        return cls(CacheKind.RANKED)

    @classmethod
    def sized(cls, investment: float) -> "CacheKey":
        return cls(CacheKind.SIZED, round(float(investment), 2))

    def __str__(self):
        if self.kind is CacheKind.RANKED:
            return "ranked"
        return f"sized:{self.investment:.2f}"

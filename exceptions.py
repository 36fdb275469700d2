"""Error types shared by the sources, the collector and the cache."""


class ArbitrageError(Exception):
    """Base class for all tracker errors."""


class SourceUnavailable(ArbitrageError):
    """An exchange could not be initialized and is out of the pool."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source} unavailable: {reason}")


class QuoteFetchFailed(ArbitrageError):
    """A single (asset, source) ticker request failed."""

    def __init__(self, source: str, asset: str, reason: str):
        self.source = source
        self.asset = asset
        self.reason = reason
        super().__init__(f"{asset} on {source}: {reason}")


class RateLimited(QuoteFetchFailed):
    """HTTP 429 from the exchange."""

    def __init__(self, source: str, asset: str, retry_after: float = None):
        self.retry_after = retry_after
        super().__init__(source, asset, "rate limited")


class CacheComputationFailed(ArbitrageError):
    """Recomputing a cache entry failed and nothing stale was available.

    Only a generic message is carried; it is shown to end users.
    """

    def __init__(self, message: str = "Failed to fetch crypto data"):
        super().__init__(message)

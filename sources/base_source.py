import logging
import math
import threading
import time

import requests

from config import QUOTE_CURRENCY, FETCH_TIMEOUT_SECONDS
from exceptions import QuoteFetchFailed, RateLimited, SourceUnavailable
from models.quote import Quote

logger = logging.getLogger(__name__)

# Pause applied after a 429 that carries no Retry-After header
DEFAULT_BACKOFF_SECONDS = 1.0


class BaseSource:
    """
    Base class for exchange ticker sources.

    Subclasses describe one exchange's REST API:
      - list_markets()   -> set of exchange symbols that can be traded
      - market_symbol()  -> exchange symbol for an asset (e.g. "BTCUSDT")
      - ticker_request() -> (path, params) for the 24h ticker of an asset
      - parse_ticker()   -> (last price, quote-currency volume) from the JSON

    Every source owns its HTTP session and its rate-limit state, so a slow
    or throttled exchange only ever delays its own requests.
    """

    name: str = None
    base_url: str = None
    # Minimum spacing between two requests to this exchange (seconds)
    min_interval: float = 0.1

    def __init__(self, quote_currency: str = QUOTE_CURRENCY,
                 timeout: float = FETCH_TIMEOUT_SECONDS, session=None):
        self.quote_currency = quote_currency
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.markets: set = set()
        self.alive = False
        self._rate_lock = threading.Lock()
        self._next_request_at = 0.0

    def __repr__(self):
        return f"<{type(self).__name__} {self.name} alive={self.alive}>"

    # ---------- Exchange specifics ----------

    def list_markets(self) -> set:
        raise NotImplementedError

    def market_symbol(self, asset: str) -> str:
        raise NotImplementedError

    def ticker_request(self, asset: str) -> tuple:
        raise NotImplementedError

    def parse_ticker(self, data) -> tuple:
        raise NotImplementedError

    # ---------- Uniform interface ----------

    def load_markets(self) -> int:
        """Load market metadata. Raises SourceUnavailable on any failure."""
        try:
            self.markets = set(self.list_markets())
        except Exception as e:
            self.alive = False
            raise SourceUnavailable(self.name, str(e)) from e
        self.alive = True
        logger.info(f"[{self.name}] Loaded {len(self.markets)} markets.")
        return len(self.markets)

    def supports(self, asset: str) -> bool:
        return self.market_symbol(asset) in self.markets

    def fetch_ticker(self, asset: str) -> Quote:
        """Fetch one ticker. Raises QuoteFetchFailed on any failure."""
        path, params = self.ticker_request(asset)
        try:
            data = self._get(path, params)
            price, volume = self.parse_ticker(data)
        except requests.HTTPError as e:
            response = e.response
            if response is not None and response.status_code == 429:
                retry_after = _retry_after(response)
                self._back_off(retry_after or DEFAULT_BACKOFF_SECONDS)
                raise RateLimited(self.name, asset, retry_after) from e
            raise QuoteFetchFailed(self.name, asset, str(e)) from e
        except requests.RequestException as e:
            raise QuoteFetchFailed(self.name, asset, str(e)) from e
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise QuoteFetchFailed(self.name, asset, f"malformed ticker ({e!r})") from e

        if not (math.isfinite(price) and price > 0 and math.isfinite(volume)):
            raise QuoteFetchFailed(self.name, asset, f"bad ticker values price={price} volume={volume}")
        return Quote(asset=asset, source=self.name, price=price, volume=volume)

    def close(self):
        self.session.close()

    # ---------- HTTP ----------

    def _get(self, path: str, params: dict = None):
        self._throttle()
        resp = self.session.get(self.base_url + path, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _throttle(self):
        with self._rate_lock:
            wait = self._next_request_at - time.monotonic()
            if wait > 0:
                time.sleep(wait)
            self._next_request_at = time.monotonic() + self.min_interval

    def _back_off(self, seconds: float):
        with self._rate_lock:
            self._next_request_at = max(self._next_request_at, time.monotonic() + seconds)
        logger.warning(f"[{self.name}] Rate limited, backing off {seconds:.1f}s")


def _retry_after(response) -> float:
    try:
        return float(response.headers.get("Retry-After"))
    except (TypeError, ValueError):
        return None

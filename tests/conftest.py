import pytest
import requests

from exceptions import SourceUnavailable
from models.quote import Quote


class FakeSource:
    """In-memory exchange: tickers maps asset -> (price, volume)."""

    def __init__(self, name, tickers=None, errors=None, fail_init=False):
        self.name = name
        self.tickers = dict(tickers or {})
        self.errors = dict(errors or {})
        self.fail_init = fail_init
        self.markets = set()
        self.alive = False
        self.fetches = []
        self.closed = False

    def market_symbol(self, asset):
        return f"{asset}/USDT"

    def load_markets(self):
        if self.fail_init:
            raise SourceUnavailable(self.name, "exchange unreachable")
        self.markets = {self.market_symbol(a) for a in list(self.tickers) + list(self.errors)}
        self.alive = True
        return len(self.markets)

    def supports(self, asset):
        return self.market_symbol(asset) in self.markets

    def fetch_ticker(self, asset):
        self.fetches.append(asset)
        if asset in self.errors:
            raise self.errors[asset]
        price, volume = self.tickers[asset]
        return Quote(asset=asset, source=self.name, price=price, volume=volume, timestamp=1_700_000_000_000)

    def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, headers=None):
        self.status_code = status_code
        self._json = json_data
        self.headers = headers or {}

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Answers session.get() from a {path suffix: FakeResponse} table."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        for suffix, response in self.routes.items():
            if url.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        return FakeResponse(404, {"error": "not found"})

    def close(self):
        self.closed = True


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse

import os


def _env_list(name: str, default: list) -> list:
    raw = os.environ.get(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


KAFKA_BROKER = os.environ.get("KAFKA_BROKER", "localhost:9092")

TOPICS = {
    "alerts": "arbitrage-alerts",
}

# Publish every refreshed opportunity to Kafka (alert consumer reads them)
USE_KAFKA = os.environ.get("USE_KAFKA", "false").lower() == "true"

# Exchange adapters to load (see sources.registry.SOURCE_CLASSES)
SOURCES = _env_list(
    "SOURCES",
    ["binance", "bybit", "okx", "kucoin", "gateio", "kraken", "coinbase"],
)

# Assets to track, each quoted against QUOTE_CURRENCY
ASSETS = _env_list(
    "ASSETS",
    [
        "BTC", "ETH", "XRP", "ADA", "DOT", "SOL", "DOGE", "SHIB", "LTC", "LINK",
        "MATIC", "AVAX", "XLM", "UNI", "BCH", "FIL", "VET", "ALGO", "ATOM", "ICP",
    ],
)
QUOTE_CURRENCY = os.environ.get("QUOTE_CURRENCY", "USDT")

# Quotes with less 24h volume (in quote currency) than this are ignored
MIN_VOLUME = float(os.environ.get("MIN_VOLUME", 200_000))

# Spreads below this % are not reported
MIN_PROFIT_PCT = float(os.environ.get("MIN_PROFIT_PCT", 0.5))

# Investment used when the caller gives none (or garbage)
DEFAULT_INVESTMENT = float(os.environ.get("DEFAULT_INVESTMENT", 100_000))

CACHE_TTL_SECONDS = float(os.environ.get("CACHE_TTL_SECONDS", 300))
REFRESH_INTERVAL_SECONDS = float(os.environ.get("REFRESH_INTERVAL_SECONDS", 300))

# Per-request timeouts (seconds)
FETCH_TIMEOUT_SECONDS = float(os.environ.get("FETCH_TIMEOUT_SECONDS", 30))
INIT_TIMEOUT_SECONDS = float(os.environ.get("INIT_TIMEOUT_SECONDS", 30))

# Upper bound on concurrent ticker requests in one cycle
MAX_WORKERS = int(os.environ.get("MAX_WORKERS", 32))

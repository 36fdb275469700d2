from sources.base_source import BaseSource

# Coinbase lists the majors against USD, not USDT
QUOTE_MAP = {"USDT": "USD"}


class CoinbaseSource(BaseSource):
    # Coinbase uses "BTC-USD" format
    name = "coinbase"
    base_url = "https://api.exchange.coinbase.com"
    min_interval = 0.15

    def list_markets(self) -> set:
        products = self._get("/products")
        return {
            p["id"] for p in products
            if p.get("status") == "online" and not p.get("trading_disabled")
        }

    def market_symbol(self, asset: str) -> str:
        quote = QUOTE_MAP.get(self.quote_currency, self.quote_currency)
        return f"{asset}-{quote}"

    def ticker_request(self, asset: str) -> tuple:
        return f"/products/{self.market_symbol(asset)}/stats", None

    def parse_ticker(self, data) -> tuple:
        # "volume" is in the base asset
        price = float(data["last"])
        return price, float(data["volume"]) * price

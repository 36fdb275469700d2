from sources.base_source import BaseSource


class BinanceSource(BaseSource):
    # Binance uses "BTCUSDT" format (no separator)
    name = "binance"
    base_url = "https://api.binance.com"

    def list_markets(self) -> set:
        data = self._get("/api/v3/exchangeInfo")
        return {s["symbol"] for s in data["symbols"] if s.get("status") == "TRADING"}

    def market_symbol(self, asset: str) -> str:
        return f"{asset}{self.quote_currency}"

    def ticker_request(self, asset: str) -> tuple:
        return "/api/v3/ticker/24hr", {"symbol": self.market_symbol(asset)}

    def parse_ticker(self, data) -> tuple:
        return float(data["lastPrice"]), float(data["quoteVolume"])

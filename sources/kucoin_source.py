from sources.base_source import BaseSource


class KucoinSource(BaseSource):
    name = "kucoin"
    base_url = "https://api.kucoin.com"

    def list_markets(self) -> set:
        data = self._get("/api/v2/symbols")
        return {item["symbol"] for item in data["data"] if item.get("enableTrading")}

    def market_symbol(self, asset: str) -> str:
        return f"{asset}-{self.quote_currency}"

    def ticker_request(self, asset: str) -> tuple:
        return "/api/v1/market/stats", {"symbol": self.market_symbol(asset)}

    def parse_ticker(self, data) -> tuple:
        stats = data["data"]
        return float(stats["last"]), float(stats["volValue"])

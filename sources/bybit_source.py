from sources.base_source import BaseSource


class BybitSource(BaseSource):
    name = "bybit"
    base_url = "https://api.bybit.com"

    def list_markets(self) -> set:
        data = self._get("/v5/market/instruments-info", {"category": "spot"})
        return {
            item["symbol"] for item in data["result"]["list"]
            if item.get("status") == "Trading"
        }

    def market_symbol(self, asset: str) -> str:
        return f"{asset}{self.quote_currency}"

    def ticker_request(self, asset: str) -> tuple:
        return "/v5/market/tickers", {"category": "spot", "symbol": self.market_symbol(asset)}

    def parse_ticker(self, data) -> tuple:
        ticker = data["result"]["list"][0]
        return float(ticker["lastPrice"]), float(ticker["turnover24h"])

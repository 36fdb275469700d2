from sources.base_source import BaseSource


class OkxSource(BaseSource):
    name = "okx"
    base_url = "https://www.okx.com"

    def list_markets(self) -> set:
        data = self._get("/api/v5/public/instruments", {"instType": "SPOT"})
        return {item["instId"] for item in data["data"] if item.get("state") == "live"}

    def market_symbol(self, asset: str) -> str:
        return f"{asset}-{self.quote_currency}"

    def ticker_request(self, asset: str) -> tuple:
        return "/api/v5/market/ticker", {"instId": self.market_symbol(asset)}

    def parse_ticker(self, data) -> tuple:
        ticker = data["data"][0]
        # volCcy24h is quoted in the quote currency for spot instruments
        return float(ticker["last"]), float(ticker["volCcy24h"])

from sources.base_source import BaseSource


class GateioSource(BaseSource):
    # Gate.io uses "BTC_USDT" format
    name = "gateio"
    base_url = "https://api.gateio.ws/api/v4"

    def list_markets(self) -> set:
        pairs = self._get("/spot/currency_pairs")
        return {p["id"] for p in pairs if p.get("trade_status") == "tradable"}

    def market_symbol(self, asset: str) -> str:
        return f"{asset}_{self.quote_currency}"

    def ticker_request(self, asset: str) -> tuple:
        return "/spot/tickers", {"currency_pair": self.market_symbol(asset)}

    def parse_ticker(self, data) -> tuple:
        ticker = data[0]
        return float(ticker["last"]), float(ticker["quote_volume"])

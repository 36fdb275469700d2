from sources.base_source import BaseSource

# Kraken uses "XBT" for BTC (their legacy naming)
ASSET_MAP = {"BTC": "XBT", "DOGE": "XDG"}


class KrakenSource(BaseSource):
    name = "kraken"
    base_url = "https://api.kraken.com"
    min_interval = 0.5

    def list_markets(self) -> set:
        data = self._get("/0/public/AssetPairs")
        if data.get("error"):
            raise ValueError(", ".join(data["error"]))
        return {pair["altname"] for pair in data["result"].values()}

    def market_symbol(self, asset: str) -> str:
        return f"{ASSET_MAP.get(asset, asset)}{self.quote_currency}"

    def ticker_request(self, asset: str) -> tuple:
        return "/0/public/Ticker", {"pair": self.market_symbol(asset)}

    def parse_ticker(self, data) -> tuple:
        if data.get("error"):
            raise ValueError(", ".join(data["error"]))
        # Kraken returns a dict keyed by pair name (may differ from requested)
        result = list(data["result"].values())[0]
        price = float(result["c"][0])  # "c" = last trade closed [price, lot_volume]
        base_volume = float(result["v"][1])  # "v" = [today, last 24 hours]
        return price, base_volume * price

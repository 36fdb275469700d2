import logging
from typing import List

from sources.base_source import BaseSource
from sources.binance_source import BinanceSource
from sources.bybit_source import BybitSource
from sources.coinbase_source import CoinbaseSource
from sources.gateio_source import GateioSource
from sources.kraken_source import KrakenSource
from sources.kucoin_source import KucoinSource
from sources.okx_source import OkxSource

logger = logging.getLogger(__name__)

SOURCE_CLASSES = {
    cls.name: cls
    for cls in (
        BinanceSource,
        BybitSource,
        OkxSource,
        KucoinSource,
        GateioSource,
        KrakenSource,
        CoinbaseSource,
    )
}


def build_sources(names: List[str], **kwargs) -> List[BaseSource]:
    """Instantiate one source per configured name. Unknown names are skipped."""
    sources = []
    seen = set()
    for name in names:
        key = name.lower()
        if key in seen:
            continue
        cls = SOURCE_CLASSES.get(key)
        if cls is None:
            logger.warning(f"[Sources] Unknown source '{name}', skipping.")
            continue
        seen.add(key)
        sources.append(cls(**kwargs))
    return sources

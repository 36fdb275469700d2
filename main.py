"""
Crypto Arbitrage Tracker: main entry point.

Architecture:
  Sources  (Binance, Bybit, OKX, KuCoin, Gate.io, Kraken, Coinbase)
      |
      v  [concurrent 24h ticker fetch, volume floor]
      |
  SpreadDetector  (highest vs lowest price per asset)
      |
      v  [CacheStore, refreshed by RefreshScheduler]
      |
  QueryFacade  (ranked / sized opportunities, refresh timing)
      |
      v  [Kafka topic: arbitrage-alerts]  (USE_KAFKA=true)
      |
  AlertConsumer  (prints opportunities to console)

The scheduler runs in a daemon thread. With Kafka enabled the alert
consumer blocks on the main thread; otherwise the main thread waits on
the scheduler and opportunities show up in the log.
"""

import logging

from config import ASSETS, SOURCES, MIN_PROFIT_PCT, MIN_VOLUME, REFRESH_INTERVAL_SECONDS, USE_KAFKA
from service.bootstrap import build_facade

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    logger.info("=" * 58)
    logger.info("  Crypto Arbitrage Tracker")
    logger.info("=" * 58)
    logger.info(f"  Tracking : {len(ASSETS)} assets ({' '.join(ASSETS[:5])} ...)")
    logger.info(f"  Sources  : {' | '.join(SOURCES)}")
    logger.info(f"  Threshold: {MIN_PROFIT_PCT}% spread, {MIN_VOLUME:,.0f} min volume")
    logger.info(f"  Refresh  : every {REFRESH_INTERVAL_SECONDS:g}s")
    logger.info("=" * 58)

    facade = build_facade()
    facade.start()

    try:
        if USE_KAFKA:
            from consumers.alert_consumer import AlertConsumer

            # Alert consumer blocks the main thread (keeps the process alive)
            AlertConsumer().run()
        else:
            facade.scheduler.join()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        facade.stop()
        facade.pipeline.pool.close()


if __name__ == "__main__":
    main()

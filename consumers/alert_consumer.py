import json
import logging

from kafka import KafkaConsumer

from config import KAFKA_BROKER, TOPICS
from models.opportunity import Opportunity

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 58


def format_alert(opp: Opportunity) -> str:
    return "\n".join([
        "",
        SEPARATOR,
        "  *** ARBITRAGE OPPORTUNITY DETECTED ***",
        SEPARATOR,
        f"  Asset    : {opp.asset}",
        f"  BUY  on  : {opp.lowest_exchange:<10}  @ ${opp.lowest_price:>15,.8f}",
        f"  SELL on  : {opp.highest_exchange:<10}  @ ${opp.highest_price:>15,.8f}",
        f"  Spread   : {opp.profit_percentage:.2f}%",
        f"  Max size : ${opp.max_trade_size:>15,.2f}",
        f"  Profit   : ${opp.potential_profit:>15,.2f} at max size",
        SEPARATOR,
        "",
    ])


class AlertConsumer:
    """
    Reads Opportunity messages from the arbitrage-alerts topic
    and prints them to the console.

    This is where you'd plug in real notifications:
    email, Slack webhook, Telegram bot, etc.
    """

    def __init__(self, consumer=None):
        if consumer is None:
            consumer = KafkaConsumer(
                TOPICS["alerts"],
                bootstrap_servers=KAFKA_BROKER,
                group_id="alert-notifier",
                value_deserializer=lambda v: v.decode("utf-8"),
                auto_offset_reset="latest",
            )
        self.consumer = consumer

    def run(self):
        logger.info("[AlertConsumer] Started. Waiting for arbitrage opportunities...")
        for message in self.consumer:
            self.handle(message.value)

    def handle(self, value: str) -> bool:
        try:
            opp = Opportunity.from_dict(json.loads(value))
        except (TypeError, ValueError) as e:
            logger.error(f"[AlertConsumer] Skipping malformed alert: {e}")
            return False
        print(format_alert(opp))
        return True

    def close(self):
        self.consumer.close()

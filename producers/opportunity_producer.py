import logging

from kafka import KafkaProducer
from kafka.errors import KafkaError

from config import KAFKA_BROKER, TOPICS
from models.opportunity import ScanResult

logger = logging.getLogger(__name__)


class OpportunityProducer:
    """
    Publishes each refreshed opportunity to the arbitrage-alerts topic.

    Messages are keyed by asset so every alert for BTC lands on the same
    partition and the consumer sees them in order.
    """

    def __init__(self, producer=None):
        if producer is None:
            producer = KafkaProducer(
                bootstrap_servers=KAFKA_BROKER,
                value_serializer=lambda v: v.encode("utf-8"),
            )
        self.producer = producer

    def publish(self, result: ScanResult) -> int:
        """Send every opportunity of a scan. Returns how many were sent."""
        try:
            for opp in result.opportunities:
                self.producer.send(
                    TOPICS["alerts"],
                    key=opp.asset.encode("utf-8"),
                    value=opp.to_json(),
                )
            self.producer.flush()
        except KafkaError as e:
            logger.error(f"[Publisher] Failed to publish opportunities: {e}")
            return 0
        logger.info(f"[Publisher] {len(result.opportunities)} opportunities published to {TOPICS['alerts']}.")
        return len(result.opportunities)

    def close(self):
        self.producer.close()

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaConnectionError, KafkaTimeoutError

from ..config import settings

logger = logging.getLogger(__name__)

# Топики событий checkout-сервиса
CART_ITEM_ADDED = "cart.item.added"
CART_ITEM_UPDATED = "cart.item.updated"
CART_ITEM_REMOVED = "cart.item.removed"
CART_CLEARED = "cart.cleared"
CART_ABANDONED = "cart.abandoned"
ORDER_CREATED = "order.created"


class CheckoutEventProducer:
    """Producer для отправки событий корзины и заказов"""

    def __init__(self):
        self.producer: Optional[AIOKafkaProducer] = None
        self.bootstrap_servers = settings.kafka_bootstrap_servers

    async def start(self):
        """Запуск Kafka продюсера"""
        if not settings.kafka_enabled:
            logger.info("Kafka disabled, events will not be published")
            return

        try:
            self.producer = AIOKafkaProducer(
                bootstrap_servers=self.bootstrap_servers,
                value_serializer=lambda v: json.dumps(v, default=str).encode('utf-8'),
                key_serializer=lambda k: k.encode('utf-8') if k else None,
                retry_backoff_ms=1000,
                request_timeout_ms=30000,
                acks='all',
                enable_idempotence=True
            )
            await self.producer.start()
            logger.info("✅ Checkout event producer started successfully")
        except Exception as e:
            self.producer = None
            logger.error(f"❌ Failed to start checkout event producer: {e}")
            raise

    async def stop(self):
        """Остановка Kafka продюсера"""
        if self.producer:
            try:
                await self.producer.stop()
                logger.info("✅ Checkout event producer stopped")
            except Exception as e:
                logger.error(f"❌ Error stopping checkout event producer: {e}")
            finally:
                self.producer = None

    async def publish_event(
            self,
            topic: str,
            event_type: str,
            payload: Dict[str, Any],
            key: Optional[str] = None
    ) -> bool:
        """
        Публикация события в Kafka. Ошибки не пробрасываются: запрос
        покупателя не должен падать из-за шины событий.

        Returns:
            bool: True если успешно отправлено
        """
        if not self.producer:
            logger.debug(f"Producer not started, skipping {event_type}")
            return False

        try:
            event = {
                "event_id": str(uuid.uuid4()),
                "event_type": event_type,
                "event_timestamp": datetime.now(timezone.utc).isoformat(),
                "producer_service": "checkout-service",
                "payload": payload
            }

            record_metadata = await self.producer.send_and_wait(topic, value=event, key=key)

            logger.info(
                f"📤 Event published: {event_type} to {topic} "
                f"(partition: {record_metadata.partition}, offset: {record_metadata.offset})"
            )
            return True

        except KafkaTimeoutError:
            logger.warning(f"⚠️ Timeout publishing event {event_type} to {topic}")
            return False
        except KafkaConnectionError:
            logger.warning(f"⚠️ Connection error publishing event {event_type} to {topic}")
            return False
        except Exception as e:
            logger.warning(f"⚠️ Error publishing event {event_type} to {topic}: {e}")
            return False


# Глобальный экземпляр продюсера
event_producer = CheckoutEventProducer()

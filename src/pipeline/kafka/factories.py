"""aiokafka producer and consumer factories.

Clients are constructed but not started; the runtime calls start()/stop().
"""

import logging
from typing import Any

from core.logging.utilities import log_with_context
from pipeline.common.factories import BaseProducerFactory
from pipeline.kafka.types import KafkaConnection, KafkaPublication, KafkaSubscription

logger = logging.getLogger(__name__)


class KafkaProducerFactory(BaseProducerFactory[KafkaConnection]):
    """One AIOKafkaProducer per publication, keyed by topic."""

    async def create(self) -> dict[str, Any]:
        from aiokafka import AIOKafkaProducer

        producers = {}
        for publication in self.publications:
            kwargs = self.connection.client_kwargs()
            if isinstance(publication, KafkaPublication):
                kwargs.update(publication.producer_kwargs())
            producers[publication.topic] = AIOKafkaProducer(**kwargs)

        log_with_context(
            logger,
            logging.INFO,
            "Created Kafka producers",
            provider="kafka",
            bootstrap_servers=",".join(self.connection.bootstrap_servers),
            publication_count=len(producers),
        )
        return producers


class KafkaConsumerFactory:
    def __init__(self, connection: KafkaConnection):
        self.connection = connection

    async def create(self, subscription: KafkaSubscription) -> Any:
        from aiokafka import AIOKafkaConsumer

        kwargs = self.connection.client_kwargs()
        if isinstance(subscription, KafkaSubscription):
            kwargs.update(subscription.consumer_kwargs())
        else:
            kwargs.update(group_id=subscription.name, enable_auto_commit=False)

        consumer = AIOKafkaConsumer(subscription.routing_key, **kwargs)
        log_with_context(
            logger,
            logging.INFO,
            "Created Kafka consumer",
            provider="kafka",
            subscription=subscription.name,
            routing_key=subscription.routing_key,
            consumer_group=kwargs["group_id"],
        )
        return consumer


__all__ = ["KafkaProducerFactory", "KafkaConsumerFactory"]

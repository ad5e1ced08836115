"""azure-eventhub producer and consumer factories."""

import logging
from typing import Any

from core.logging.utilities import log_with_context
from pipeline.common.factories import BaseProducerFactory
from pipeline.eventhub.types import (
    DEFAULT_CONSUMER_GROUP,
    EventHubConnection,
    EventHubSubscription,
)

logger = logging.getLogger(__name__)


class EventHubProducerFactory(BaseProducerFactory[EventHubConnection]):
    """One EventHubProducerClient per publication; the topic is the Event Hub name."""

    async def create(self) -> dict[str, Any]:
        from azure.eventhub.aio import EventHubProducerClient

        producers = {}
        for publication in self.publications:
            producers[publication.topic] = EventHubProducerClient.from_connection_string(
                eventhub_name=publication.topic,
                **self.connection.client_kwargs(),
            )

        log_with_context(
            logger,
            logging.INFO,
            "Created Event Hub producers",
            provider="eventhub",
            publication_count=len(producers),
        )
        return producers


class EventHubConsumerFactory:
    def __init__(self, connection: EventHubConnection):
        self.connection = connection

    async def _checkpoint_store(self) -> Any:
        if not (self.connection.storage_connection_string and self.connection.checkpoint_container):
            logger.info(
                "Checkpoint store not configured. "
                "Event Hub consumers will use in-memory checkpointing."
            )
            return None

        from azure.eventhub.extensions.checkpointstoreblobaio import BlobCheckpointStore

        logger.info(
            "Initializing BlobCheckpointStore",
            extra={"container_name": self.connection.checkpoint_container},
        )
        return BlobCheckpointStore.from_connection_string(
            conn_str=self.connection.storage_connection_string,
            container_name=self.connection.checkpoint_container,
        )

    async def create(self, subscription: EventHubSubscription) -> Any:
        from azure.eventhub.aio import EventHubConsumerClient

        consumer_group = getattr(subscription, "consumer_group", DEFAULT_CONSUMER_GROUP)
        kwargs = self.connection.client_kwargs()
        if isinstance(subscription, EventHubSubscription):
            kwargs["prefetch"] = subscription.prefetch

        consumer = EventHubConsumerClient.from_connection_string(
            consumer_group=consumer_group,
            eventhub_name=subscription.routing_key,
            checkpoint_store=await self._checkpoint_store(),
            **kwargs,
        )
        log_with_context(
            logger,
            logging.INFO,
            "Created Event Hub consumer",
            provider="eventhub",
            subscription=subscription.name,
            routing_key=subscription.routing_key,
            consumer_group=consumer_group,
        )
        return consumer


__all__ = ["EventHubProducerFactory", "EventHubConsumerFactory"]

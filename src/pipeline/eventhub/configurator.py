"""Event Hubs provider configurator.

Besides publications and subscriptions, Event Hubs can back an inbox
(processed-message records in blob storage) and a distributed lock (blob
leases). Both need the connection's storage connection string; their
container names default to "<namespace>-inbox" and "<namespace>-locks".
"""

from typing import Any

from pipeline.common.configurator import ProviderConfigurator
from pipeline.eventhub.builders import (
    EventHubConnectionBuilder,
    EventHubDistributedLockBuilder,
    EventHubInboxBuilder,
    EventHubProducerFactoryBuilder,
    EventHubSubscriptionConfigurator,
)
from pipeline.eventhub.factories import EventHubConsumerFactory
from pipeline.eventhub.types import EventHubConnection


class EventHubConfigurator(ProviderConfigurator):
    provider = "eventhub"
    connection_type = EventHubConnection
    connection_builder_class = EventHubConnectionBuilder
    producer_factory_builder_class = EventHubProducerFactoryBuilder
    subscription_configurator_class = EventHubSubscriptionConfigurator
    consumer_factory_class = EventHubConsumerFactory
    supported_stores = frozenset({"inbox", "distributed_lock"})

    _store_builders = {
        "inbox": EventHubInboxBuilder,
        "distributed_lock": EventHubDistributedLockBuilder,
    }

    def create_store_builder(self, slot: str, connection: Any) -> Any:
        return self._store_builders[slot](connection)


__all__ = ["EventHubConfigurator"]

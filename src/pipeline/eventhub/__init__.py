"""Azure Event Hubs provider (azure-eventhub, azure-storage-blob)."""

from pipeline.eventhub.builders import (
    EventHubConnectionBuilder,
    EventHubDistributedLockBuilder,
    EventHubInboxBuilder,
    EventHubProducerFactoryBuilder,
    EventHubPublicationBuilder,
    EventHubSubscriptionBuilder,
    EventHubSubscriptionConfigurator,
)
from pipeline.eventhub.configurator import EventHubConfigurator
from pipeline.eventhub.factories import EventHubConsumerFactory, EventHubProducerFactory
from pipeline.eventhub.types import (
    BlobInboxConfig,
    BlobLeaseLockConfig,
    EventHubConnection,
    EventHubPublication,
    EventHubSubscription,
    EventHubTransportType,
)

__all__ = [
    "EventHubConfigurator",
    "EventHubConnection",
    "EventHubConnectionBuilder",
    "EventHubTransportType",
    "EventHubPublication",
    "EventHubPublicationBuilder",
    "EventHubSubscription",
    "EventHubSubscriptionBuilder",
    "EventHubSubscriptionConfigurator",
    "EventHubProducerFactoryBuilder",
    "EventHubProducerFactory",
    "EventHubConsumerFactory",
    "EventHubInboxBuilder",
    "EventHubDistributedLockBuilder",
    "BlobInboxConfig",
    "BlobLeaseLockConfig",
]

"""PostgreSQL provider (asyncpg): queue table transport, outbox, inbox, lock."""

from pipeline.postgres.builders import (
    PostgresDistributedLockBuilder,
    PostgresInboxBuilder,
    PostgresOutboxBuilder,
    PostgresProducerFactoryBuilder,
    PostgresPublicationBuilder,
    PostgresSubscriptionBuilder,
    PostgresSubscriptionConfigurator,
    RelationalDatabaseConfigurationBuilder,
)
from pipeline.postgres.configurator import PostgresConfigurator
from pipeline.postgres.factories import PostgresConsumerFactory, PostgresProducerFactory
from pipeline.postgres.types import (
    PostgresConnection,
    PostgresInboxConfig,
    PostgresLockConfig,
    PostgresOutboxConfig,
    PostgresPublication,
    PostgresSubscription,
    RelationalDatabaseConfiguration,
)

__all__ = [
    "PostgresConfigurator",
    "PostgresConnection",
    "RelationalDatabaseConfiguration",
    "RelationalDatabaseConfigurationBuilder",
    "PostgresPublication",
    "PostgresPublicationBuilder",
    "PostgresSubscription",
    "PostgresSubscriptionBuilder",
    "PostgresSubscriptionConfigurator",
    "PostgresProducerFactoryBuilder",
    "PostgresProducerFactory",
    "PostgresConsumerFactory",
    "PostgresOutboxBuilder",
    "PostgresOutboxConfig",
    "PostgresInboxBuilder",
    "PostgresInboxConfig",
    "PostgresDistributedLockBuilder",
    "PostgresLockConfig",
]

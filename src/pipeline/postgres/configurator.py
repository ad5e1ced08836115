"""PostgreSQL provider configurator.

set_connection() takes a RelationalDatabaseConfiguration, a
PostgresConnection, or a callback receiving a
RelationalDatabaseConfigurationBuilder. The outbox, inbox and distributed
lock all reuse the connection's configuration unless their own callback
replaces it.

Example:
    composer.using(PostgresConfigurator, lambda pg: (
        pg
        .set_connection(lambda c: c.set_connection_string(dsn).set_schema_name("messaging"))
        .use_outbox()
        .use_inbox()
        .use_subscriptions(lambda s: s.add_subscription(lambda b: b, OrderEvent))
    ))
"""

from typing import Any

from pipeline.common.configurator import ProviderConfigurator
from pipeline.postgres.builders import (
    PostgresDistributedLockBuilder,
    PostgresInboxBuilder,
    PostgresOutboxBuilder,
    PostgresProducerFactoryBuilder,
    PostgresSubscriptionConfigurator,
    RelationalDatabaseConfigurationBuilder,
)
from pipeline.postgres.factories import PostgresConsumerFactory
from pipeline.postgres.types import PostgresConnection, RelationalDatabaseConfiguration


class PostgresConfigurator(ProviderConfigurator):
    provider = "postgres"
    connection_type = PostgresConnection
    connection_builder_class = RelationalDatabaseConfigurationBuilder
    producer_factory_builder_class = PostgresProducerFactoryBuilder
    subscription_configurator_class = PostgresSubscriptionConfigurator
    consumer_factory_class = PostgresConsumerFactory
    supported_stores = frozenset({"outbox", "inbox", "distributed_lock"})

    _store_builders = {
        "outbox": PostgresOutboxBuilder,
        "inbox": PostgresInboxBuilder,
        "distributed_lock": PostgresDistributedLockBuilder,
    }

    def set_connection(self, connection: Any) -> "PostgresConfigurator":
        if isinstance(connection, RelationalDatabaseConfiguration):
            connection = PostgresConnection(connection)
        return super().set_connection(connection)

    def _coerce_connection(self, built: RelationalDatabaseConfiguration) -> PostgresConnection:
        return PostgresConnection(built)

    def create_store_builder(self, slot: str, connection: PostgresConnection) -> Any:
        return self._store_builders[slot](connection.configuration)


__all__ = ["PostgresConfigurator"]

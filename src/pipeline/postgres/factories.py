"""asyncpg backed producer and consumer factories.

The Postgres transport is a queue table; producers and consumers are
connection pools against the configured database.
"""

import logging
from typing import Any

from core.logging.utilities import log_with_context
from pipeline.common.factories import BaseProducerFactory
from pipeline.postgres.types import PostgresConnection, PostgresSubscription, create_pool

logger = logging.getLogger(__name__)


class PostgresProducerFactory(BaseProducerFactory[PostgresConnection]):
    """All publications share one pool; the topic selects rows in the queue table."""

    async def create(self) -> dict[str, Any]:
        if not self.publications:
            return {}

        pool = await create_pool(self.connection.configuration)
        producers = {publication.topic: pool for publication in self.publications}

        log_with_context(
            logger,
            logging.INFO,
            "Created Postgres producers",
            provider="postgres",
            database=self.connection.configuration.database_name,
            publication_count=len(producers),
        )
        return producers


class PostgresConsumerFactory:
    def __init__(self, connection: PostgresConnection):
        self.connection = connection

    async def create(self, subscription: PostgresSubscription) -> Any:
        pool = await create_pool(
            self.connection.configuration,
            min_size=1,
            max_size=max(subscription.no_of_performers, 1),
        )
        log_with_context(
            logger,
            logging.INFO,
            "Created Postgres consumer",
            provider="postgres",
            subscription=subscription.name,
            routing_key=subscription.routing_key,
            database=self.connection.configuration.database_name,
        )
        return pool


__all__ = ["PostgresProducerFactory", "PostgresConsumerFactory"]

"""Tests for the asyncpg pool factories."""

from unittest.mock import AsyncMock, patch

import pytest

from pipeline.common.types import Publication, Subscription
from pipeline.postgres.factories import PostgresConsumerFactory, PostgresProducerFactory
from pipeline.postgres.types import (
    PostgresConnection,
    PostgresInboxConfig,
    PostgresLockConfig,
    PostgresOutboxConfig,
    RelationalDatabaseConfiguration,
)

DSN = "postgresql://app:secret@db:5432/orders"


@pytest.fixture
def configuration():
    return RelationalDatabaseConfiguration(DSN, schema_name="messaging")


@pytest.fixture
def create_pool():
    with patch("asyncpg.create_pool", new_callable=AsyncMock) as mock:
        yield mock


class TestPostgresProducerFactory:

    @pytest.mark.asyncio
    async def test_publications_share_one_pool(self, configuration, create_pool):
        factory = PostgresProducerFactory(
            PostgresConnection(configuration),
            [Publication(topic="orders"), Publication(topic="refunds")],
        )

        producers = await factory.create()

        create_pool.assert_awaited_once_with(
            dsn=DSN, server_settings={"search_path": "messaging,public"}
        )
        assert producers == {"orders": create_pool.return_value, "refunds": create_pool.return_value}

    @pytest.mark.asyncio
    async def test_no_publications_opens_no_pool(self, configuration, create_pool):
        factory = PostgresProducerFactory(PostgresConnection(configuration), [])

        assert await factory.create() == {}
        create_pool.assert_not_awaited()


class TestPostgresConsumerFactory:

    @pytest.mark.asyncio
    async def test_pool_sized_by_performers(self, configuration, create_pool):
        subscription = Subscription(
            name="billing", channel_name="orders", routing_key="orders", no_of_performers=4
        )

        pool = await PostgresConsumerFactory(PostgresConnection(configuration)).create(subscription)

        assert pool is create_pool.return_value
        kwargs = create_pool.call_args.kwargs
        assert kwargs["min_size"] == 1
        assert kwargs["max_size"] == 4
        assert kwargs["dsn"] == DSN


class TestStorePools:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("config_class", [PostgresOutboxConfig, PostgresInboxConfig, PostgresLockConfig])
    async def test_create_pool(self, configuration, create_pool, config_class):
        pool = await config_class(configuration).create_pool(max_size=2)

        assert pool is create_pool.return_value
        create_pool.assert_awaited_once_with(
            dsn=DSN, server_settings={"search_path": "messaging,public"}, max_size=2
        )

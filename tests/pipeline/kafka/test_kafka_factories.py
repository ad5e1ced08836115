"""Tests for the aiokafka producer and consumer factories."""

from unittest.mock import patch

import pytest

from pipeline.common.types import Publication, Subscription
from pipeline.kafka.builders import KafkaPublicationBuilder, KafkaSubscriptionBuilder
from pipeline.kafka.factories import KafkaConsumerFactory, KafkaProducerFactory
from pipeline.kafka.types import KafkaConnection


@pytest.fixture
def connection():
    return KafkaConnection(bootstrap_servers=("b1:9092", "b2:9092"), name="billing")


class TestKafkaProducerFactory:

    @pytest.mark.asyncio
    async def test_one_producer_per_topic(self, connection):
        publications = [
            KafkaPublicationBuilder().set_topic("orders").build(),
            KafkaPublicationBuilder().set_topic("refunds").set_linger_ms(50).build(),
        ]

        with patch("aiokafka.AIOKafkaProducer") as producer_cls:
            producers = await KafkaProducerFactory(connection, publications).create()

        assert set(producers) == {"orders", "refunds"}
        assert producer_cls.call_count == 2
        refunds_kwargs = producer_cls.call_args_list[1].kwargs
        assert refunds_kwargs["bootstrap_servers"] == ["b1:9092", "b2:9092"]
        assert refunds_kwargs["client_id"] == "billing"
        assert refunds_kwargs["linger_ms"] == 50
        assert refunds_kwargs["acks"] == "all"

    @pytest.mark.asyncio
    async def test_plain_publication_uses_connection_only(self, connection):
        with patch("aiokafka.AIOKafkaProducer") as producer_cls:
            await KafkaProducerFactory(connection, [Publication(topic="audit")]).create()

        assert "acks" not in producer_cls.call_args.kwargs

    @pytest.mark.asyncio
    async def test_no_publications(self, connection):
        with patch("aiokafka.AIOKafkaProducer") as producer_cls:
            producers = await KafkaProducerFactory(connection, []).create()

        assert producers == {}
        producer_cls.assert_not_called()


class TestKafkaConsumerFactory:

    @pytest.mark.asyncio
    async def test_creates_consumer_for_routing_key(self, connection):
        subscription = (
            KafkaSubscriptionBuilder()
            .set_name("billing.orders")
            .set_channel_name("orders")
            .set_routing_key("orders.created")
            .set_consumer_group_id("billing")
            .build()
        )

        with patch("aiokafka.AIOKafkaConsumer") as consumer_cls:
            consumer = await KafkaConsumerFactory(connection).create(subscription)

        assert consumer is consumer_cls.return_value
        args, kwargs = consumer_cls.call_args
        assert args == ("orders.created",)
        assert kwargs["group_id"] == "billing"
        assert kwargs["enable_auto_commit"] is False
        assert kwargs["bootstrap_servers"] == ["b1:9092", "b2:9092"]

    @pytest.mark.asyncio
    async def test_plain_subscription_groups_by_name(self, connection):
        subscription = Subscription(name="audit", channel_name="audit", routing_key="audit.events")

        with patch("aiokafka.AIOKafkaConsumer") as consumer_cls:
            await KafkaConsumerFactory(connection).create(subscription)

        assert consumer_cls.call_args.kwargs["group_id"] == "audit"

"""End-to-end composition through KafkaConfigurator."""

import pytest
from pydantic import BaseModel

from core.errors.exceptions import InvalidArgumentError, MissingConnectionError
from pipeline.common.composer import PipelineComposer
from pipeline.kafka import (
    KafkaConfigurator,
    KafkaConnection,
    KafkaConsumerFactory,
    KafkaProducerFactory,
    KafkaPublication,
    KafkaSubscription,
)


class OrderEvent(BaseModel):
    order_id: str


class TestKafkaConfigurator:

    def test_compose_publications_and_subscriptions(self):
        registration = (
            PipelineComposer()
            .using(
                KafkaConfigurator,
                lambda kafka: (
                    kafka.use_publications(
                        lambda p: p.add_publication(lambda b: b.set_topic("orders"), OrderEvent)
                    )
                    .use_subscriptions(
                        lambda s: s.add_subscription(
                            lambda b: b.set_consumer_group_id("billing"), OrderEvent
                        )
                    )
                    .set_connection(lambda c: c.set_bootstrap_servers("localhost:9092"))
                ),
            )
            .build()
        )

        producer_factory = registration.producers[0]
        assert isinstance(producer_factory, KafkaProducerFactory)
        assert producer_factory.connection == KafkaConnection(bootstrap_servers=("localhost:9092",))
        assert isinstance(producer_factory.publications[0], KafkaPublication)
        assert producer_factory.topics == ["orders"]

        channel = registration.channels[0]
        assert isinstance(channel.channel_factory.consumer_factory, KafkaConsumerFactory)
        subscription = channel.subscriptions[0]
        assert isinstance(subscription, KafkaSubscription)
        assert subscription.routing_key == "OrderEvent"
        assert subscription.consumer_group == "billing"

    def test_accepts_built_connection(self):
        connection = KafkaConnection(bootstrap_servers=("b:9092",))
        configurator = KafkaConfigurator().set_connection(connection)

        assert configurator.connection is connection

    @pytest.mark.parametrize("method", ["use_outbox", "use_inbox", "use_distributed_lock"])
    def test_offers_no_stores(self, method):
        with pytest.raises(InvalidArgumentError, match="kafka"):
            getattr(KafkaConfigurator(), method)()

    def test_missing_connection_fails_build(self):
        composer = PipelineComposer().using(
            KafkaConfigurator, lambda kafka: kafka.use_publications(lambda p: None)
        )

        with pytest.raises(MissingConnectionError, match="kafka"):
            composer.build()

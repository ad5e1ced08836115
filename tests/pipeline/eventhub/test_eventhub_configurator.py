"""End-to-end composition through EventHubConfigurator."""

import pytest
from pydantic import BaseModel

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.common.composer import PipelineComposer
from pipeline.eventhub import (
    BlobInboxConfig,
    BlobLeaseLockConfig,
    EventHubConfigurator,
    EventHubConsumerFactory,
    EventHubProducerFactory,
    EventHubSubscription,
)

NAMESPACE_CONN = "Endpoint=sb://orders.servicebus.windows.net/;SharedAccessKeyName=k;SharedAccessKey=v"
STORAGE_CONN = "DefaultEndpointsProtocol=https;AccountName=acct;AccountKey=key"


class OrderEvent(BaseModel):
    order_id: str


def _connection(c):
    c.set_connection_string(NAMESPACE_CONN).set_storage_connection_string(STORAGE_CONN)


class TestEventHubConfigurator:

    def test_full_composition(self):
        registration = (
            PipelineComposer()
            .using(
                EventHubConfigurator,
                lambda eh: (
                    eh.use_publications(lambda p: p.add_publication(lambda b: None, OrderEvent))
                    .use_subscriptions(
                        lambda s: s.add_subscription(lambda b: b.set_consumer_group("billing"), OrderEvent)
                    )
                    .use_inbox()
                    .use_distributed_lock(lambda b: b.set_lease_duration(30))
                    .set_connection(_connection)
                ),
            )
            .build()
        )

        assert isinstance(registration.producers[0], EventHubProducerFactory)
        assert registration.producers[0].topics == ["OrderEvent"]

        channel = registration.channels[0]
        assert isinstance(channel.channel_factory.consumer_factory, EventHubConsumerFactory)
        assert isinstance(channel.subscriptions[0], EventHubSubscription)
        assert channel.subscriptions[0].consumer_group == "billing"

        assert registration.inbox == BlobInboxConfig(STORAGE_CONN, "orders-inbox")
        assert registration.distributed_lock == BlobLeaseLockConfig(STORAGE_CONN, "orders-locks", 30)

    def test_no_outbox(self):
        with pytest.raises(InvalidArgumentError, match="outbox"):
            EventHubConfigurator().use_outbox()

    def test_inbox_without_storage_fails_build(self):
        composer = PipelineComposer().using(
            EventHubConfigurator,
            lambda eh: eh.use_inbox().set_connection(lambda c: c.set_connection_string(NAMESPACE_CONN)),
        )

        with pytest.raises(MissingRequiredFieldError, match="storage_connection_string"):
            composer.build()
        assert not composer.finalized

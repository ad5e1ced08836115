"""Tests for the Event Hubs producer/consumer factories and blob store clients."""

from unittest.mock import MagicMock, patch

import pytest

from pipeline.common.types import Publication, Subscription
from pipeline.eventhub.factories import EventHubConsumerFactory, EventHubProducerFactory
from pipeline.eventhub.types import (
    BlobInboxConfig,
    BlobLeaseLockConfig,
    EventHubConnection,
    EventHubSubscription,
)

NAMESPACE_CONN = "Endpoint=sb://orders.servicebus.windows.net/;SharedAccessKeyName=k;SharedAccessKey=v"
STORAGE_CONN = "DefaultEndpointsProtocol=https;AccountName=acct;AccountKey=key"

PRODUCER_CLIENT = "azure.eventhub.aio.EventHubProducerClient.from_connection_string"
CONSUMER_CLIENT = "azure.eventhub.aio.EventHubConsumerClient.from_connection_string"
CHECKPOINT_STORE = (
    "azure.eventhub.extensions.checkpointstoreblobaio.BlobCheckpointStore.from_connection_string"
)
BLOB_SERVICE = "azure.storage.blob.aio.BlobServiceClient.from_connection_string"


class TestEventHubProducerFactory:

    @pytest.mark.asyncio
    async def test_one_client_per_event_hub(self):
        connection = EventHubConnection(NAMESPACE_CONN)
        publications = [Publication(topic="orders"), Publication(topic="refunds")]

        with patch(PRODUCER_CLIENT) as from_conn:
            producers = await EventHubProducerFactory(connection, publications).create()

        assert set(producers) == {"orders", "refunds"}
        names = [c.kwargs["eventhub_name"] for c in from_conn.call_args_list]
        assert names == ["orders", "refunds"]
        assert from_conn.call_args.kwargs["conn_str"] == NAMESPACE_CONN


class TestEventHubConsumerFactory:

    @pytest.mark.asyncio
    async def test_without_checkpoint_store(self):
        factory = EventHubConsumerFactory(EventHubConnection(NAMESPACE_CONN))
        subscription = EventHubSubscription(
            name="billing", channel_name="orders", routing_key="orders", consumer_group="billing"
        )

        with patch(CONSUMER_CLIENT) as from_conn:
            consumer = await factory.create(subscription)

        assert consumer is from_conn.return_value
        kwargs = from_conn.call_args.kwargs
        assert kwargs["consumer_group"] == "billing"
        assert kwargs["eventhub_name"] == "orders"
        assert kwargs["checkpoint_store"] is None
        assert kwargs["prefetch"] == 300

    @pytest.mark.asyncio
    async def test_with_checkpoint_store(self):
        connection = EventHubConnection(
            NAMESPACE_CONN,
            storage_connection_string=STORAGE_CONN,
            checkpoint_container="orders-checkpoints",
        )
        subscription = Subscription(name="audit", channel_name="audit", routing_key="audit")

        with patch(CONSUMER_CLIENT) as from_conn, patch(CHECKPOINT_STORE) as store:
            await EventHubConsumerFactory(connection).create(subscription)

        store.assert_called_once_with(conn_str=STORAGE_CONN, container_name="orders-checkpoints")
        kwargs = from_conn.call_args.kwargs
        assert kwargs["checkpoint_store"] is store.return_value
        assert kwargs["consumer_group"] == "$Default"
        assert "prefetch" not in kwargs


class TestBlobStoreClients:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "config",
        [BlobInboxConfig(STORAGE_CONN, "orders-inbox"), BlobLeaseLockConfig(STORAGE_CONN, "orders-locks")],
    )
    async def test_create_container_client(self, config):
        service = MagicMock()

        with patch(BLOB_SERVICE, return_value=service) as from_conn:
            client = await config.create_container_client()

        from_conn.assert_called_once_with(STORAGE_CONN)
        service.get_container_client.assert_called_once_with(config.container_name)
        assert client is service.get_container_client.return_value

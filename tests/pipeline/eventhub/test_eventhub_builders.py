"""Tests for the Event Hubs builders and blob store builders."""

import pytest
from pydantic import BaseModel

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.eventhub.builders import (
    EventHubConnectionBuilder,
    EventHubDistributedLockBuilder,
    EventHubInboxBuilder,
    EventHubPublicationBuilder,
    EventHubSubscriptionBuilder,
    require_container_name,
)
from pipeline.eventhub.types import (
    BlobInboxConfig,
    BlobLeaseLockConfig,
    EventHubConnection,
    EventHubTransportType,
    namespace_of,
)

NAMESPACE_CONN = (
    "Endpoint=sb://Orders-Prod.servicebus.windows.net/;"
    "SharedAccessKeyName=send;SharedAccessKey=abc123="
)
STORAGE_CONN = "DefaultEndpointsProtocol=https;AccountName=acct;AccountKey=key;EndpointSuffix=core.windows.net"


class OrderEvent(BaseModel):
    order_id: str


class TestNamespaceOf:

    def test_extracts_lowercase_namespace(self):
        assert namespace_of(NAMESPACE_CONN) == "orders-prod"

    def test_unrecognised_string(self):
        assert namespace_of("HostName=foo") is None


class TestRequireContainerName:

    @pytest.mark.parametrize("name", ["abc", "orders-prod-inbox", "a" * 63])
    def test_valid(self, name):
        assert require_container_name("container_name", name) == name

    @pytest.mark.parametrize("name", ["ab", "Orders", "a--b", "-abc", "abc-", "a" * 64, "a_b"])
    def test_invalid(self, name):
        with pytest.raises(InvalidArgumentError, match="container_name"):
            require_container_name("container_name", name)


class TestEventHubConnectionBuilder:

    def test_defaults(self):
        connection = EventHubConnectionBuilder().set_connection_string(NAMESPACE_CONN).build()

        assert connection.connection_string == NAMESPACE_CONN
        assert connection.transport_type == EventHubTransportType.AMQP_OVER_WEBSOCKET
        assert connection.storage_connection_string is None
        assert connection.namespace == "orders-prod"

    def test_strips_entity_path(self):
        connection = (
            EventHubConnectionBuilder()
            .set_connection_string(NAMESPACE_CONN + ";EntityPath=orders")
            .build()
        )

        assert "EntityPath" not in connection.connection_string

    def test_missing_connection_string(self):
        with pytest.raises(MissingRequiredFieldError, match="connection_string"):
            EventHubConnectionBuilder().build()

    def test_transport_type_from_string(self):
        connection = (
            EventHubConnectionBuilder()
            .set_connection_string(NAMESPACE_CONN)
            .set_transport_type("Amqp")
            .build()
        )

        assert connection.transport_type == EventHubTransportType.AMQP

    def test_invalid_transport_type(self):
        with pytest.raises(InvalidArgumentError, match="transport_type"):
            EventHubConnectionBuilder().set_transport_type("http")

    def test_invalid_checkpoint_container(self):
        with pytest.raises(InvalidArgumentError, match="checkpoint_container"):
            EventHubConnectionBuilder().set_checkpoint_container("Bad_Name")

    def test_repr_hides_keys(self):
        connection = (
            EventHubConnectionBuilder()
            .set_connection_string(NAMESPACE_CONN)
            .set_storage_connection_string(STORAGE_CONN)
            .build()
        )

        text = repr(connection)
        assert "abc123" not in text
        assert "AccountKey" not in text
        assert "orders-prod" in text

    def test_client_kwargs_use_sdk_transport(self):
        from azure.eventhub import TransportType

        connection = EventHubConnection(NAMESPACE_CONN, transport_type=EventHubTransportType.AMQP)

        assert connection.client_kwargs() == {
            "conn_str": NAMESPACE_CONN,
            "transport_type": TransportType.Amqp,
        }


class TestEventHubPublicationBuilder:

    def test_partition_key(self):
        publication = (
            EventHubPublicationBuilder()
            .set_data_type(OrderEvent)
            .set_partition_key("customer-42")
            .build()
        )

        assert publication.topic == "OrderEvent"
        assert publication.partition_key == "customer-42"
        assert publication.partition_id is None

    def test_key_and_id_are_exclusive(self):
        builder = (
            EventHubPublicationBuilder()
            .set_topic("orders")
            .set_partition_key("k")
            .set_partition_id("0")
        )

        with pytest.raises(InvalidArgumentError, match="partition_key"):
            builder.build()


class TestEventHubSubscriptionBuilder:

    def test_defaults(self):
        subscription = EventHubSubscriptionBuilder().set_data_type(OrderEvent).build()

        assert subscription.consumer_group == "$Default"
        assert subscription.starting_position == "-1"
        assert subscription.owner_level is None
        assert subscription.prefetch == 300

    def test_settings(self):
        subscription = (
            EventHubSubscriptionBuilder()
            .set_data_type(OrderEvent)
            .set_routing_key("orders")
            .set_consumer_group("billing")
            .set_starting_position("@latest")
            .set_owner_level(1)
            .set_prefetch(50)
            .build()
        )

        assert subscription.routing_key == "orders"
        assert subscription.consumer_group == "billing"
        assert subscription.starting_position == "@latest"
        assert subscription.owner_level == 1
        assert subscription.prefetch == 50

    def test_blank_consumer_group(self):
        with pytest.raises(InvalidArgumentError, match="consumer_group"):
            EventHubSubscriptionBuilder().set_consumer_group("")

    def test_prefetch_minimum(self):
        with pytest.raises(InvalidArgumentError, match="prefetch"):
            EventHubSubscriptionBuilder().set_prefetch(0)


class TestEventHubInboxBuilder:

    @pytest.fixture
    def connection(self):
        return EventHubConnection(NAMESPACE_CONN, storage_connection_string=STORAGE_CONN)

    def test_defaults_from_connection(self, connection):
        inbox = EventHubInboxBuilder(connection).build()

        assert inbox == BlobInboxConfig(STORAGE_CONN, "orders-prod-inbox", 86400)

    def test_overrides(self, connection):
        inbox = (
            EventHubInboxBuilder(connection)
            .set_container_name("dedup")
            .set_ttl_seconds(3600)
            .build()
        )

        assert inbox.container_name == "dedup"
        assert inbox.ttl_seconds == 3600

    def test_requires_storage(self):
        builder = EventHubInboxBuilder(EventHubConnection(NAMESPACE_CONN))

        with pytest.raises(MissingRequiredFieldError, match="storage_connection_string"):
            builder.build()

    def test_requires_container_without_namespace(self):
        builder = EventHubInboxBuilder().set_storage_connection_string(STORAGE_CONN)

        with pytest.raises(MissingRequiredFieldError, match="container_name"):
            builder.build()

    def test_ttl_minimum(self):
        with pytest.raises(InvalidArgumentError, match="ttl_seconds"):
            EventHubInboxBuilder().set_ttl_seconds(0)

    def test_repr_hides_storage(self, connection):
        assert "AccountKey" not in repr(EventHubInboxBuilder(connection).build())


class TestEventHubDistributedLockBuilder:

    @pytest.fixture
    def connection(self):
        return EventHubConnection(NAMESPACE_CONN, storage_connection_string=STORAGE_CONN)

    def test_defaults_from_connection(self, connection):
        lock = EventHubDistributedLockBuilder(connection).build()

        assert lock == BlobLeaseLockConfig(STORAGE_CONN, "orders-prod-locks", 60)

    @pytest.mark.parametrize("seconds", [15, 30, 60, -1])
    def test_valid_lease(self, connection, seconds):
        lock = EventHubDistributedLockBuilder(connection).set_lease_duration(seconds).build()
        assert lock.lease_duration_seconds == seconds

    @pytest.mark.parametrize("seconds", [0, 14, 61, -2])
    def test_invalid_lease(self, seconds):
        with pytest.raises(InvalidArgumentError, match="lease_duration_seconds"):
            EventHubDistributedLockBuilder().set_lease_duration(seconds)

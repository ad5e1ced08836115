"""Tests for the Kafka builders and the aiokafka kwargs they produce."""

import pytest
from pydantic import BaseModel

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.kafka.builders import (
    KafkaConnectionBuilder,
    KafkaPublicationBuilder,
    KafkaSubscriptionBuilder,
)
from pipeline.kafka.types import (
    Acks,
    AutoOffsetReset,
    CompressionType,
    KafkaConnection,
    PartitionAssignmentStrategy,
    SaslMechanism,
    SecurityProtocol,
)


class OrderEvent(BaseModel):
    order_id: str


class TestKafkaConnectionBuilder:

    def test_minimal(self):
        connection = KafkaConnectionBuilder().set_bootstrap_servers("localhost:9092").build()

        assert connection.bootstrap_servers == ("localhost:9092",)
        assert connection.security_protocol == SecurityProtocol.PLAINTEXT
        assert connection.request_timeout_ms == 120000

    def test_splits_comma_separated_servers(self):
        connection = (
            KafkaConnectionBuilder()
            .set_bootstrap_servers("broker1:9092, broker2:9092", "broker3:9092")
            .build()
        )

        assert connection.bootstrap_servers == ("broker1:9092", "broker2:9092", "broker3:9092")

    def test_accepts_server_list(self):
        connection = (
            KafkaConnectionBuilder()
            .set_bootstrap_servers(["a:9092", "b:9092"], ("c:9092, d:9092",))
            .build()
        )

        assert connection.bootstrap_servers == ("a:9092", "b:9092", "c:9092", "d:9092")

    @pytest.mark.parametrize("value", [9092, None, ["a:9092", 9093]])
    def test_rejects_non_string_servers(self, value):
        with pytest.raises(InvalidArgumentError, match="bootstrap_servers"):
            KafkaConnectionBuilder().set_bootstrap_servers(value)

    def test_missing_bootstrap_servers(self):
        with pytest.raises(MissingRequiredFieldError, match="bootstrap_servers"):
            KafkaConnectionBuilder().build()

    def test_blank_bootstrap_servers(self):
        with pytest.raises(MissingRequiredFieldError):
            KafkaConnectionBuilder().set_bootstrap_servers(" , ").build()

    def test_password_mechanism_requires_credentials(self):
        builder = (
            KafkaConnectionBuilder()
            .set_bootstrap_servers("b:9093")
            .set_security_protocol("SASL_SSL")
            .set_sasl_mechanism("SCRAM-SHA-512")
        )

        with pytest.raises(MissingRequiredFieldError, match="sasl_username"):
            builder.build()

        builder.set_sasl_username("svc")
        with pytest.raises(MissingRequiredFieldError, match="sasl_password"):
            builder.build()

    def test_invalid_security_protocol(self):
        with pytest.raises(InvalidArgumentError, match="security_protocol"):
            KafkaConnectionBuilder().set_security_protocol("TLS")

    def test_request_timeout_must_be_positive(self):
        with pytest.raises(InvalidArgumentError, match="request_timeout_ms"):
            KafkaConnectionBuilder().set_request_timeout(0)


class TestKafkaConnectionKwargs:

    def test_plaintext_kwargs(self):
        connection = KafkaConnection(bootstrap_servers=("b:9092",), name="billing")

        assert connection.client_kwargs() == {
            "bootstrap_servers": ["b:9092"],
            "request_timeout_ms": 120000,
            "metadata_max_age_ms": 300000,
            "connections_max_idle_ms": 540000,
            "client_id": "billing",
        }

    def test_sasl_plain_kwargs(self):
        connection = (
            KafkaConnectionBuilder()
            .set_bootstrap_servers("b:9093")
            .set_security_protocol(SecurityProtocol.SASL_SSL)
            .set_sasl_mechanism(SaslMechanism.PLAIN)
            .set_sasl_username("svc")
            .set_sasl_password("secret")
            .build()
        )

        kwargs = connection.client_kwargs()
        assert kwargs["security_protocol"] == "SASL_SSL"
        assert kwargs["sasl_mechanism"] == "PLAIN"
        assert kwargs["sasl_plain_username"] == "svc"
        assert kwargs["sasl_plain_password"] == "secret"

    def test_gssapi_service_name(self):
        connection = KafkaConnection(
            bootstrap_servers=("b:9093",),
            security_protocol=SecurityProtocol.SASL_PLAINTEXT,
            sasl_mechanism=SaslMechanism.GSSAPI,
            sasl_kerberos_service_name="kafka",
        )

        kwargs = connection.client_kwargs()
        assert kwargs["sasl_kerberos_service_name"] == "kafka"
        assert "sasl_plain_username" not in kwargs

    def test_repr_hides_password(self):
        connection = KafkaConnection(
            bootstrap_servers=("b:9093",),
            sasl_mechanism=SaslMechanism.PLAIN,
            sasl_username="svc",
            sasl_password="secret",
        )

        assert "secret" not in repr(connection)


class TestKafkaPublicationBuilder:

    def test_defaults(self):
        publication = KafkaPublicationBuilder().set_topic("orders").build()

        assert publication.replication == Acks.ALL
        assert publication.enable_idempotence is True
        assert publication.linger_ms == 5
        assert publication.compression_type is None

    def test_data_type_derives_topic(self):
        publication = KafkaPublicationBuilder().set_data_type(OrderEvent).build()

        assert publication.topic == "OrderEvent"
        assert publication.request_type is OrderEvent

    def test_producer_kwargs(self):
        publication = (
            KafkaPublicationBuilder()
            .set_topic("orders")
            .set_enable_idempotence(False)
            .set_replication("1")
            .set_linger_ms(20)
            .set_compression_type("lz4")
            .set_transactional_id("orders-tx")
            .build()
        )

        assert publication.producer_kwargs() == {
            "acks": 1,
            "enable_idempotence": False,
            "linger_ms": 20,
            "request_timeout_ms": 500,
            "retry_backoff_ms": 100,
            "compression_type": "lz4",
            "transactional_id": "orders-tx",
        }

    def test_acks_all_stays_string(self):
        publication = KafkaPublicationBuilder().set_topic("orders").build()
        assert publication.producer_kwargs()["acks"] == "all"

    def test_idempotence_requires_acks_all(self):
        builder = KafkaPublicationBuilder().set_topic("orders").set_replication(Acks.LEADER)

        with pytest.raises(InvalidArgumentError, match="replication"):
            builder.build()

    def test_compression_none_clears(self):
        publication = (
            KafkaPublicationBuilder()
            .set_topic("orders")
            .set_compression_type(CompressionType.GZIP)
            .set_compression_type("none")
            .build()
        )

        assert publication.compression_type is None

    @pytest.mark.parametrize(
        "setter,value",
        [
            ("set_batch_number_messages", 0),
            ("set_linger_ms", -1),
            ("set_num_partitions", 0),
            ("set_max_in_flight_requests_per_connection", 0),
        ],
    )
    def test_out_of_range(self, setter, value):
        with pytest.raises(InvalidArgumentError):
            getattr(KafkaPublicationBuilder(), setter)(value)

    def test_blank_transactional_id(self):
        with pytest.raises(InvalidArgumentError, match="transactional_id"):
            KafkaPublicationBuilder().set_transactional_id(" ")


class TestKafkaSubscriptionBuilder:

    def test_group_defaults_to_subscription_name(self):
        subscription = KafkaSubscriptionBuilder().set_data_type(OrderEvent).build()

        assert subscription.group_id is None
        assert subscription.consumer_group == f"{OrderEvent.__module__}.OrderEvent"

    def test_explicit_group(self):
        subscription = (
            KafkaSubscriptionBuilder()
            .set_data_type(OrderEvent)
            .set_consumer_group_id("billing")
            .build()
        )

        assert subscription.consumer_group == "billing"

    def test_consumer_kwargs(self):
        subscription = (
            KafkaSubscriptionBuilder()
            .set_name("billing.orders")
            .set_channel_name("orders")
            .set_routing_key("orders.created")
            .set_buffer_size(50)
            .set_offset_default(AutoOffsetReset.LATEST)
            .set_session_timeout(15000)
            .set_max_poll_interval(60000)
            .set_partition_assignment_strategy("range")
            .build()
        )

        kwargs = subscription.consumer_kwargs()
        assert kwargs["group_id"] == "billing.orders"
        assert kwargs["enable_auto_commit"] is False
        assert kwargs["auto_offset_reset"] == "latest"
        assert kwargs["isolation_level"] == "read_committed"
        assert kwargs["max_poll_records"] == 50
        assert kwargs["session_timeout_ms"] == 15000
        assert kwargs["max_poll_interval_ms"] == 60000
        assert kwargs["partition_assignment_strategy"][0].__name__ == "RangePartitionAssignor"

    @pytest.mark.parametrize(
        "strategy,assignor",
        [
            (PartitionAssignmentStrategy.ROUND_ROBIN, "RoundRobinPartitionAssignor"),
            (PartitionAssignmentStrategy.STICKY, "StickyPartitionAssignor"),
        ],
    )
    def test_assignor_classes(self, strategy, assignor):
        subscription = (
            KafkaSubscriptionBuilder()
            .set_data_type(OrderEvent)
            .set_partition_assignment_strategy(strategy)
            .build()
        )

        assert subscription.consumer_kwargs()["partition_assignment_strategy"][0].__name__ == assignor

    def test_session_timeout_must_be_below_poll_interval(self):
        builder = (
            KafkaSubscriptionBuilder()
            .set_data_type(OrderEvent)
            .set_session_timeout(300000)
        )

        with pytest.raises(InvalidArgumentError, match="session_timeout_ms"):
            builder.build()

    def test_invalid_offset_default(self):
        with pytest.raises(InvalidArgumentError, match="offset_default"):
            KafkaSubscriptionBuilder().set_offset_default("beginning")

    def test_commit_batch_size_minimum(self):
        with pytest.raises(InvalidArgumentError, match="commit_batch_size"):
            KafkaSubscriptionBuilder().set_commit_batch_size(0)

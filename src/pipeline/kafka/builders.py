"""Kafka builders."""

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.common.builders import (
    ProducerFactoryBuilder,
    PublicationBuilder,
    SubscriptionBuilder,
    SubscriptionConfigurator,
    require_enum,
    require_min,
    require_text,
)
from pipeline.kafka.factories import KafkaProducerFactory
from pipeline.kafka.types import (
    PASSWORD_MECHANISMS,
    Acks,
    AutoOffsetReset,
    CompressionType,
    IsolationLevel,
    KafkaConnection,
    KafkaPublication,
    KafkaSubscription,
    PartitionAssignmentStrategy,
    SaslMechanism,
    SecurityProtocol,
)


class KafkaConnectionBuilder:
    entity = "KafkaConnection"

    def __init__(self):
        self._bootstrap_servers: list[str] = []
        self._name: str | None = None
        self._security_protocol = SecurityProtocol.PLAINTEXT
        self._sasl_mechanism: SaslMechanism | None = None
        self._sasl_username: str | None = None
        self._sasl_password: str | None = None
        self._sasl_kerberos_service_name: str | None = None
        self._ssl_ca_location: str | None = None
        self._request_timeout_ms = 120000
        self._metadata_max_age_ms = 300000
        self._connections_max_idle_ms = 540000

    def set_bootstrap_servers(self, *servers: str | list[str] | tuple[str, ...]) -> "KafkaConnectionBuilder":
        """Accepts "host:port" strings or lists of them; comma-separated values are split."""
        values: list[str] = []
        for value in servers:
            items = value if isinstance(value, (list, tuple)) else [value]
            for item in items:
                if not isinstance(item, str):
                    raise InvalidArgumentError(
                        "bootstrap_servers",
                        f"expected a \"host:port\" string, got {type(item).__name__}",
                    )
                values.extend(server.strip() for server in item.split(",") if server.strip())
        self._bootstrap_servers = values
        return self

    def set_name(self, name: str | None) -> "KafkaConnectionBuilder":
        self._name = name
        return self

    def set_security_protocol(self, protocol: SecurityProtocol | str) -> "KafkaConnectionBuilder":
        self._security_protocol = require_enum("security_protocol", protocol, SecurityProtocol)
        return self

    def set_sasl_mechanism(self, mechanism: SaslMechanism | str | None) -> "KafkaConnectionBuilder":
        if mechanism is None:
            self._sasl_mechanism = None
        else:
            self._sasl_mechanism = require_enum("sasl_mechanism", mechanism, SaslMechanism)
        return self

    def set_sasl_username(self, username: str | None) -> "KafkaConnectionBuilder":
        self._sasl_username = username
        return self

    def set_sasl_password(self, password: str | None) -> "KafkaConnectionBuilder":
        self._sasl_password = password
        return self

    def set_sasl_kerberos_service_name(self, service_name: str | None) -> "KafkaConnectionBuilder":
        self._sasl_kerberos_service_name = service_name
        return self

    def set_ssl_ca_location(self, path: str | None) -> "KafkaConnectionBuilder":
        self._ssl_ca_location = path
        return self

    def set_request_timeout(self, timeout_ms: int) -> "KafkaConnectionBuilder":
        self._request_timeout_ms = require_min("request_timeout_ms", timeout_ms, 1)
        return self

    def set_metadata_max_age(self, max_age_ms: int) -> "KafkaConnectionBuilder":
        self._metadata_max_age_ms = require_min("metadata_max_age_ms", max_age_ms, 0)
        return self

    def set_connections_max_idle(self, max_idle_ms: int) -> "KafkaConnectionBuilder":
        self._connections_max_idle_ms = require_min("connections_max_idle_ms", max_idle_ms, 0)
        return self

    def build(self) -> KafkaConnection:
        if not self._bootstrap_servers:
            raise MissingRequiredFieldError("bootstrap_servers", self.entity)
        if self._sasl_mechanism in PASSWORD_MECHANISMS:
            if not self._sasl_username:
                raise MissingRequiredFieldError("sasl_username", self.entity)
            if self._sasl_password is None:
                raise MissingRequiredFieldError("sasl_password", self.entity)

        return KafkaConnection(
            bootstrap_servers=tuple(self._bootstrap_servers),
            name=self._name,
            security_protocol=self._security_protocol,
            sasl_mechanism=self._sasl_mechanism,
            sasl_username=self._sasl_username,
            sasl_password=self._sasl_password,
            sasl_kerberos_service_name=self._sasl_kerberos_service_name,
            ssl_ca_location=self._ssl_ca_location,
            request_timeout_ms=self._request_timeout_ms,
            metadata_max_age_ms=self._metadata_max_age_ms,
            connections_max_idle_ms=self._connections_max_idle_ms,
        )


class KafkaPublicationBuilder(PublicationBuilder):
    entity = "KafkaPublication"
    publication_class = KafkaPublication

    def __init__(self, identity_resolver=None):
        super().__init__(identity_resolver)
        self._replication = Acks.ALL
        self._batch_number_messages = 10000
        self._enable_idempotence = True
        self._linger_ms = 5
        self._message_send_max_retries = 3
        self._message_timeout_ms = 5000
        self._max_in_flight_requests_per_connection = 1
        self._num_partitions = 1
        self._replication_factor = 1
        self._retry_backoff_ms = 100
        self._request_timeout_ms = 500
        self._topic_find_timeout_ms = 5000
        self._transactional_id: str | None = None
        self._compression_type: CompressionType | None = None

    def set_replication(self, acks: Acks | str) -> "KafkaPublicationBuilder":
        self._replication = require_enum("replication", str(acks), Acks)
        return self

    def set_batch_number_messages(self, count: int) -> "KafkaPublicationBuilder":
        self._batch_number_messages = require_min("batch_number_messages", count, 1)
        return self

    def set_enable_idempotence(self, enabled: bool) -> "KafkaPublicationBuilder":
        self._enable_idempotence = enabled
        return self

    def set_linger_ms(self, linger_ms: int) -> "KafkaPublicationBuilder":
        self._linger_ms = require_min("linger_ms", linger_ms, 0)
        return self

    def set_message_send_max_retries(self, retries: int) -> "KafkaPublicationBuilder":
        self._message_send_max_retries = require_min("message_send_max_retries", retries, 0)
        return self

    def set_message_timeout_ms(self, timeout_ms: int) -> "KafkaPublicationBuilder":
        self._message_timeout_ms = require_min("message_timeout_ms", timeout_ms, 0)
        return self

    def set_max_in_flight_requests_per_connection(self, count: int) -> "KafkaPublicationBuilder":
        self._max_in_flight_requests_per_connection = require_min(
            "max_in_flight_requests_per_connection", count, 1
        )
        return self

    def set_num_partitions(self, count: int) -> "KafkaPublicationBuilder":
        self._num_partitions = require_min("num_partitions", count, 1)
        return self

    def set_replication_factor(self, factor: int) -> "KafkaPublicationBuilder":
        self._replication_factor = require_min("replication_factor", factor, 1)
        return self

    def set_retry_backoff_ms(self, backoff_ms: int) -> "KafkaPublicationBuilder":
        self._retry_backoff_ms = require_min("retry_backoff_ms", backoff_ms, 0)
        return self

    def set_request_timeout_ms(self, timeout_ms: int) -> "KafkaPublicationBuilder":
        self._request_timeout_ms = require_min("request_timeout_ms", timeout_ms, 1)
        return self

    def set_topic_find_timeout_ms(self, timeout_ms: int) -> "KafkaPublicationBuilder":
        self._topic_find_timeout_ms = require_min("topic_find_timeout_ms", timeout_ms, 0)
        return self

    def set_transactional_id(self, transactional_id: str | None) -> "KafkaPublicationBuilder":
        if transactional_id is not None:
            require_text("transactional_id", transactional_id)
        self._transactional_id = transactional_id
        return self

    def set_compression_type(
        self, compression: CompressionType | str | None
    ) -> "KafkaPublicationBuilder":
        if compression is None or compression == "none":
            self._compression_type = None
        else:
            self._compression_type = require_enum("compression_type", compression, CompressionType)
        return self

    def _validate(self) -> None:
        # aiokafka rejects idempotence unless every replica acknowledges
        if self._enable_idempotence and self._replication != Acks.ALL:
            raise InvalidArgumentError(
                "replication",
                f"enable_idempotence requires acks 'all', got '{self._replication.value}'",
            )

    def _publication_fields(self) -> dict:
        fields = super()._publication_fields()
        fields.update(
            replication=self._replication,
            batch_number_messages=self._batch_number_messages,
            enable_idempotence=self._enable_idempotence,
            linger_ms=self._linger_ms,
            message_send_max_retries=self._message_send_max_retries,
            message_timeout_ms=self._message_timeout_ms,
            max_in_flight_requests_per_connection=self._max_in_flight_requests_per_connection,
            num_partitions=self._num_partitions,
            replication_factor=self._replication_factor,
            retry_backoff_ms=self._retry_backoff_ms,
            request_timeout_ms=self._request_timeout_ms,
            topic_find_timeout_ms=self._topic_find_timeout_ms,
            transactional_id=self._transactional_id,
            compression_type=self._compression_type,
        )
        return fields


class KafkaSubscriptionBuilder(SubscriptionBuilder):
    entity = "KafkaSubscription"
    subscription_class = KafkaSubscription

    def __init__(self, identity_resolver=None):
        super().__init__(identity_resolver)
        self._group_id: str | None = None
        self._commit_batch_size = 10
        self._isolation_level = IsolationLevel.READ_COMMITTED
        self._max_poll_interval_ms = 300000
        self._num_partitions = 1
        self._offset_default = AutoOffsetReset.EARLIEST
        self._partition_assignment_strategy = PartitionAssignmentStrategy.ROUND_ROBIN
        self._read_committed_offsets_timeout_ms = 5000
        self._replication_factor = 1
        self._session_timeout_ms = 10000
        self._sweep_uncommitted_offsets_interval_ms = 30000
        self._topic_find_timeout_ms = 5000

    def set_consumer_group_id(self, group_id: str | None) -> "KafkaSubscriptionBuilder":
        self._group_id = group_id
        return self

    def set_commit_batch_size(self, size: int) -> "KafkaSubscriptionBuilder":
        self._commit_batch_size = require_min("commit_batch_size", size, 1)
        return self

    def set_isolation_level(self, level: IsolationLevel | str) -> "KafkaSubscriptionBuilder":
        self._isolation_level = require_enum("isolation_level", level, IsolationLevel)
        return self

    def set_max_poll_interval(self, interval_ms: int) -> "KafkaSubscriptionBuilder":
        self._max_poll_interval_ms = require_min("max_poll_interval_ms", interval_ms, 1)
        return self

    def set_num_partitions(self, count: int) -> "KafkaSubscriptionBuilder":
        self._num_partitions = require_min("num_partitions", count, 1)
        return self

    def set_offset_default(self, offset: AutoOffsetReset | str) -> "KafkaSubscriptionBuilder":
        self._offset_default = require_enum("offset_default", offset, AutoOffsetReset)
        return self

    def set_partition_assignment_strategy(
        self, strategy: PartitionAssignmentStrategy | str
    ) -> "KafkaSubscriptionBuilder":
        self._partition_assignment_strategy = require_enum(
            "partition_assignment_strategy", strategy, PartitionAssignmentStrategy
        )
        return self

    def set_read_committed_offsets_timeout(self, timeout_ms: int) -> "KafkaSubscriptionBuilder":
        self._read_committed_offsets_timeout_ms = require_min(
            "read_committed_offsets_timeout_ms", timeout_ms, 0
        )
        return self

    def set_replication_factor(self, factor: int) -> "KafkaSubscriptionBuilder":
        self._replication_factor = require_min("replication_factor", factor, 1)
        return self

    def set_session_timeout(self, timeout_ms: int) -> "KafkaSubscriptionBuilder":
        self._session_timeout_ms = require_min("session_timeout_ms", timeout_ms, 1)
        return self

    def set_sweep_uncommitted_offsets_interval(self, interval_ms: int) -> "KafkaSubscriptionBuilder":
        self._sweep_uncommitted_offsets_interval_ms = require_min(
            "sweep_uncommitted_offsets_interval_ms", interval_ms, 0
        )
        return self

    def set_topic_find_timeout(self, timeout_ms: int) -> "KafkaSubscriptionBuilder":
        self._topic_find_timeout_ms = require_min("topic_find_timeout_ms", timeout_ms, 0)
        return self

    def _validate(self) -> None:
        if self._session_timeout_ms >= self._max_poll_interval_ms:
            raise InvalidArgumentError(
                "session_timeout_ms",
                f"({self._session_timeout_ms}) must be < "
                f"max_poll_interval_ms ({self._max_poll_interval_ms})",
            )

    def _subscription_fields(self) -> dict:
        fields = super()._subscription_fields()
        fields.update(
            group_id=self._group_id,
            commit_batch_size=self._commit_batch_size,
            isolation_level=self._isolation_level,
            max_poll_interval_ms=self._max_poll_interval_ms,
            num_partitions=self._num_partitions,
            offset_default=self._offset_default,
            partition_assignment_strategy=self._partition_assignment_strategy,
            read_committed_offsets_timeout_ms=self._read_committed_offsets_timeout_ms,
            replication_factor=self._replication_factor,
            session_timeout_ms=self._session_timeout_ms,
            sweep_uncommitted_offsets_interval_ms=self._sweep_uncommitted_offsets_interval_ms,
            topic_find_timeout_ms=self._topic_find_timeout_ms,
        )
        return fields


class KafkaProducerFactoryBuilder(ProducerFactoryBuilder):
    entity = "KafkaProducerFactory"
    publication_builder_class = KafkaPublicationBuilder
    producer_factory_class = KafkaProducerFactory


class KafkaSubscriptionConfigurator(SubscriptionConfigurator):
    subscription_builder_class = KafkaSubscriptionBuilder


__all__ = [
    "KafkaConnectionBuilder",
    "KafkaPublicationBuilder",
    "KafkaSubscriptionBuilder",
    "KafkaProducerFactoryBuilder",
    "KafkaSubscriptionConfigurator",
]

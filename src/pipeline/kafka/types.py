"""Kafka connection, publication and subscription values.

Each value knows how to render itself as aiokafka constructor kwargs.
aiokafka is only imported where an SSL context or assignor class is
needed, so building configuration never requires the client library.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pipeline.common.types import Publication, Subscription


class SecurityProtocol(StrEnum):
    PLAINTEXT = "PLAINTEXT"
    SSL = "SSL"
    SASL_PLAINTEXT = "SASL_PLAINTEXT"
    SASL_SSL = "SASL_SSL"


class SaslMechanism(StrEnum):
    PLAIN = "PLAIN"
    GSSAPI = "GSSAPI"
    SCRAM_SHA_256 = "SCRAM-SHA-256"
    SCRAM_SHA_512 = "SCRAM-SHA-512"
    OAUTHBEARER = "OAUTHBEARER"


# Mechanisms that authenticate with a username/password pair
PASSWORD_MECHANISMS = frozenset(
    {SaslMechanism.PLAIN, SaslMechanism.SCRAM_SHA_256, SaslMechanism.SCRAM_SHA_512}
)


class Acks(StrEnum):
    NONE = "0"
    LEADER = "1"
    ALL = "all"


class CompressionType(StrEnum):
    GZIP = "gzip"
    SNAPPY = "snappy"
    LZ4 = "lz4"
    ZSTD = "zstd"


class IsolationLevel(StrEnum):
    READ_COMMITTED = "read_committed"
    READ_UNCOMMITTED = "read_uncommitted"


class AutoOffsetReset(StrEnum):
    EARLIEST = "earliest"
    LATEST = "latest"


class PartitionAssignmentStrategy(StrEnum):
    ROUND_ROBIN = "roundrobin"
    RANGE = "range"
    STICKY = "sticky"


@dataclass(frozen=True)
class KafkaConnection:
    bootstrap_servers: tuple[str, ...]
    name: str | None = None
    security_protocol: SecurityProtocol = SecurityProtocol.PLAINTEXT
    sasl_mechanism: SaslMechanism | None = None
    sasl_username: str | None = None
    sasl_password: str | None = None
    sasl_kerberos_service_name: str | None = None
    ssl_ca_location: str | None = None
    request_timeout_ms: int = 120000  # 2 minutes
    metadata_max_age_ms: int = 300000  # 5 minutes
    connections_max_idle_ms: int = 540000  # 9 minutes

    def client_kwargs(self) -> dict[str, Any]:
        """Connection kwargs shared by AIOKafkaProducer and AIOKafkaConsumer."""
        kwargs: dict[str, Any] = {
            "bootstrap_servers": list(self.bootstrap_servers),
            "request_timeout_ms": self.request_timeout_ms,
            "metadata_max_age_ms": self.metadata_max_age_ms,
            "connections_max_idle_ms": self.connections_max_idle_ms,
        }
        if self.name:
            kwargs["client_id"] = self.name

        if self.security_protocol != SecurityProtocol.PLAINTEXT:
            kwargs["security_protocol"] = self.security_protocol.value
        if self.sasl_mechanism is not None:
            kwargs["sasl_mechanism"] = self.sasl_mechanism.value
            if self.sasl_mechanism in PASSWORD_MECHANISMS:
                kwargs["sasl_plain_username"] = self.sasl_username
                kwargs["sasl_plain_password"] = self.sasl_password
            elif self.sasl_mechanism == SaslMechanism.GSSAPI and self.sasl_kerberos_service_name:
                kwargs["sasl_kerberos_service_name"] = self.sasl_kerberos_service_name

        if self.ssl_ca_location:
            from aiokafka.helpers import create_ssl_context

            kwargs["ssl_context"] = create_ssl_context(cafile=self.ssl_ca_location)
        return kwargs

    def __repr__(self) -> str:
        # sasl_password deliberately left out
        return (
            f"KafkaConnection(bootstrap_servers={list(self.bootstrap_servers)}, "
            f"security_protocol={self.security_protocol.value}, name={self.name!r})"
        )


@dataclass(frozen=True)
class KafkaPublication(Publication):
    replication: Acks = Acks.ALL
    batch_number_messages: int = 10000
    enable_idempotence: bool = True
    linger_ms: int = 5
    message_send_max_retries: int = 3
    message_timeout_ms: int = 5000
    max_in_flight_requests_per_connection: int = 1
    num_partitions: int = 1
    replication_factor: int = 1
    retry_backoff_ms: int = 100
    request_timeout_ms: int = 500
    topic_find_timeout_ms: int = 5000
    transactional_id: str | None = None
    compression_type: CompressionType | None = None

    def producer_kwargs(self) -> dict[str, Any]:
        """AIOKafkaProducer kwargs for this publication.

        aiokafka has no retries or in-flight settings; those fields are kept
        for topic provisioning and for runtimes that honour them.
        """
        # aiokafka requires int for 0/1 and the string "all"
        acks: int | str = self.replication.value
        if acks.isdigit():
            acks = int(acks)

        kwargs: dict[str, Any] = {
            "acks": acks,
            "enable_idempotence": self.enable_idempotence,
            "linger_ms": self.linger_ms,
            "request_timeout_ms": self.request_timeout_ms,
            "retry_backoff_ms": self.retry_backoff_ms,
        }
        if self.compression_type is not None:
            kwargs["compression_type"] = self.compression_type.value
        if self.transactional_id:
            kwargs["transactional_id"] = self.transactional_id
        return kwargs


@dataclass(frozen=True)
class KafkaSubscription(Subscription):
    group_id: str | None = None
    commit_batch_size: int = 10
    isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED
    max_poll_interval_ms: int = 300000
    num_partitions: int = 1
    offset_default: AutoOffsetReset = AutoOffsetReset.EARLIEST
    partition_assignment_strategy: PartitionAssignmentStrategy = (
        PartitionAssignmentStrategy.ROUND_ROBIN
    )
    read_committed_offsets_timeout_ms: int = 5000
    replication_factor: int = 1
    session_timeout_ms: int = 10000
    sweep_uncommitted_offsets_interval_ms: int = 30000
    topic_find_timeout_ms: int = 5000

    @property
    def consumer_group(self) -> str:
        """Consumer group id; falls back to the subscription name."""
        return self.group_id or self.name

    def consumer_kwargs(self) -> dict[str, Any]:
        """AIOKafkaConsumer kwargs for this subscription.

        Offsets are committed by the runtime in batches of commit_batch_size,
        so auto commit is always off.
        """
        return {
            "group_id": self.consumer_group,
            "enable_auto_commit": False,
            "auto_offset_reset": self.offset_default.value,
            "isolation_level": self.isolation_level.value,
            "max_poll_records": self.buffer_size,
            "max_poll_interval_ms": self.max_poll_interval_ms,
            "session_timeout_ms": self.session_timeout_ms,
            "partition_assignment_strategy": _assignors(self.partition_assignment_strategy),
        }


def _assignors(strategy: PartitionAssignmentStrategy) -> tuple[type, ...]:
    if strategy == PartitionAssignmentStrategy.RANGE:
        from aiokafka.coordinator.assignors.range import RangePartitionAssignor

        return (RangePartitionAssignor,)
    if strategy == PartitionAssignmentStrategy.STICKY:
        from aiokafka.coordinator.assignors.sticky.sticky_assignor import StickyPartitionAssignor

        return (StickyPartitionAssignor,)

    from aiokafka.coordinator.assignors.roundrobin import RoundRobinPartitionAssignor

    return (RoundRobinPartitionAssignor,)


__all__ = [
    "SecurityProtocol",
    "SaslMechanism",
    "Acks",
    "CompressionType",
    "IsolationLevel",
    "AutoOffsetReset",
    "PartitionAssignmentStrategy",
    "KafkaConnection",
    "KafkaPublication",
    "KafkaSubscription",
]

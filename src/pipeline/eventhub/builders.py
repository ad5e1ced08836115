"""Event Hubs builders."""

import re

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.common.builders import (
    ProducerFactoryBuilder,
    PublicationBuilder,
    SubscriptionBuilder,
    SubscriptionConfigurator,
    require_enum,
    require_min,
    require_optional_min,
    require_text,
)
from pipeline.common.transport import strip_entity_path
from pipeline.eventhub.factories import EventHubProducerFactory
from pipeline.eventhub.types import (
    DEFAULT_CONSUMER_GROUP,
    DEFAULT_INBOX_TTL_SECONDS,
    DEFAULT_STARTING_POSITION,
    INFINITE_LEASE,
    MAX_LEASE_SECONDS,
    MIN_LEASE_SECONDS,
    BlobInboxConfig,
    BlobLeaseLockConfig,
    EventHubConnection,
    EventHubPublication,
    EventHubSubscription,
    EventHubTransportType,
)

# Azure container naming rules
_CONTAINER_NAME_PATTERN = re.compile(r"^[a-z0-9](?!.*--)[a-z0-9-]{1,61}[a-z0-9]$")


def require_container_name(argument: str, name: str) -> str:
    if not name or not _CONTAINER_NAME_PATTERN.match(name):
        raise InvalidArgumentError(
            argument,
            f"'{name}' is not a valid blob container name "
            "(3-63 lowercase letters, digits or single hyphens)",
        )
    return name


class EventHubConnectionBuilder:
    entity = "EventHubConnection"

    def __init__(self):
        self._connection_string: str | None = None
        self._storage_connection_string: str | None = None
        self._transport_type = EventHubTransportType.AMQP_OVER_WEBSOCKET
        self._checkpoint_container: str | None = None

    def set_connection_string(self, connection_string: str | None) -> "EventHubConnectionBuilder":
        self._connection_string = connection_string
        return self

    def set_storage_connection_string(
        self, connection_string: str | None
    ) -> "EventHubConnectionBuilder":
        self._storage_connection_string = connection_string
        return self

    def set_transport_type(
        self, transport_type: EventHubTransportType | str
    ) -> "EventHubConnectionBuilder":
        self._transport_type = require_enum("transport_type", transport_type, EventHubTransportType)
        return self

    def set_checkpoint_container(self, container_name: str | None) -> "EventHubConnectionBuilder":
        if container_name is not None:
            require_container_name("checkpoint_container", container_name)
        self._checkpoint_container = container_name
        return self

    def build(self) -> EventHubConnection:
        if not self._connection_string:
            raise MissingRequiredFieldError("connection_string", self.entity)

        return EventHubConnection(
            connection_string=strip_entity_path(self._connection_string),
            storage_connection_string=self._storage_connection_string,
            transport_type=self._transport_type,
            checkpoint_container=self._checkpoint_container,
        )


class EventHubPublicationBuilder(PublicationBuilder):
    entity = "EventHubPublication"
    publication_class = EventHubPublication

    def __init__(self, identity_resolver=None):
        super().__init__(identity_resolver)
        self._partition_key: str | None = None
        self._partition_id: str | None = None

    def set_partition_key(self, partition_key: str | None) -> "EventHubPublicationBuilder":
        self._partition_key = partition_key
        return self

    def set_partition_id(self, partition_id: str | None) -> "EventHubPublicationBuilder":
        self._partition_id = partition_id
        return self

    def _validate(self) -> None:
        if self._partition_key and self._partition_id:
            raise InvalidArgumentError(
                "partition_key", "cannot be combined with partition_id"
            )

    def _publication_fields(self) -> dict:
        fields = super()._publication_fields()
        fields.update(partition_key=self._partition_key, partition_id=self._partition_id)
        return fields


class EventHubSubscriptionBuilder(SubscriptionBuilder):
    entity = "EventHubSubscription"
    subscription_class = EventHubSubscription

    def __init__(self, identity_resolver=None):
        super().__init__(identity_resolver)
        self._consumer_group = DEFAULT_CONSUMER_GROUP
        self._starting_position = DEFAULT_STARTING_POSITION
        self._owner_level: int | None = None
        self._prefetch = 300

    def set_consumer_group(self, consumer_group: str) -> "EventHubSubscriptionBuilder":
        self._consumer_group = require_text("consumer_group", consumer_group)
        return self

    def set_starting_position(self, position: str) -> "EventHubSubscriptionBuilder":
        """"-1" reads from the start of the stream, "@latest" from the end."""
        self._starting_position = require_text("starting_position", position)
        return self

    def set_owner_level(self, owner_level: int | None) -> "EventHubSubscriptionBuilder":
        self._owner_level = require_optional_min("owner_level", owner_level)
        return self

    def set_prefetch(self, prefetch: int) -> "EventHubSubscriptionBuilder":
        self._prefetch = require_min("prefetch", prefetch, 1)
        return self

    def _subscription_fields(self) -> dict:
        fields = super()._subscription_fields()
        fields.update(
            consumer_group=self._consumer_group,
            starting_position=self._starting_position,
            owner_level=self._owner_level,
            prefetch=self._prefetch,
        )
        return fields


class EventHubProducerFactoryBuilder(ProducerFactoryBuilder):
    entity = "EventHubProducerFactory"
    publication_builder_class = EventHubPublicationBuilder
    producer_factory_class = EventHubProducerFactory


class EventHubSubscriptionConfigurator(SubscriptionConfigurator):
    subscription_builder_class = EventHubSubscriptionBuilder


# =============================================================================
# Blob storage backed stores
# =============================================================================


class _BlobStoreBuilder:
    """Shared storage/container handling for blob backed stores.

    The container defaults to "<namespace>-<suffix>" when a connection with
    a recognisable namespace seeds the builder.
    """

    entity = "BlobStore"
    container_suffix = "store"

    def __init__(self, connection: EventHubConnection | None = None):
        self._storage_connection_string: str | None = None
        self._container_name: str | None = None
        if connection is not None:
            self._storage_connection_string = connection.storage_connection_string
            if connection.namespace:
                self._container_name = f"{connection.namespace}-{self.container_suffix}"

    def set_storage_connection_string(self, connection_string: str | None):
        self._storage_connection_string = connection_string
        return self

    def set_container_name(self, container_name: str):
        self._container_name = require_container_name("container_name", container_name)
        return self

    def _require_storage(self) -> tuple[str, str]:
        if not self._storage_connection_string:
            raise MissingRequiredFieldError("storage_connection_string", self.entity)
        if not self._container_name:
            raise MissingRequiredFieldError("container_name", self.entity)
        # namespace derived names can still break container naming rules
        require_container_name("container_name", self._container_name)
        return self._storage_connection_string, self._container_name


class EventHubInboxBuilder(_BlobStoreBuilder):
    entity = "EventHubInbox"
    container_suffix = "inbox"

    def __init__(self, connection: EventHubConnection | None = None):
        super().__init__(connection)
        self._ttl_seconds = DEFAULT_INBOX_TTL_SECONDS

    def set_ttl_seconds(self, ttl_seconds: int) -> "EventHubInboxBuilder":
        self._ttl_seconds = require_min("ttl_seconds", ttl_seconds, 1)
        return self

    def build(self) -> BlobInboxConfig:
        storage, container = self._require_storage()
        return BlobInboxConfig(
            storage_connection_string=storage,
            container_name=container,
            ttl_seconds=self._ttl_seconds,
        )


class EventHubDistributedLockBuilder(_BlobStoreBuilder):
    entity = "EventHubDistributedLock"
    container_suffix = "locks"

    def __init__(self, connection: EventHubConnection | None = None):
        super().__init__(connection)
        self._lease_duration_seconds = MAX_LEASE_SECONDS

    def set_lease_duration(self, seconds: int) -> "EventHubDistributedLockBuilder":
        if seconds != INFINITE_LEASE and not MIN_LEASE_SECONDS <= seconds <= MAX_LEASE_SECONDS:
            raise InvalidArgumentError(
                "lease_duration_seconds",
                f"must be between {MIN_LEASE_SECONDS} and {MAX_LEASE_SECONDS} "
                f"or {INFINITE_LEASE}, got {seconds}",
            )
        self._lease_duration_seconds = seconds
        return self

    def build(self) -> BlobLeaseLockConfig:
        storage, container = self._require_storage()
        return BlobLeaseLockConfig(
            storage_connection_string=storage,
            container_name=container,
            lease_duration_seconds=self._lease_duration_seconds,
        )


__all__ = [
    "require_container_name",
    "EventHubConnectionBuilder",
    "EventHubPublicationBuilder",
    "EventHubSubscriptionBuilder",
    "EventHubProducerFactoryBuilder",
    "EventHubSubscriptionConfigurator",
    "EventHubInboxBuilder",
    "EventHubDistributedLockBuilder",
]

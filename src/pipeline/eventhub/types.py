"""Event Hubs connection, entity and store values.

One namespace connection string reaches every Event Hub in the namespace;
publication topics and subscription routing keys are Event Hub names.
Blob storage backs checkpoints, the inbox (dedup records) and the
distributed lock (blob leases).
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pipeline.common.types import Publication, Subscription

DEFAULT_CONSUMER_GROUP = "$Default"
# "-1" is the SDK's "from the start of the stream"
DEFAULT_STARTING_POSITION = "-1"
DEFAULT_INBOX_TTL_SECONDS = 86400

# Azure blob leases: 15..60 seconds, or -1 for an infinite lease
MIN_LEASE_SECONDS = 15
MAX_LEASE_SECONDS = 60
INFINITE_LEASE = -1

_ENDPOINT_PATTERN = re.compile(r"Endpoint=sb://([^./;]+)\.", re.IGNORECASE)


class EventHubTransportType(StrEnum):
    AMQP = "Amqp"
    AMQP_OVER_WEBSOCKET = "AmqpOverWebsocket"

    def to_sdk(self) -> Any:
        from azure.eventhub import TransportType

        return getattr(TransportType, self.value)


def namespace_of(connection_string: str) -> str | None:
    """Namespace name from "Endpoint=sb://<namespace>.servicebus.windows.net/"."""
    match = _ENDPOINT_PATTERN.search(connection_string)
    return match.group(1).lower() if match else None


@dataclass(frozen=True)
class EventHubConnection:
    connection_string: str
    storage_connection_string: str | None = None
    transport_type: EventHubTransportType = EventHubTransportType.AMQP_OVER_WEBSOCKET
    checkpoint_container: str | None = None

    @property
    def namespace(self) -> str | None:
        return namespace_of(self.connection_string)

    def client_kwargs(self) -> dict[str, Any]:
        return {
            "conn_str": self.connection_string,
            "transport_type": self.transport_type.to_sdk(),
        }

    def __repr__(self) -> str:
        return (
            f"EventHubConnection(namespace={self.namespace!r}, "
            f"transport_type={self.transport_type.value}, "
            f"storage={'set' if self.storage_connection_string else 'unset'})"
        )


@dataclass(frozen=True)
class EventHubPublication(Publication):
    partition_key: str | None = None
    partition_id: str | None = None


@dataclass(frozen=True)
class EventHubSubscription(Subscription):
    consumer_group: str = DEFAULT_CONSUMER_GROUP
    starting_position: str = DEFAULT_STARTING_POSITION
    owner_level: int | None = None
    prefetch: int = 300


@dataclass(frozen=True)
class BlobInboxConfig:
    """Inbox backed by one JSON blob per processed message id."""

    storage_connection_string: str
    container_name: str
    ttl_seconds: int = DEFAULT_INBOX_TTL_SECONDS

    async def create_container_client(self) -> Any:
        from azure.storage.blob.aio import BlobServiceClient

        client = BlobServiceClient.from_connection_string(self.storage_connection_string)
        return client.get_container_client(self.container_name)

    def __repr__(self) -> str:
        return f"BlobInboxConfig(container_name={self.container_name!r}, ttl_seconds={self.ttl_seconds})"


@dataclass(frozen=True)
class BlobLeaseLockConfig:
    """Distributed lock backed by blob leases."""

    storage_connection_string: str
    container_name: str
    lease_duration_seconds: int = MAX_LEASE_SECONDS

    async def create_container_client(self) -> Any:
        from azure.storage.blob.aio import BlobServiceClient

        client = BlobServiceClient.from_connection_string(self.storage_connection_string)
        return client.get_container_client(self.container_name)

    def __repr__(self) -> str:
        return (
            f"BlobLeaseLockConfig(container_name={self.container_name!r}, "
            f"lease_duration_seconds={self.lease_duration_seconds})"
        )


__all__ = [
    "DEFAULT_CONSUMER_GROUP",
    "DEFAULT_STARTING_POSITION",
    "DEFAULT_INBOX_TTL_SECONDS",
    "EventHubTransportType",
    "namespace_of",
    "EventHubConnection",
    "EventHubPublication",
    "EventHubSubscription",
    "BlobInboxConfig",
    "BlobLeaseLockConfig",
]

"""
Transport-agnostic configuration value types.

Publication and Subscription are produced by builders and never mutated
afterwards. Provider packages subclass them to add transport-specific
fields; every added field has a default so dataclass inheritance holds.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

# CloudEvents defaults applied when a publication does not set its own
DEFAULT_CLOUD_EVENTS_SOURCE = "http://goparamore.io"
DEFAULT_CLOUD_EVENTS_TYPE = "goparamore.io.Paramore.Brighter.Message"

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class OnMissingChannel(StrEnum):
    """What a transport does when the channel (topic, queue, table) is absent."""

    CREATE = "create"
    VALIDATE = "validate"
    ASSUME = "assume"


class MessagePumpType(StrEnum):
    """Message pump style: async (proactor) or blocking (reactor)."""

    PROACTOR = "proactor"
    REACTOR = "reactor"


@dataclass(frozen=True)
class Publication:
    """Routing and CloudEvents metadata for outbound messages.

    request_type may be None for untyped publications that send whatever
    the caller hands them.
    """

    topic: str
    request_type: Any = None
    source: str = DEFAULT_CLOUD_EVENTS_SOURCE
    subject: str | None = None
    type: str = DEFAULT_CLOUD_EVENTS_TYPE
    data_schema: str | None = None
    reply_to: str | None = None
    default_headers: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    cloud_events_additional_properties: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    make_channels: OnMissingChannel = OnMissingChannel.CREATE


@dataclass(frozen=True)
class Subscription:
    """Consumer identity, concurrency and failure policy for one channel.

    Durations are milliseconds. requeue_count of -1 means requeue forever.
    """

    name: str
    channel_name: str
    routing_key: str
    request_type: Any = None
    buffer_size: int = 1
    no_of_performers: int = 1
    timeout_ms: int | None = None
    requeue_count: int = -1
    requeue_delay_ms: int | None = None
    unacceptable_message_limit: int = 0
    message_pump: MessagePumpType = MessagePumpType.PROACTOR
    make_channels: OnMissingChannel = OnMissingChannel.CREATE
    empty_channel_delay_ms: int | None = None
    channel_failure_delay_ms: int | None = None


__all__ = [
    "DEFAULT_CLOUD_EVENTS_SOURCE",
    "DEFAULT_CLOUD_EVENTS_TYPE",
    "OnMissingChannel",
    "MessagePumpType",
    "Publication",
    "Subscription",
]

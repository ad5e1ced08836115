"""Base builders for publications and subscriptions.

Setters return the builder for chaining and only store their argument.
Setters that can reject a value do so immediately with InvalidArgumentError;
completeness is checked in build(), which raises MissingRequiredFieldError
for the first required field that is still empty.

build() may be called repeatedly. Each call returns a new frozen value
built from the current state, so later setter calls never reach values
that were already handed out.

Provider builders subclass these, add their own setters, and extend
_publication_fields() / _subscription_fields() with the extra values.

ProducerFactoryBuilder and SubscriptionConfigurator are the objects handed
to use_publications() and use_subscriptions() callbacks.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.common.factories import BaseProducerFactory, ChannelFactory
from pipeline.common.naming import IdentityResolver, fill_missing, identity_of, is_empty
from pipeline.common.types import (
    DEFAULT_CLOUD_EVENTS_SOURCE,
    DEFAULT_CLOUD_EVENTS_TYPE,
    MessagePumpType,
    OnMissingChannel,
    Publication,
    Subscription,
)


# =============================================================================
# Argument validation
# =============================================================================


def require_min(argument: str, value: int, minimum: int) -> int:
    if value is None or value < minimum:
        raise InvalidArgumentError(argument, f"must be >= {minimum}, got {value}")
    return value


def require_optional_min(argument: str, value: int | None, minimum: int = 0) -> int | None:
    if value is None:
        return None
    return require_min(argument, value, minimum)


def require_text(argument: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(argument, "must not be None or empty")
    return value


def require_enum(argument: str, value: Any, enum_type: type) -> Any:
    try:
        return enum_type(value)
    except ValueError as e:
        valid = [member.value for member in enum_type]
        raise InvalidArgumentError(argument, f"must be one of {valid}, got '{value}'", cause=e)


def freeze_mapping(values: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


# =============================================================================
# Publication
# =============================================================================


class PublicationBuilder:
    """Builds a Publication. topic is the only required field."""

    entity = "Publication"
    publication_class: type[Publication] = Publication

    def __init__(self, identity_resolver: IdentityResolver | None = None):
        self._identity_resolver = identity_resolver or identity_of
        self._topic: str | None = None
        self._request_type: Any = None
        self._source = DEFAULT_CLOUD_EVENTS_SOURCE
        self._subject: str | None = None
        self._type = DEFAULT_CLOUD_EVENTS_TYPE
        self._data_schema: str | None = None
        self._reply_to: str | None = None
        self._default_headers: Mapping[str, Any] | None = None
        self._cloud_events_additional_properties: Mapping[str, Any] | None = None
        self._make_channels = OnMissingChannel.CREATE

    def set_topic(self, topic: str | None) -> "PublicationBuilder":
        self._topic = topic
        return self

    def set_request_type(self, request_type: Any) -> "PublicationBuilder":
        """Store the request type without deriving the topic from it."""
        self._request_type = request_type
        return self

    def set_data_type(self, message_type: Any) -> "PublicationBuilder":
        """Store the message type and default an empty topic to its short name."""
        self._request_type = message_type
        if message_type is None:
            return self

        identity = self._identity_resolver(message_type)
        if is_empty(self._topic):
            self._topic = identity.short_name
        return self

    def set_source(self, source: str) -> "PublicationBuilder":
        self._source = require_text("source", source)
        return self

    def set_subject(self, subject: str | None) -> "PublicationBuilder":
        self._subject = subject
        return self

    def set_type(self, cloud_events_type: str) -> "PublicationBuilder":
        self._type = require_text("type", cloud_events_type)
        return self

    def set_data_schema(self, data_schema: str | None) -> "PublicationBuilder":
        self._data_schema = data_schema
        return self

    def set_reply_to(self, reply_to: str | None) -> "PublicationBuilder":
        self._reply_to = reply_to
        return self

    def set_default_headers(self, headers: Mapping[str, Any] | None) -> "PublicationBuilder":
        self._default_headers = headers
        return self

    def set_cloud_events_additional_properties(
        self, properties: Mapping[str, Any] | None
    ) -> "PublicationBuilder":
        self._cloud_events_additional_properties = properties
        return self

    def set_make_channels(self, make_channels: OnMissingChannel | str) -> "PublicationBuilder":
        self._make_channels = require_enum("make_channels", make_channels, OnMissingChannel)
        return self

    def create_if_missing(self) -> "PublicationBuilder":
        return self.set_make_channels(OnMissingChannel.CREATE)

    def validate_if_exists(self) -> "PublicationBuilder":
        return self.set_make_channels(OnMissingChannel.VALIDATE)

    def assume_exists(self) -> "PublicationBuilder":
        return self.set_make_channels(OnMissingChannel.ASSUME)

    def _validate(self) -> None:
        """Cross-field checks for subclasses; runs after required fields."""

    def _publication_fields(self) -> dict[str, Any]:
        return {
            "topic": self._topic,
            "request_type": self._request_type,
            "source": self._source,
            "subject": self._subject,
            "type": self._type,
            "data_schema": self._data_schema,
            "reply_to": self._reply_to,
            "default_headers": freeze_mapping(self._default_headers),
            "cloud_events_additional_properties": freeze_mapping(
                self._cloud_events_additional_properties
            ),
            "make_channels": self._make_channels,
        }

    def build(self) -> Publication:
        if is_empty(self._topic):
            raise MissingRequiredFieldError("topic", self.entity)
        self._validate()
        return self.publication_class(**self._publication_fields())


# =============================================================================
# Subscription
# =============================================================================


class SubscriptionBuilder:
    """Builds a Subscription. name, channel_name and routing_key are required.

    set_data_type() fills whichever of the three are still empty, so call
    order matters:

        builder.set_channel_name("orders").set_data_type(OrderEvent)
            -> channel_name "orders" (explicit value kept)
        builder.set_data_type(OrderEvent).set_channel_name("orders")
            -> channel_name "orders" (explicit setter overwrites the default)
    """

    entity = "Subscription"
    subscription_class: type[Subscription] = Subscription
    default_message_pump = MessagePumpType.PROACTOR
    default_no_of_performers = 1

    def __init__(self, identity_resolver: IdentityResolver | None = None):
        self._identity_resolver = identity_resolver or identity_of
        self._name: str | None = None
        self._channel_name: str | None = None
        self._routing_key: str | None = None
        self._request_type: Any = None
        self._buffer_size = 1
        self._no_of_performers = self.default_no_of_performers
        self._timeout_ms: int | None = None
        self._requeue_count = -1
        self._requeue_delay_ms: int | None = None
        self._unacceptable_message_limit = 0
        self._message_pump = self.default_message_pump
        self._make_channels = OnMissingChannel.CREATE
        self._empty_channel_delay_ms: int | None = None
        self._channel_failure_delay_ms: int | None = None

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def channel_name(self) -> str | None:
        return self._channel_name

    @property
    def routing_key(self) -> str | None:
        return self._routing_key

    @property
    def request_type(self) -> Any:
        return self._request_type

    def set_name(self, name: str | None) -> "SubscriptionBuilder":
        self._name = name
        return self

    def set_channel_name(self, channel_name: str | None) -> "SubscriptionBuilder":
        self._channel_name = channel_name
        return self

    def set_routing_key(self, routing_key: str | None) -> "SubscriptionBuilder":
        self._routing_key = routing_key
        return self

    def set_topic(self, topic: str | None) -> "SubscriptionBuilder":
        return self.set_routing_key(topic)

    def set_request_type(self, request_type: Any) -> "SubscriptionBuilder":
        """Store the request type without deriving names from it."""
        self._request_type = request_type
        return self

    def set_data_type(self, message_type: Any) -> "SubscriptionBuilder":
        """Store the message type and derive empty names from its identity.

        None clears the stored type and leaves the names alone.
        """
        self._request_type = message_type
        if message_type is None:
            return self

        identity = self._identity_resolver(message_type)
        self._name, self._channel_name, self._routing_key = fill_missing(
            identity, self._name, self._channel_name, self._routing_key
        )
        return self

    def set_buffer_size(self, buffer_size: int) -> "SubscriptionBuilder":
        self._buffer_size = require_min("buffer_size", buffer_size, 1)
        return self

    def set_number_of_performers(self, no_of_performers: int) -> "SubscriptionBuilder":
        self._no_of_performers = require_min("no_of_performers", no_of_performers, 1)
        return self

    def set_timeout(self, timeout_ms: int | None) -> "SubscriptionBuilder":
        self._timeout_ms = require_optional_min("timeout_ms", timeout_ms)
        return self

    def set_requeue_count(self, requeue_count: int) -> "SubscriptionBuilder":
        self._requeue_count = require_min("requeue_count", requeue_count, -1)
        return self

    def set_requeue_delay(self, requeue_delay_ms: int | None) -> "SubscriptionBuilder":
        self._requeue_delay_ms = require_optional_min("requeue_delay_ms", requeue_delay_ms)
        return self

    def set_unacceptable_message_limit(self, limit: int) -> "SubscriptionBuilder":
        self._unacceptable_message_limit = require_min("unacceptable_message_limit", limit, 0)
        return self

    def set_message_pump_type(self, message_pump: MessagePumpType | str) -> "SubscriptionBuilder":
        self._message_pump = require_enum("message_pump", message_pump, MessagePumpType)
        return self

    def as_proactor(self) -> "SubscriptionBuilder":
        return self.set_message_pump_type(MessagePumpType.PROACTOR)

    def as_reactor(self) -> "SubscriptionBuilder":
        return self.set_message_pump_type(MessagePumpType.REACTOR)

    def set_make_channels(self, make_channels: OnMissingChannel | str) -> "SubscriptionBuilder":
        self._make_channels = require_enum("make_channels", make_channels, OnMissingChannel)
        return self

    def create_if_missing(self) -> "SubscriptionBuilder":
        return self.set_make_channels(OnMissingChannel.CREATE)

    def validate_if_exists(self) -> "SubscriptionBuilder":
        return self.set_make_channels(OnMissingChannel.VALIDATE)

    def assume_exists(self) -> "SubscriptionBuilder":
        return self.set_make_channels(OnMissingChannel.ASSUME)

    def set_empty_channel_delay(self, delay_ms: int | None) -> "SubscriptionBuilder":
        self._empty_channel_delay_ms = require_optional_min("empty_channel_delay_ms", delay_ms)
        return self

    def set_channel_failure_delay(self, delay_ms: int | None) -> "SubscriptionBuilder":
        self._channel_failure_delay_ms = require_optional_min("channel_failure_delay_ms", delay_ms)
        return self

    def _validate(self) -> None:
        """Cross-field checks for subclasses; runs after required fields."""

    def _subscription_fields(self) -> dict[str, Any]:
        return {
            "name": self._name,
            "channel_name": self._channel_name,
            "routing_key": self._routing_key,
            "request_type": self._request_type,
            "buffer_size": self._buffer_size,
            "no_of_performers": self._no_of_performers,
            "timeout_ms": self._timeout_ms,
            "requeue_count": self._requeue_count,
            "requeue_delay_ms": self._requeue_delay_ms,
            "unacceptable_message_limit": self._unacceptable_message_limit,
            "message_pump": self._message_pump,
            "make_channels": self._make_channels,
            "empty_channel_delay_ms": self._empty_channel_delay_ms,
            "channel_failure_delay_ms": self._channel_failure_delay_ms,
        }

    def build(self) -> Subscription:
        required = (
            ("name", self._name),
            ("channel_name", self._channel_name),
            ("routing_key", self._routing_key),
        )
        for field_name, value in required:
            if is_empty(value):
                raise MissingRequiredFieldError(field_name, self.entity)

        self._validate()
        return self.subscription_class(**self._subscription_fields())


# =============================================================================
# Collections handed to configure callbacks
# =============================================================================


class ProducerFactoryBuilder:
    """Collects publications for one connection and builds its producer factory.

    The provider configurator sets the connection before the caller's
    configure callback runs.
    """

    entity = "ProducerFactory"
    publication_builder_class: type[PublicationBuilder] = PublicationBuilder
    producer_factory_class: type = BaseProducerFactory

    def __init__(self, identity_resolver: IdentityResolver | None = None):
        self._identity_resolver = identity_resolver
        self._connection: Any = None
        self._publications: list[Publication] = []

    @property
    def connection(self) -> Any:
        return self._connection

    def set_connection(self, connection: Any) -> "ProducerFactoryBuilder":
        self._connection = connection
        return self

    def set_publications(self, *publications: Publication) -> "ProducerFactoryBuilder":
        self._publications = list(publications)
        return self

    def add_publication(
        self,
        publication: Publication | Callable[[PublicationBuilder], Any],
        message_type: Any = None,
    ) -> "ProducerFactoryBuilder":
        """Add a built publication, or build one with a configure callback.

        With message_type, set_data_type() runs before the callback, so
        the callback's explicit setters take precedence.
        """
        if isinstance(publication, Publication):
            if message_type is not None:
                raise InvalidArgumentError(
                    "message_type", "only applies when a configure callback is given"
                )
            self._publications.append(publication)
            return self

        if not callable(publication):
            raise InvalidArgumentError(
                "publication",
                f"expected a Publication or a callable, got {type(publication).__name__}",
            )

        builder = self.publication_builder_class(self._identity_resolver)
        if message_type is not None:
            builder.set_data_type(message_type)
        publication(builder)
        self._publications.append(builder.build())
        return self

    def build(self) -> Any:
        if self._connection is None:
            raise MissingRequiredFieldError("connection", self.entity)
        return self.producer_factory_class(self._connection, self._publications)


class SubscriptionConfigurator:
    """Collects subscriptions that share one channel factory."""

    subscription_builder_class: type[SubscriptionBuilder] = SubscriptionBuilder

    def __init__(
        self,
        channel_factory: ChannelFactory,
        identity_resolver: IdentityResolver | None = None,
    ):
        self.channel_factory = channel_factory
        self._identity_resolver = identity_resolver
        self._subscriptions: list[Subscription] = []

    @property
    def subscriptions(self) -> tuple[Subscription, ...]:
        return tuple(self._subscriptions)

    def add_subscription(
        self,
        subscription: Subscription | Callable[[SubscriptionBuilder], Any],
        message_type: Any = None,
    ) -> "SubscriptionConfigurator":
        """Add a built subscription, or build one with a configure callback.

        With message_type, set_data_type() runs before the callback, so
        the callback's explicit setters take precedence.
        """
        if isinstance(subscription, Subscription):
            if message_type is not None:
                raise InvalidArgumentError(
                    "message_type", "only applies when a configure callback is given"
                )
            self._subscriptions.append(subscription)
            return self

        if not callable(subscription):
            raise InvalidArgumentError(
                "subscription",
                f"expected a Subscription or a callable, got {type(subscription).__name__}",
            )

        builder = self.subscription_builder_class(self._identity_resolver)
        if message_type is not None:
            builder.set_data_type(message_type)
        subscription(builder)
        self._subscriptions.append(builder.build())
        return self


__all__ = [
    "PublicationBuilder",
    "SubscriptionBuilder",
    "ProducerFactoryBuilder",
    "SubscriptionConfigurator",
    "require_min",
    "require_optional_min",
    "require_text",
    "require_enum",
    "freeze_mapping",
]

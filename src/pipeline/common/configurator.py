"""Provider configurator: deferred configuration against one connection.

Every use_*() call appends a pending action and returns immediately. An
action reads self._connection when it runs, not when it was recorded, so
use_publications() / use_subscriptions() may come before or after
set_connection(). finalize() checks that a connection exists and then runs
the actions in the order they were recorded.

Subclasses set the provider name, the connection type and builder, and the
factory/builder classes used by the actions.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from core.errors.exceptions import InvalidArgumentError, MissingConnectionError
from core.logging.utilities import log_with_context
from pipeline.common.builders import ProducerFactoryBuilder, SubscriptionConfigurator
from pipeline.common.factories import ChannelFactory
from pipeline.common.naming import IdentityResolver

if TYPE_CHECKING:
    from pipeline.common.composer import PipelineComposer

logger = logging.getLogger(__name__)

PendingAction = Callable[["PipelineComposer"], None]

STORE_SLOTS = ("outbox", "inbox", "distributed_lock")


class ProviderConfigurator:
    """Base class for transport configurators.

    Class attributes a provider sets:
        provider: name used in errors and logs
        connection_type: type accepted by set_connection() as-is
        connection_builder_class: builder passed to set_connection(callable)
        producer_factory_builder_class: handed to use_publications() callbacks
        subscription_configurator_class: handed to use_subscriptions() callbacks
        consumer_factory_class: constructed from the connection per channel
        supported_stores: subset of STORE_SLOTS this provider can back
    """

    provider: str = "provider"
    connection_type: type = object
    connection_builder_class: type | None = None
    producer_factory_builder_class: type[ProducerFactoryBuilder] = ProducerFactoryBuilder
    subscription_configurator_class: type[SubscriptionConfigurator] = SubscriptionConfigurator
    consumer_factory_class: type | None = None
    supported_stores: frozenset[str] = frozenset()

    def __init__(self, identity_resolver: IdentityResolver | None = None):
        self._identity_resolver = identity_resolver
        self._connection: Any = None
        self._actions: list[PendingAction] = []

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def pending_actions(self) -> int:
        return len(self._actions)

    def set_connection(self, connection: Any) -> "ProviderConfigurator":
        """Set the connection, or build it with a configure callback.

        Does not touch the pending actions.
        """
        if isinstance(connection, self.connection_type):
            self._connection = connection
        elif callable(connection) and self.connection_builder_class is not None:
            builder = self.connection_builder_class()
            connection(builder)
            self._connection = self._coerce_connection(builder.build())
        else:
            raise InvalidArgumentError(
                "connection",
                f"expected {self.connection_type.__name__} or a configure callback, "
                f"got {type(connection).__name__}",
            )
        return self

    def _coerce_connection(self, built: Any) -> Any:
        """Turn the connection builder's output into the connection value."""
        return built

    def _defer(self, action: PendingAction) -> "ProviderConfigurator":
        self._actions.append(action)
        return self

    # -------------------------------------------------------------------------
    # Publications and subscriptions
    # -------------------------------------------------------------------------

    def use_publications(
        self, configure: Callable[[ProducerFactoryBuilder], Any]
    ) -> "ProviderConfigurator":
        def register_producers(composer: "PipelineComposer") -> None:
            builder = self.producer_factory_builder_class(self._identity_resolver)
            builder.set_connection(self._connection)
            configure(builder)
            composer.producers(builder.build())

        return self._defer(register_producers)

    def use_subscriptions(
        self, configure: Callable[[SubscriptionConfigurator], Any]
    ) -> "ProviderConfigurator":
        def register_subscriptions(composer: "PipelineComposer") -> None:
            channel_factory = ChannelFactory(self.consumer_factory_class(self._connection))
            configurator = self.subscription_configurator_class(
                channel_factory, self._identity_resolver
            )
            configure(configurator)
            composer.subscriptions(channel_factory, configurator.subscriptions)

        return self._defer(register_subscriptions)

    # -------------------------------------------------------------------------
    # Outbox, inbox, distributed lock
    # -------------------------------------------------------------------------

    def use_outbox(self, configure: Callable[[Any], Any] | None = None) -> "ProviderConfigurator":
        return self._defer_store("outbox", configure)

    def use_inbox(self, configure: Callable[[Any], Any] | None = None) -> "ProviderConfigurator":
        return self._defer_store("inbox", configure)

    def use_distributed_lock(
        self, configure: Callable[[Any], Any] | None = None
    ) -> "ProviderConfigurator":
        return self._defer_store("distributed_lock", configure)

    def create_store_builder(self, slot: str, connection: Any) -> Any:
        """Return a builder for the given store slot, seeded from the connection."""
        raise NotImplementedError

    def _defer_store(
        self, slot: str, configure: Callable[[Any], Any] | None
    ) -> "ProviderConfigurator":
        if slot not in self.supported_stores:
            raise InvalidArgumentError(slot, f"provider '{self.provider}' does not offer a {slot}")

        def register_store(composer: "PipelineComposer") -> None:
            builder = self.create_store_builder(slot, self._connection)
            if configure is not None:
                configure(builder)
            getattr(composer, slot)(builder.build())

        return self._defer(register_store)

    # -------------------------------------------------------------------------
    # Finalize
    # -------------------------------------------------------------------------

    def finalize(self, composer: "PipelineComposer") -> None:
        """Apply every pending action to the composer, in insertion order.

        Raises:
            MissingConnectionError: no connection was set
        """
        if self._connection is None:
            raise MissingConnectionError(self.provider)

        log_with_context(
            logger,
            logging.DEBUG,
            "Finalizing provider configurator",
            provider=self.provider,
            action_count=len(self._actions),
        )
        for action in self._actions:
            action(composer)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(connection_set={self._connection is not None}, "
            f"pending_actions={len(self._actions)})"
        )


__all__ = ["ProviderConfigurator", "PendingAction", "STORE_SLOTS"]

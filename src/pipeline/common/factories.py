"""Factory contracts between the composer and transport adapters.

Every provider supplies:
- a producer factory constructed as ProducerFactory(connection, publications)
- a consumer factory constructed from a connection

The composer wraps the consumer factory in ChannelFactory and never calls
any of the async create methods itself; the runtime does that after the
pipeline registration is built.
"""

from typing import Any, Generic, Protocol, Sequence, TypeVar

from pipeline.common.types import Publication, Subscription

ConnectionT = TypeVar("ConnectionT")


class ProducerFactory(Protocol):
    """Creates transport producers for a fixed set of publications."""

    connection: Any
    publications: tuple[Publication, ...]

    async def create(self) -> dict[str, Any]:
        """Create one producer per publication topic, keyed by topic."""
        ...


class ConsumerFactory(Protocol):
    """Creates a transport consumer for one subscription."""

    connection: Any

    async def create(self, subscription: Subscription) -> Any:
        ...


class BaseProducerFactory(Generic[ConnectionT]):
    """Holds the (connection, publications) pair every adapter receives."""

    def __init__(self, connection: ConnectionT, publications: Sequence[Publication]):
        self.connection = connection
        self.publications = tuple(publications)

    @property
    def topics(self) -> list[str]:
        return [publication.topic for publication in self.publications]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(topics={self.topics})"


class ChannelFactory:
    """Opens channels (consumers) for subscriptions through a consumer factory."""

    def __init__(self, consumer_factory: ConsumerFactory):
        self.consumer_factory = consumer_factory

    async def create_channel(self, subscription: Subscription) -> Any:
        return await self.consumer_factory.create(subscription)

    def __repr__(self) -> str:
        return f"ChannelFactory({type(self.consumer_factory).__name__})"


__all__ = [
    "ProducerFactory",
    "ConsumerFactory",
    "BaseProducerFactory",
    "ChannelFactory",
]

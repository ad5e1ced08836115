"""PipelineComposer: aggregates provider registrations into one registration.

Registrations:
- producers(factory): accumulates
- subscriptions(channel_factory, subscriptions): accumulates
- outbox / inbox / distributed_lock: single slot

Single slots are last-write-wins by default and the replaced value is
logged at WARNING. With strict_slots=True a second registration raises
DuplicateRegistrationError instead.

build() finalizes every configurator registered through using(), in
registration order, and freezes the result. If any configurator fails,
the composer is restored to its state before build() and the error
propagates. After a successful build() the composer is closed: build()
returns the same registration and every mutating call raises.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from core.errors.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    InvalidArgumentError,
)
from core.logging.utilities import log_exception, log_with_context
from pipeline.common.configurator import STORE_SLOTS, ProviderConfigurator
from pipeline.common.types import Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelRegistration:
    channel_factory: Any
    subscriptions: tuple[Subscription, ...]


@dataclass(frozen=True)
class PipelineRegistration:
    """Everything the runtime needs to start the pipeline."""

    producers: tuple[Any, ...] = ()
    channels: tuple[ChannelRegistration, ...] = ()
    outbox: Any = None
    inbox: Any = None
    distributed_lock: Any = None

    @property
    def subscriptions(self) -> tuple[Subscription, ...]:
        return tuple(sub for channel in self.channels for sub in channel.subscriptions)

    @property
    def publications(self) -> tuple[Any, ...]:
        return tuple(
            pub for producer in self.producers for pub in getattr(producer, "publications", ())
        )


class PipelineComposer:
    def __init__(self, strict_slots: bool = False):
        self.strict_slots = strict_slots
        self._configurators: list[ProviderConfigurator] = []
        self._producers: list[Any] = []
        self._channels: list[ChannelRegistration] = []
        self._slots: dict[str, Any] = dict.fromkeys(STORE_SLOTS)
        self._registration: PipelineRegistration | None = None

    @property
    def finalized(self) -> bool:
        return self._registration is not None

    @property
    def configurators(self) -> tuple[ProviderConfigurator, ...]:
        return tuple(self._configurators)

    def _ensure_open(self, operation: str) -> None:
        if self._registration is not None:
            raise ConfigurationError(
                f"Cannot call {operation}() on a composer that has already been built"
            )

    # -------------------------------------------------------------------------
    # Provider configurators
    # -------------------------------------------------------------------------

    def using(
        self,
        configurator: ProviderConfigurator | type[ProviderConfigurator],
        configure: Callable[[ProviderConfigurator], Any] | None = None,
    ) -> "PipelineComposer":
        """Register a provider configurator, finalized later by build().

        Accepts an instance or a ProviderConfigurator subclass. configure
        runs immediately against the configurator.
        """
        self._ensure_open("using")
        if isinstance(configurator, type) and issubclass(configurator, ProviderConfigurator):
            configurator = configurator()
        if not isinstance(configurator, ProviderConfigurator):
            raise InvalidArgumentError(
                "configurator",
                f"expected a ProviderConfigurator, got {type(configurator).__name__}",
            )
        if any(registered is configurator for registered in self._configurators):
            raise InvalidArgumentError(
                "configurator", f"{configurator!r} is already registered with this composer"
            )

        if configure is not None:
            configure(configurator)
        self._configurators.append(configurator)
        return self

    # -------------------------------------------------------------------------
    # Registrations
    # -------------------------------------------------------------------------

    def producers(self, factory: Any) -> "PipelineComposer":
        self._ensure_open("producers")
        if factory is None:
            raise InvalidArgumentError("producers", "factory must not be None")
        self._producers.append(factory)
        return self

    def subscriptions(
        self, channel_factory: Any, subscriptions: Sequence[Subscription]
    ) -> "PipelineComposer":
        self._ensure_open("subscriptions")
        if channel_factory is None:
            raise InvalidArgumentError("subscriptions", "channel_factory must not be None")
        self._channels.append(ChannelRegistration(channel_factory, tuple(subscriptions)))
        return self

    def outbox(self, config: Any) -> "PipelineComposer":
        return self._set_slot("outbox", config)

    def inbox(self, config: Any) -> "PipelineComposer":
        return self._set_slot("inbox", config)

    def distributed_lock(self, config: Any) -> "PipelineComposer":
        return self._set_slot("distributed_lock", config)

    def _set_slot(self, slot: str, config: Any) -> "PipelineComposer":
        self._ensure_open(slot)
        if config is None:
            raise InvalidArgumentError(slot, "config must not be None")

        previous = self._slots[slot]
        if previous is not None:
            if self.strict_slots:
                raise DuplicateRegistrationError(slot)
            log_with_context(
                logger,
                logging.WARNING,
                f"Replacing registered {slot}",
                slot=slot,
                replaced=type(previous).__name__,
            )
        self._slots[slot] = config
        return self

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def build(self) -> PipelineRegistration:
        """Finalize all configurators and return the frozen registration."""
        if self._registration is not None:
            return self._registration

        snapshot = (list(self._producers), list(self._channels), dict(self._slots))
        try:
            for configurator in self._configurators:
                configurator.finalize(self)
        except Exception as e:
            self._producers, self._channels, self._slots = snapshot
            log_exception(
                logger,
                e,
                "Pipeline composition failed",
                include_traceback=False,
                configurator_count=len(self._configurators),
            )
            raise

        self._registration = PipelineRegistration(
            producers=tuple(self._producers),
            channels=tuple(self._channels),
            outbox=self._slots["outbox"],
            inbox=self._slots["inbox"],
            distributed_lock=self._slots["distributed_lock"],
        )

        log_with_context(
            logger,
            logging.INFO,
            "Pipeline composed",
            configurator_count=len(self._configurators),
            producer_count=len(self._registration.producers),
            channel_count=len(self._registration.channels),
            subscription_count=len(self._registration.subscriptions),
        )
        return self._registration


__all__ = ["PipelineComposer", "PipelineRegistration", "ChannelRegistration"]

"""Message type identity and name defaulting.

A message type's identity has two parts:
- full_name: fully-qualified dotted name, used for subscription names
- short_name: bare class name, used for channel names, routing keys and topics

Builders call fill_missing() from set_data_type(). It only fills fields
that are still empty, so calling it twice is harmless and an explicit
value set earlier always survives. Explicit setters write unconditionally,
so a value set after set_data_type() wins as well.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from core.errors.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class MessageIdentity:
    full_name: str
    short_name: str


IdentityResolver = Callable[[Any], MessageIdentity]


def identity_of(message_type: Any) -> MessageIdentity:
    """Derive the identity of a message type.

    Accepts a class, a dotted string ("orders.events.OrderEvent") or a
    ready-made MessageIdentity.

    Raises:
        InvalidArgumentError: for anything else, or an empty string
    """
    if isinstance(message_type, MessageIdentity):
        return message_type

    if isinstance(message_type, type):
        return MessageIdentity(
            full_name=f"{message_type.__module__}.{message_type.__qualname__}",
            short_name=message_type.__name__,
        )

    if isinstance(message_type, str):
        if not message_type.strip():
            raise InvalidArgumentError("message_type", "must not be empty")
        return MessageIdentity(
            full_name=message_type,
            short_name=message_type.rsplit(".", 1)[-1],
        )

    raise InvalidArgumentError(
        "message_type",
        f"expected a class, dotted name or MessageIdentity, got {type(message_type).__name__}",
    )


def is_empty(value: str | None) -> bool:
    return value is None or value == ""


def fill_missing(
    identity: MessageIdentity,
    name: str | None,
    channel_name: str | None,
    routing_key: str | None,
) -> tuple[str, str, str]:
    """Return (name, channel_name, routing_key) with empty entries derived."""
    return (
        identity.full_name if is_empty(name) else name,
        identity.short_name if is_empty(channel_name) else channel_name,
        identity.short_name if is_empty(routing_key) else routing_key,
    )


__all__ = [
    "MessageIdentity",
    "IdentityResolver",
    "identity_of",
    "is_empty",
    "fill_missing",
]

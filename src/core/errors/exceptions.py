"""
Unified exception hierarchy for the pipeline composer.

Configuration errors are raised synchronously while a pipeline is being
composed and are never retried: a misconfigured pipeline must not start.
"""


# Import ErrorCategory from canonical source to avoid duplicate enum issues
# (comparing enums from different classes always returns False)
from core.types import ErrorCategory


class PipelineError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.AUTH,
            ErrorCategory.UNKNOWN,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(PipelineError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PermanentError):
    """Pipeline composition failed. Fatal to startup."""

    pass


class MissingConnectionError(ConfigurationError):
    """A provider configurator was finalized without a connection."""

    def __init__(self, provider: str, cause: Exception | None = None):
        message = f"No connection was set for provider '{provider}'"
        super().__init__(message, cause, {"provider": provider})
        self.provider = provider


class MissingRequiredFieldError(ConfigurationError):
    """A builder's build() was called with a required field unset."""

    def __init__(
        self,
        field_name: str,
        entity: str | None = None,
        cause: Exception | None = None,
    ):
        message = f"{entity}: {field_name} not set" if entity else f"{field_name} not set"
        super().__init__(message, cause, {"field_name": field_name, "entity": entity})
        self.field_name = field_name
        self.entity = entity


class InvalidArgumentError(ConfigurationError):
    """A setter rejected its argument (out of range, None, wrong type)."""

    def __init__(self, argument: str, message: str, cause: Exception | None = None):
        super().__init__(f"{argument}: {message}", cause, {"argument": argument})
        self.argument = argument


class DuplicateRegistrationError(ConfigurationError):
    """A single-slot registration was set twice on a strict composer."""

    def __init__(self, slot: str, cause: Exception | None = None):
        message = f"'{slot}' is already registered and the composer only allows one"
        super().__init__(message, cause, {"slot": slot})
        self.slot = slot


__all__ = [
    "ErrorCategory",
    "PipelineError",
    "PermanentError",
    "ConfigurationError",
    "MissingConnectionError",
    "MissingRequiredFieldError",
    "InvalidArgumentError",
    "DuplicateRegistrationError",
]

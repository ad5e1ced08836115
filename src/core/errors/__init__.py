"""
Exception hierarchy.

Provides:
- PipelineError base with retry classification
- ConfigurationError family raised while composing a pipeline
"""

from core.errors.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    # Enums
    ErrorCategory,
    InvalidArgumentError,
    MissingConnectionError,
    MissingRequiredFieldError,
    PermanentError,
    # Base classes
    PipelineError,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "PipelineError",
    "PermanentError",
    # Configuration errors
    "ConfigurationError",
    "MissingConnectionError",
    "MissingRequiredFieldError",
    "InvalidArgumentError",
    "DuplicateRegistrationError",
]

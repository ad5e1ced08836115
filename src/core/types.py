"""
Core types shared across modules.

ErrorCategory lives here so that every error class compares against a
single enum definition.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed on a later attempt
        AUTH: Credential problems (bad SASL password, expired SAS token)
        PERMANENT: Failures that will not succeed on retry, including every
                   configuration error raised while composing a pipeline
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = ["ErrorCategory"]

"""
Core library: shared, transport-agnostic components.

Modules:
    errors      - Exception hierarchy, including configuration errors
    logging     - Structured JSON logging with context propagation
    utils       - Serialization helpers

Design Principles:
    - No dependencies on transport SDKs
    - All modules are independently testable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
]

"""Tests for core.types."""

from core.errors.exceptions import ErrorCategory as ExceptionsErrorCategory
from core.types import ErrorCategory


class TestErrorCategory:

    def test_values_are_lowercase_names(self):
        for category in ErrorCategory:
            assert category.value == category.name.lower()

    def test_exceptions_module_reexports_same_enum(self):
        """Comparing members across modules only works with one enum class."""
        assert ExceptionsErrorCategory is ErrorCategory
        assert ExceptionsErrorCategory.PERMANENT == ErrorCategory.PERMANENT

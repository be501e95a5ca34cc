"""Exceptions raised while parsing and evaluating filters."""

from typing import Optional


class FilterError(Exception):
    """Base class for all filter errors."""

    def __init__(self, message: str, filter_string: Optional[str] = None):
        self.message = message
        self.filter_string = filter_string
        super().__init__(message)


class InvalidSyntaxError(FilterError):
    """Missing quote or parenthesis, bad connective, malformed block."""


class UnknownColumnTypeError(FilterError):
    """A ``column:`` prefix names a column with no usable column type."""

    def __init__(self, column_name: str, filter_string: Optional[str] = None):
        self.column_name = column_name
        super().__init__(
            f"Unable to load column type for '{column_name}'", filter_string
        )


class LeafEvaluationError(FilterError):
    """A column type failed while compiling or testing a block."""

    def __init__(self, column_name: str, message: str, filter_string: Optional[str] = None):
        self.column_name = column_name
        self.reason = message
        super().__init__(f"{column_name}: {message}", filter_string)


class ColumnTypeError(Exception):
    """Raised by column types for invalid field-specific filter text."""


class PatternError(ColumnTypeError):
    """Raised for pattern strings that cannot be compiled."""

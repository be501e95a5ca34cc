"""Column types: per-column compile and match logic for filter blocks."""

from .base import ColumnType, ColumnTypeRegistry
from .name import NameColumnType
from .size import SizeColumnType, SizeFilter, parse_size_filter
from .text import TextColumnType
from .time import TimeColumnType, TimeFilter, parse_time_filter

__all__ = [
    "ColumnType",
    "ColumnTypeRegistry",
    "NameColumnType",
    "SizeColumnType",
    "SizeFilter",
    "parse_size_filter",
    "TextColumnType",
    "TimeColumnType",
    "TimeFilter",
    "parse_time_filter",
]

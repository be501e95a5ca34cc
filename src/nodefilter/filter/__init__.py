"""Filter module for nodefilter - boolean filters over node columns."""

from .filter import Filter, evaluate, need_recompile
from .lang import (
    DEFAULT_COLUMN,
    Block,
    Connective,
    Element,
    iter_blocks,
    parse_block,
    parse_element,
    parse_filter,
    scan_balanced_parens,
    scan_quoted,
)
from .registry import FilterRegistry

__all__ = [
    "Filter",
    "FilterRegistry",
    "evaluate",
    "need_recompile",
    "DEFAULT_COLUMN",
    "Block",
    "Connective",
    "Element",
    "iter_blocks",
    "parse_block",
    "parse_element",
    "parse_filter",
    "scan_balanced_parens",
    "scan_quoted",
]

"""Column type for sizes.

Filter format: ``[COMP] VALUE`` where COMP is one of ``<``, ``<=``, ``=``,
``>=`` or ``>`` (defaults to ``=``). VALUE is a number, optionally suffixed
with a unit (B, K, M, G or T, multiplied by 1024 as many times as needed).
With ``=`` a range can be given as ``VALUE-VALUE``; bounds are inclusive and
may be given in any order.
"""

from typing import Any, Dict, Optional

from loguru import logger
from pyparsing import (
    Char,
    Group,
    Opt,
    ParseException,
    Suppress,
    Word,
    nums,
    one_of,
)

from ..errors import ColumnTypeError
from ..size import unit_multiplier
from .base import ColumnType

COMPARISONS = {
    "<": lambda size, ref, _: size < ref,
    "<=": lambda size, ref, _: size <= ref,
    "=": lambda size, ref, _: size == ref,
    ">=": lambda size, ref, _: size >= ref,
    ">": lambda size, ref, _: size > ref,
    "range": lambda size, ref, ref2: ref <= size <= ref2,
}


def _to_bytes(toks):
    number = int(toks[0][0])
    unit = toks[0][1] if len(toks[0]) > 1 else "B"
    return number * unit_multiplier(unit)


def create_parser():
    """Create and return the size filter parser."""
    comparison = one_of("<= < >= > =")
    unit = Char("BKMGT").leave_whitespace()
    value = Group(Word(nums) + Opt(unit)).set_parse_action(_to_bytes)
    return (
        Opt(comparison("comp"))
        + value("ref")
        + Opt(Suppress("-") + value("ref2"))
    )


_parser = create_parser()


class SizeFilter:
    """Compiled size filter."""

    def __init__(self, comp: str, ref: int, ref2: Optional[int] = None):
        self.comp = comp
        self.ref = ref
        self.ref2 = ref2

    def test(self, size: int) -> bool:
        return COMPARISONS[self.comp](size, self.ref, self.ref2)

    def __repr__(self):
        if self.comp == "range":
            return f"SizeFilter({self.ref}-{self.ref2})"
        return f"SizeFilter({self.comp}{self.ref})"


def parse_size_filter(filter_text: str) -> SizeFilter:
    """Parse a size filter such as ``>=10M`` or ``1K-2K``.

    Raises:
        ColumnTypeError: If the filter is invalid
    """
    try:
        result = _parser.parse_string(filter_text, parse_all=True)
    except ParseException as e:
        raise ColumnTypeError(f"Invalid size filter '{filter_text}': {e}") from e

    comp, ref = result.get("comp", "="), result["ref"]
    if "ref2" not in result:
        return SizeFilter(comp, ref)
    if comp != "=":
        raise ColumnTypeError(f"Invalid size filter '{filter_text}': ranges only work with '='")
    ref2 = result["ref2"]
    return SizeFilter("range", min(ref, ref2), max(ref, ref2))


class SizeColumnType(ColumnType):
    name = "size"

    def compile(self, filter_text: str) -> SizeFilter:
        return parse_size_filter(filter_text)

    def is_match(self, data: SizeFilter, node: Any, ct_data: Optional[Dict[str, Any]] = None) -> bool:
        prop = (ct_data or {}).get("property", "size")
        size = node.get(prop)
        if size is None:
            return False
        if isinstance(size, bool) or not isinstance(size, int):
            logger.warning(f"Property '{prop}' of {node!r} isn't a size")
            return False
        return data.test(size)

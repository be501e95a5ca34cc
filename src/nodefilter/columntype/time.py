"""Column type for dates and times.

Filter format: ``[UNIT] [COMP] VALUE`` where COMP is one of ``<``, ``<=``,
``=``, ``>=`` or ``>`` (defaults to ``=``) and UNIT selects what is compared:

- ``D``: the full date (default), VALUE is ``YYYY-MM-DD[ HH:MM[:SS]]``
- ``Y`` year, ``m`` month, ``V`` ISO week, ``d`` day of the month, ``H`` hour,
  ``M`` minute, ``S`` second, ``j`` day of the year, ``u`` day of the week
  (1-7, Monday first), ``w`` day of the week (0-6, Sunday first)
- ``A``: the age, VALUE is a number optionally followed by one of
  ``Y m V d H M S`` (defaults to ``d``)

Except for ages, ``=`` also takes a range ``VALUE-VALUE``. Bounds are
inclusive. They are reordered, except for days of the week where ``6-1``
(with ``w``) means Saturday to Monday.

For ages, ``<`` means more recent: ``A<2H`` matches the last two hours.
``=`` matches the whole calendar period: ``A0d`` is today, ``A=1V`` last week.
"""

import calendar
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from loguru import logger
from pyparsing import (
    Char,
    Opt,
    ParseBaseException,
    ParseFatalException,
    Regex,
    Suppress,
    Word,
    nums,
    one_of,
)

from ..errors import ColumnTypeError
from .base import ColumnType

PARTS: Dict[str, Callable[[datetime], int]] = {
    "Y": lambda dt: dt.year,
    "m": lambda dt: dt.month,
    "V": lambda dt: dt.isocalendar()[1],
    "d": lambda dt: dt.day,
    "H": lambda dt: dt.hour,
    "M": lambda dt: dt.minute,
    "S": lambda dt: dt.second,
    "j": lambda dt: dt.timetuple().tm_yday,
    "u": lambda dt: dt.isoweekday(),
    "w": lambda dt: dt.isoweekday() % 7,
}
AGE_UNITS = "YmVdHMS"
WEEKDAY_UNITS = "uw"

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")
_AGE_DELTAS = {"V": "weeks", "d": "days", "H": "hours", "M": "minutes", "S": "seconds"}


def _to_datetime(s, loc, toks):
    text = " ".join(toks[0].split())
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ParseFatalException(s, loc, f"Invalid date '{toks[0]}'")


def create_parser():
    """Create and return the time filter parser."""
    comparison = Opt(one_of("<= < >= > =")("comp"))
    number = Word(nums).set_parse_action(lambda toks: int(toks[0]))
    date = Regex(r"\d{4}-\d{2}-\d{2}(?:[ \t]+\d{2}:\d{2}(?::\d{2})?)?")
    date.set_parse_action(_to_datetime)

    age = Char("A")("unit") + comparison + number("ref") + Opt(Char(AGE_UNITS)("age_unit"))
    part = (
        Char("".join(PARTS))("unit")
        + comparison
        + number("ref")
        + Opt(Suppress("-") + number("ref2"))
    )
    full_date = (
        Opt(Char("D")("unit"))
        + comparison
        + date("ref")
        + Opt(Suppress("-") + date("ref2"))
    )
    return age | part | full_date


_parser = create_parser()


def _add_months(dt: datetime, months: int) -> datetime:
    year, month = divmod(dt.year * 12 + dt.month - 1 + months, 12)
    day = min(dt.day, calendar.monthrange(year, month + 1)[1])
    return dt.replace(year=year, month=month + 1, day=day)


def _go_back(now: datetime, unit: str, amount: int) -> datetime:
    if unit == "Y":
        return _add_months(now, -12 * amount)
    if unit == "m":
        return _add_months(now, -amount)
    return now - timedelta(**{_AGE_DELTAS[unit]: amount})


def _same_period(when: datetime, ref: datetime, unit: str) -> bool:
    # ISO weeks can span two months, or two years
    if unit == "V":
        return when.isocalendar()[:2] == ref.isocalendar()[:2]
    for part in "YmdHMS":
        if PARTS[part](when) != PARTS[part](ref):
            return False
        if part == unit:
            return True
    return True


class TimeFilter:
    """Compiled time filter, see the module docstring for its syntax."""

    def __init__(self, unit: str, comp: str, ref: Any, ref2: Any = None, age_unit: str = "d"):
        self.unit = unit
        self.comp = comp
        self.ref = ref
        self.ref2 = ref2
        self.age_unit = age_unit

    def test(self, when: datetime, now: datetime) -> bool:
        if self.unit == "A":
            return self._test_age(when, now)

        value = when if self.unit == "D" else PARTS[self.unit](when)
        if self.comp == "range":
            # only days of the week keep a reversed range, which wraps around
            if self.ref > self.ref2:
                return value >= self.ref or value <= self.ref2
            return self.ref <= value <= self.ref2
        if self.comp == "<":
            return value < self.ref
        if self.comp == "<=":
            return value <= self.ref
        if self.comp == ">":
            return value > self.ref
        if self.comp == ">=":
            return value >= self.ref
        return value == self.ref

    def _test_age(self, when: datetime, now: datetime) -> bool:
        limit = now if self.ref == 0 else _go_back(now, self.age_unit, self.ref)
        # the younger the file, the later its time
        if self.comp == "<":
            return when > limit
        if self.comp == "<=":
            return when >= limit
        if self.comp == ">":
            return when < limit
        if self.comp == ">=":
            return when <= limit
        return _same_period(when, limit, self.age_unit)

    def __repr__(self):
        if self.comp == "range":
            return f"TimeFilter({self.unit}{self.ref}-{self.ref2})"
        if self.unit == "A":
            return f"TimeFilter(A{self.comp}{self.ref}{self.age_unit})"
        return f"TimeFilter({self.unit}{self.comp}{self.ref})"


def parse_time_filter(filter_text: str) -> TimeFilter:
    """Parse a time filter such as ``>=2024-01-01``, ``w6-1`` or ``A<2H``.

    Raises:
        ColumnTypeError: If the filter is invalid
    """
    try:
        result = _parser.parse_string(filter_text, parse_all=True)
    except ParseBaseException as e:
        raise ColumnTypeError(f"Invalid time filter '{filter_text}': {e}") from e

    unit = result.get("unit", "D")
    comp, ref = result.get("comp", "="), result["ref"]
    if unit == "A":
        return TimeFilter(unit, comp, ref, age_unit=result.get("age_unit", "d"))
    if "ref2" not in result:
        return TimeFilter(unit, comp, ref)
    if comp != "=":
        raise ColumnTypeError(f"Invalid time filter '{filter_text}': ranges only work with '='")

    ref2 = result["ref2"]
    if unit not in WEEKDAY_UNITS and ref > ref2:
        ref, ref2 = ref2, ref
    return TimeFilter(unit, "range", ref, ref2)


class TimeColumnType(ColumnType):
    """Matches datetime properties (or UNIX timestamps).

    Args:
        now: Returns the current local time, used for ages
    """

    name = "time"

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        self.now = now

    def compile(self, filter_text: str) -> TimeFilter:
        return parse_time_filter(filter_text)

    def is_match(self, data: TimeFilter, node: Any, ct_data: Optional[Dict[str, Any]] = None) -> bool:
        ct_data = ct_data or {}
        prop = ct_data.get("property") or ct_data.get("column", "mtime")
        value = node.get(prop)
        if value is None:
            return False
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = datetime.fromtimestamp(value)
        elif not isinstance(value, datetime):
            logger.warning(f"Property '{prop}' of {node!r} isn't a time")
            return False
        elif value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return data.test(value, self.now())

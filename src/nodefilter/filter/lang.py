"""Filter string parser.

A filter is a flat list of elements per nesting level. Each element carries
the connective joining it to its predecessor, a NOT flag, and either a block
(one column plus its field-specific filter text) or a nested group::

    size:>1M and not (name:"$.jpg" or name:"$.png")

Unquoted filter text runs to the end of the enclosing scope, so such a block
has to be the last element of its level.
"""

from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from loguru import logger

from ..errors import InvalidSyntaxError, LeafEvaluationError

DEFAULT_COLUMN = "name"
BLANKS = " \t"

# Resolver from a column name to its column type, see columntype.base
ColumnResolver = Callable[[str], Any]


class Connective(Enum):
    AND = "AND"
    OR = "OR"


class Block:
    """A leaf: one column and the filter text to match on it."""

    def __init__(self, column_name: str, filter_text: str, column_type: Any):
        self.column_name = column_name
        self.filter_text = filter_text
        self.column_type = column_type
        # compiled by column_type on first use
        self.data: Any = None
        self.compiled = False

    def compile(self) -> None:
        if self.compiled:
            return
        try:
            self.data = self.column_type.compile(self.filter_text)
        except Exception as e:
            raise LeafEvaluationError(self.column_name, str(e)) from e
        self.compiled = True

    def is_match(self, node: Any, ct_data: Any = None) -> bool:
        self.compile()
        try:
            return bool(self.column_type.is_match(self.data, node, ct_data))
        except Exception as e:
            raise LeafEvaluationError(self.column_name, str(e)) from e

    def free(self) -> None:
        if self.compiled:
            data, self.data = self.data, None
            self.compiled = False
            self.column_type.free(data)

    def __repr__(self):
        return f"Block({self.column_name!r}, {self.filter_text!r})"


class Element:
    """One member of a sequence: a block or a parenthesized group."""

    def __init__(
        self,
        connective: Connective = Connective.AND,
        negate: bool = False,
        block: Optional[Block] = None,
        group: Optional[List["Element"]] = None,
    ):
        self.connective = connective
        self.negate = negate
        self.block = block
        self.group = group

    @property
    def is_block(self) -> bool:
        return self.block is not None

    def __repr__(self):
        neg = "NOT " if self.negate else ""
        payload = self.block if self.is_block else self.group
        return f"Element({self.connective.value} {neg}{payload!r})"


def iter_blocks(sequence: List[Element]):
    """Yield every block of ``sequence``, depth first."""
    for element in sequence:
        if element.is_block:
            yield element.block
        else:
            yield from iter_blocks(element.group)


def free_sequence(sequence: Optional[List[Element]]) -> None:
    """Release the compiled data of every block in ``sequence``.

    A column type failing to free its data is logged, and the remaining
    blocks are still released.
    """
    if not sequence:
        return
    for block in iter_blocks(sequence):
        try:
            block.free()
        except Exception:
            logger.exception(f"Failed to free compiled data of {block!r}")


def _skip_blanks(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in BLANKS:
        pos += 1
    return pos


def _at_keyword(text: str, pos: int, keyword: str) -> bool:
    """Case-insensitive keyword followed by '(' or a blank."""
    end = pos + len(keyword)
    if text[pos:end].upper() != keyword:
        return False
    return end < len(text) and (text[end] == "(" or text[end] in BLANKS)


def scan_quoted(text: str, start: int) -> Tuple[str, int]:
    """Read a quoted string whose opening quote sits just before ``start``.

    A backslash copies the following character literally. Returns the
    unescaped content and the index just past the closing quote.

    Raises:
        InvalidSyntaxError: If the closing quote is missing
    """
    chars = []
    pos = start
    while pos < len(text):
        c = text[pos]
        if c == "\\":
            pos += 1
            if pos >= len(text):
                break
            chars.append(text[pos])
        elif c == '"':
            return "".join(chars), pos + 1
        else:
            chars.append(c)
        pos += 1
    raise InvalidSyntaxError(f"Missing closing quote: {text[start - 1:]}")


def scan_balanced_parens(text: str, start: int) -> int:
    """Return the index of the ')' closing the group opened just before ``start``.

    Parentheses within quoted strings are not counted.

    Raises:
        InvalidSyntaxError: On missing closing parenthesis or quote
    """
    depth = 0
    pos = start
    while pos < len(text):
        c = text[pos]
        if c == '"':
            _, pos = scan_quoted(text, pos + 1)
            continue
        if c == "(":
            depth += 1
        elif c == ")":
            if depth == 0:
                return pos
            depth -= 1
        pos += 1
    raise InvalidSyntaxError(f"Missing closing parenthesis: {text[start - 1:]}")


def parse_block(scope: str, pos: int, resolve: ColumnResolver) -> Tuple[Block, Optional[int]]:
    """Parse one block starting at ``pos``.

    Returns the block and the position to continue from, or ``None`` when the
    block's filter text ran to the end of ``scope``.
    """
    pos = _skip_blanks(scope, pos)

    column_name = DEFAULT_COLUMN
    for i in range(pos, len(scope)):
        if scope[i] == '"':
            break
        if scope[i] == ":":
            column_name = scope[pos:i]
            pos = i + 1
            break

    column_type = resolve(column_name)

    if pos < len(scope) and scope[pos] == '"':
        filter_text, next_pos = scan_quoted(scope, pos + 1)
    else:
        filter_text, next_pos = scope[pos:], None
        if not filter_text.strip(BLANKS):
            raise InvalidSyntaxError(f"Missing filter for column '{column_name}'")

    return Block(column_name, filter_text, column_type), next_pos


def parse_element(scope: str, resolve: ColumnResolver) -> List[Element]:
    """Parse ``scope`` into a sequence of elements, recursing into groups."""
    sequence: List[Element] = []
    pos = _skip_blanks(scope, 0)

    while True:
        element = Element()
        if sequence:
            if _at_keyword(scope, pos, "AND"):
                element.connective = Connective.AND
                pos += 3
            elif _at_keyword(scope, pos, "OR"):
                element.connective = Connective.OR
                pos += 2
            else:
                raise InvalidSyntaxError(f"Expected 'AND' or 'OR': {scope[pos:]}")

        pos = _skip_blanks(scope, pos)
        if _at_keyword(scope, pos, "NOT"):
            element.negate = True
            pos += 3

        pos = _skip_blanks(scope, pos)
        if pos < len(scope) and scope[pos] == "(":
            end = scan_balanced_parens(scope, pos + 1)
            element.group = parse_element(scope[pos + 1:end], resolve)
            next_pos: Optional[int] = end + 1
        else:
            element.block, next_pos = parse_block(scope, pos, resolve)

        sequence.append(element)

        if next_pos is None:
            break
        pos = _skip_blanks(scope, next_pos)
        if pos >= len(scope):
            break

    return sequence


def parse_filter(filter_string: str, resolve: ColumnResolver) -> List[Element]:
    """Parse a filter string and return its top-level sequence.

    Args:
        filter_string: The filter, e.g. ``size:>1M and name:"$.txt"``
        resolve: Callable returning the column type for a column name

    Raises:
        InvalidSyntaxError: If the filter string is invalid
        UnknownColumnTypeError: If a column has no column type
    """
    sequence = parse_element(filter_string, resolve)
    logger.debug(f"Parsed filter {filter_string!r}: {sequence!r}")
    return sequence

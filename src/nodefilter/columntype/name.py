"""Column type for node names.

A filter starting with ``+`` or ``-`` must be followed by ``c`` (or ``d``) to
match containers, or ``i`` (or ``f``) to match items. Anything else is a
pattern matched against the name.
"""

from typing import Any, Dict, Optional

from ..errors import ColumnTypeError
from ..pattern import Pattern
from .base import ColumnType


class NameColumnType(ColumnType):
    name = "name"

    def compile(self, filter_text: str) -> Any:
        if filter_text[:1] in ("+", "-"):
            kind = filter_text[1:]
            if kind in ("c", "d"):
                return True
            if kind in ("i", "f"):
                return False
            raise ColumnTypeError(
                f"ColumnType 'name': Invalid filter syntax: '{filter_text[0]}' must be "
                "followed by 'c' (or 'd') to match containers (directory) "
                f"or 'i' (or 'f') to match items (files), given: {kind}"
            )
        return Pattern(filter_text)

    def is_match(self, data: Any, node: Any, ct_data: Optional[Dict[str, Any]] = None) -> bool:
        if isinstance(data, Pattern):
            return data.is_match(node.name)
        # bool: match containers or items
        return node.is_container() == data

"""Column type for string properties, matched using patterns."""

from typing import Any, Dict, Optional

from loguru import logger

from ..pattern import Pattern
from .base import ColumnType


class TextColumnType(ColumnType):
    name = "text"

    def compile(self, filter_text: str) -> Pattern:
        return Pattern(filter_text)

    def is_match(self, data: Pattern, node: Any, ct_data: Optional[Dict[str, Any]] = None) -> bool:
        ct_data = ct_data or {}
        prop = ct_data.get("property") or ct_data.get("column", "name")
        value = node.get(prop)
        if value is None:
            return False
        if not isinstance(value, str):
            logger.warning(f"Property '{prop}' of {node!r} isn't a string")
            return False
        return data.is_match(value)

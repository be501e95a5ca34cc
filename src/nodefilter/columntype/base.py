"""Column types: the per-column matchers used by filter blocks."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from loguru import logger

from ..config import ConfigStore
from ..errors import UnknownColumnTypeError

COLUMN_TYPE_KEY = "defaults/lists/columns/{column}/type"
COLUMN_PROPERTY_KEY = "defaults/lists/columns/{column}/property"


class ColumnType(ABC):
    """Compiles field-specific filter text and tests nodes against it.

    A column type is shared by every block using it, so all per-block state
    lives in the value returned by ``compile``.
    """

    name: str = ""

    @abstractmethod
    def compile(self, filter_text: str) -> Any:
        """Compile ``filter_text``; raise ColumnTypeError if it is invalid."""

    @abstractmethod
    def is_match(self, data: Any, node: Any, ct_data: Optional[Dict[str, Any]] = None) -> bool:
        """Test ``node`` against the compiled ``data``."""

    def free(self, data: Any) -> None:
        """Release compiled data. Nothing to do for plain Python objects."""


class ColumnTypeRegistry:
    """Maps column names to column types using the configuration."""

    def __init__(self, config: ConfigStore, register_builtins: bool = True):
        self.config = config
        self._types: Dict[str, ColumnType] = {}
        if register_builtins:
            from .name import NameColumnType
            from .size import SizeColumnType
            from .text import TextColumnType
            from .time import TimeColumnType

            for column_type in (NameColumnType(), SizeColumnType(), TextColumnType(), TimeColumnType()):
                self.register(column_type.name, column_type)

    def register(self, type_name: str, column_type: ColumnType) -> None:
        self._types[type_name] = column_type

    def get(self, type_name: str) -> Optional[ColumnType]:
        return self._types.get(type_name)

    def type_name_for(self, column_name: str) -> str:
        """The configured type of a column, falling back to its name."""
        type_name = self.config.get_string(COLUMN_TYPE_KEY.format(column=column_name))
        return type_name or column_name

    def resolve(self, column_name: str) -> ColumnType:
        """Return the column type governing ``column_name``.

        Raises:
            UnknownColumnTypeError: If no column type is registered for it
        """
        type_name = self.type_name_for(column_name)
        column_type = self._types.get(type_name)
        if column_type is None:
            logger.debug(f"No column type '{type_name}' for column '{column_name}'")
            raise UnknownColumnTypeError(column_name)
        return column_type

    def get_ct_data(self, column_name: str) -> Dict[str, Any]:
        """Per-column options handed to ``ColumnType.is_match``."""
        ct_data: Dict[str, Any] = {"column": column_name}
        prop = self.config.get_string(COLUMN_PROPERTY_KEY.format(column=column_name))
        if prop:
            ct_data["property"] = prop
        return ct_data

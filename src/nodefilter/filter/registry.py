"""Shared filters, one live Filter per filter string."""

import weakref
from typing import Any, Iterable, List, Optional

from loguru import logger

from ..config import ConfigStore
from .filter import CtDataGetter, Filter


class FilterRegistry:
    """Hands out Filter objects, reusing the one already alive for a string.

    Filters are only weakly referenced: once nobody uses a filter it is
    released, and asking for it again compiles it anew. A filter closed by
    one of its users is replaced the same way.
    """

    def __init__(self, config: ConfigStore, column_types: Any):
        self.config = config
        self.column_types = column_types
        self._filters: "weakref.WeakValueDictionary[str, Filter]" = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._filters)

    def get_filter(self, filter_string: str) -> Filter:
        f = self._filters.get(filter_string)
        if f is None or f.closed:
            f = Filter(filter_string, self.config, self.column_types)
            self._filters[filter_string] = f
        return f

    def filter_nodes(
        self,
        nodes: Iterable[Any],
        filter_string: str,
        get_ct_data: Optional[CtDataGetter] = None,
    ) -> List[Any]:
        """Return the nodes matching ``filter_string``, in order.

        Raises:
            FilterError: On the first error, parsing or matching
        """
        f = self.get_filter(filter_string)
        matched = [node for node in nodes if f.is_match(node, get_ct_data)]
        logger.debug(f"{len(matched)} node(s) matching {filter_string!r}")
        return matched

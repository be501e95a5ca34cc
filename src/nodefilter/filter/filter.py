"""Filter compilation cache and evaluation."""

import weakref
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from ..config import SIGNAL_OPTION_DELETED, SIGNAL_OPTION_SET, ConfigStore
from ..errors import FilterError, LeafEvaluationError
from .lang import Connective, Element, free_sequence, iter_blocks, parse_filter

# Function returning the per-column options for a column name
CtDataGetter = Callable[[str], Optional[Dict[str, Any]]]


def evaluate(sequence: List[Element], node: Any, get_ct_data: CtDataGetter) -> bool:
    """Fold ``sequence`` left to right against ``node``.

    There is no precedence between AND and OR. The fold stops at the first
    OR reached while the result is true, or the first AND reached while it
    is false; the result so far is returned as is.
    """
    match = True
    for element in sequence:
        if match and element.connective is Connective.OR:
            break
        if not match and element.connective is Connective.AND:
            break

        if element.is_block:
            block = element.block
            try:
                ct_data = get_ct_data(block.column_name)
            except Exception as e:
                raise LeafEvaluationError(block.column_name, f"Failed to get column options: {e}") from e
            match = block.is_match(node, ct_data)
        else:
            match = evaluate(element.group, node, get_ct_data)

        if element.negate:
            match = not match
    return match


def need_recompile(sequence: Optional[List[Element]], option: str) -> bool:
    """Whether ``option`` changes the type of a column used in ``sequence``.

    That is any option named ``columns/<column>/type``, whatever its prefix.
    Column names may contain slashes.
    """
    if not sequence or not option.endswith("/type"):
        return False
    for block in iter_blocks(sequence):
        key = f"columns/{block.column_name}/type"
        if option == key or option.endswith("/" + key):
            return True
    return False


class _Compiled:
    """Holds the AST so it can be released once the Filter is gone."""

    def __init__(self):
        self.root: Optional[List[Element]] = None

    def discard(self) -> None:
        root, self.root = self.root, None
        free_sequence(root)


def _release(config: ConfigStore, handler_ids: List[int], compiled: _Compiled) -> None:
    for handler_id in handler_ids:
        config.disconnect(handler_id)
    handler_ids.clear()
    compiled.discard()


class Filter:
    """A filter string, compiled on first use and matched against nodes.

    The compiled form is dropped whenever the configured type of one of the
    columns it uses changes, and rebuilt on the next match.

    Args:
        filter_string: The filter, e.g. ``size:>1M and name:"$.txt"``
        config: Configuration store to watch for column type changes
        column_types: Registry used to resolve column names (ColumnTypeRegistry)
    """

    def __init__(self, filter_string: str, config: ConfigStore, column_types: Any):
        self._filter = filter_string
        self._config = config
        self._column_types = column_types
        self._compiled = _Compiled()
        self._handler_ids: List[int] = []
        self._closed = False

        ref = weakref.ref(self)

        def on_option(option: str) -> None:
            f = ref()
            if f is not None:
                f._option_changed(option)

        for signal in (SIGNAL_OPTION_SET, SIGNAL_OPTION_DELETED):
            self._handler_ids.append(config.connect(signal, on_option))
        self._finalizer = weakref.finalize(
            self, _release, config, self._handler_ids, self._compiled
        )

    @property
    def filter(self) -> str:
        return self._filter

    @property
    def is_compiled(self) -> bool:
        return self._compiled.root is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        """Stop watching the configuration and release the compiled filter.

        A closed filter can no longer be matched.
        """
        self._closed = True
        self._finalizer()

    def _option_changed(self, option: str) -> None:
        if need_recompile(self._compiled.root, option):
            logger.debug(f"Option '{option}' changed, invalidating filter {self._filter!r}")
            self._compiled.discard()

    def ensure_compiled(self) -> List[Element]:
        """Parse the filter string unless already done.

        Raises:
            InvalidSyntaxError: If the filter string is invalid
            UnknownColumnTypeError: If a column has no column type
            FilterError: If the filter was closed
        """
        if self._closed:
            raise FilterError("Filter is closed", self._filter)
        if self._compiled.root is None:
            try:
                self._compiled.root = parse_filter(self._filter, self._column_types.resolve)
            except FilterError as e:
                e.filter_string = self._filter
                raise
        return self._compiled.root

    def compile(self) -> None:
        """Parse the filter and compile every block right away.

        If any block fails to compile, the whole compiled filter is dropped.

        Raises:
            LeafEvaluationError: If a block's filter text is invalid
        """
        root = self.ensure_compiled()
        try:
            for block in iter_blocks(root):
                block.compile()
        except LeafEvaluationError as e:
            self._compiled.discard()
            raise LeafEvaluationError(
                e.column_name, f"Failed to compile filter: {e.reason}", self._filter
            ) from e

    def is_match(self, node: Any, get_ct_data: Optional[CtDataGetter] = None) -> bool:
        """Return whether ``node`` matches the filter.

        Args:
            node: The node to test
            get_ct_data: Returns the per-column options for a column name;
                defaults to the options from the configuration

        Raises:
            FilterError: If the filter cannot be parsed, or a block fails
        """
        root = self.ensure_compiled()
        try:
            return evaluate(root, node, get_ct_data or self._column_types.get_ct_data)
        except FilterError as e:
            e.filter_string = self._filter
            raise

    def __repr__(self):
        return f"Filter({self._filter!r})"

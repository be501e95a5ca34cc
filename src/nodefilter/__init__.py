"""nodefilter - boolean filters over file manager nodes.

Filters such as ``size:>1M and (name:"$.jpg" or name:"$.png")`` are parsed
once, cached, and matched against many nodes.
"""

__version__ = "0.1.0"
__author__ = "nodefilter contributors"

from .config import ConfigStore, load_config
from .columntype import ColumnType, ColumnTypeRegistry
from .filter import Filter, FilterRegistry
from .node import FileNode, Node, NodeType

__all__ = [
    "ConfigStore",
    "load_config",
    "ColumnType",
    "ColumnTypeRegistry",
    "Filter",
    "FilterRegistry",
    "FileNode",
    "Node",
    "NodeType",
]

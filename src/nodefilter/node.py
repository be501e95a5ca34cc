"""Nodes: the items filters are matched against."""

import os
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union


class NodeType(Enum):
    ITEM = "item"
    CONTAINER = "container"


class Node:
    """An item or container exposing named properties.

    ``name`` and ``node_type`` are always set; any other property may be
    missing, in which case ``get`` returns ``None``.
    """

    def __init__(self, name: str, node_type: NodeType = NodeType.ITEM, **properties: Any):
        self._properties = dict(properties)
        self._properties["name"] = name
        self.node_type = node_type

    @property
    def name(self) -> str:
        return self._properties["name"]

    def is_container(self) -> bool:
        return self.node_type is NodeType.CONTAINER

    def get(self, prop: str) -> Optional[Any]:
        """Return the value of ``prop``, or None if it isn't set."""
        return self._properties.get(prop)

    def set(self, prop: str, value: Any) -> None:
        self._properties[prop] = value

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, {self.node_type.value})"


class FileNode(Node):
    """A node for a file or directory on disk."""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileNode":
        """Build a node from ``path``, reading its metadata with ``os.stat``.

        Raises:
            OSError: If the path cannot be stat'ed
        """
        path = Path(path)
        st = os.stat(path)
        is_dir = path.is_dir()
        ext = "" if is_dir else os.path.splitext(path.name)[1].lstrip(".")
        return cls(
            path.name or str(path),
            NodeType.CONTAINER if is_dir else NodeType.ITEM,
            location=str(path.resolve()),
            size=None if is_dir else st.st_size,
            mtime=datetime.fromtimestamp(st.st_mtime),
            ext=ext,
        )

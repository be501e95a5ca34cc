"""Shared fixtures: a configuration, column types and test-only column types."""

import sys
from pathlib import Path

import pytest

# make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from nodefilter.columntype import ColumnType, ColumnTypeRegistry
from nodefilter.config import ConfigStore
from nodefilter.node import Node, NodeType


class FlagColumnType(ColumnType):
    """Matches when the node property named by the filter text is truthy."""

    name = "flag"

    def __init__(self):
        self.compiled = []
        self.tested = []
        self.freed = []

    def compile(self, filter_text):
        self.compiled.append(filter_text)
        return filter_text

    def is_match(self, data, node, ct_data=None):
        self.tested.append(data)
        return bool(node.get(data))

    def free(self, data):
        self.freed.append(data)


class BoomColumnType(ColumnType):
    """Fails whenever a node is tested."""

    name = "boom"

    def compile(self, filter_text):
        return filter_text

    def is_match(self, data, node, ct_data=None):
        raise RuntimeError(f"boom: {data}")


@pytest.fixture
def config():
    return ConfigStore({
        "defaults/lists/columns/size/type": "size",
        "defaults/lists/columns/ext/type": "text",
        "defaults/lists/columns/ext/property": "ext",
    })


@pytest.fixture
def flag_type():
    return FlagColumnType()


@pytest.fixture
def column_types(config, flag_type):
    registry = ColumnTypeRegistry(config)
    registry.register("flag", flag_type)
    registry.register("boom", BoomColumnType())
    return registry


def make_node(name="file.txt", container=False, **props):
    return Node(name, NodeType.CONTAINER if container else NodeType.ITEM, **props)

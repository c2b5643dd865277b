# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Structural encoding of PathTree nodes.

Two encodings are provided.

Nested (dump_node/load_node, PathTree.as_dict): a node is a dict with two
optional keys:

- 'value': the stored value, present only if the node holds one
- 'children': dict of child name -> encoded child, present only if the
  node has children

Flat (dump_records/load_records, used by to_json): a list of records in
crawl order. The first record is the root; every other record carries the
index of its parent record and its own name:

    [{}, {'parent': 0, 'name': 'a'}, {'parent': 1, 'name': 'b', 'value': 1}]

The flat form keeps the nesting of the JSON document constant, so trees of
any depth can be serialized.

Example:
    >>> tree = PathTree()
    >>> tree.add('a/b', 1)
    >>> tree.create_directory('c')
    >>> dump_node(tree.root)
    {'children': {'a': {'children': {'b': {'value': 1}}}, 'c': {}}}

Empty directories are encoded too ({} in the nested form) so that the shape
of the tree is preserved exactly.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ..node import PathTreeNode
from ..paths import DEFAULT_SEPARATOR, validate_segment

if TYPE_CHECKING:
    from .core import PathTree

_NODE_KEYS = frozenset(('value', 'children'))
_RECORD_KEYS = frozenset(('parent', 'name', 'value'))


def dump_node(node: PathTreeNode) -> dict[str, Any]:
    """Encode node and its descendants. Children are emitted sorted by name."""
    result: dict[str, Any] = {}
    pending = [(node, result)]
    while pending:
        current, encoded = pending.pop()
        if current.has_value:
            encoded['value'] = current.peek_value()
        if current.children:
            children = encoded['children'] = {}
            for name, child in current:
                child_encoded = children[name] = {}
                pending.append((child, child_encoded))
    return result


def load_node(data: dict[str, Any], separator: str = DEFAULT_SEPARATOR) -> PathTreeNode:
    """Decode a node previously encoded with dump_node().

    Args:
        data: The encoded node.
        separator: Separator of the tree the node is loaded into; child
            names containing it are rejected.

    Raises:
        TypeError: If data or one of its 'children' entries is not a dict.
        ValueError: If a node has keys other than 'value' and 'children'.
        InvalidPathError: If a child name is empty or contains separator.
    """
    root = PathTreeNode()
    pending = [(data, root)]
    while pending:
        encoded, node = pending.pop()
        if not isinstance(encoded, dict):
            raise TypeError(f"encoded node must be dict, not {type(encoded).__name__}")
        unknown = set(encoded) - _NODE_KEYS
        if unknown:
            raise ValueError(f"Unknown keys in encoded node: {sorted(unknown)}")

        if 'value' in encoded:
            node.set_value(encoded['value'])

        children = encoded.get('children', {})
        if not isinstance(children, dict):
            raise TypeError(f"'children' must be dict, not {type(children).__name__}")
        for name, child_data in children.items():
            validate_segment(name, separator)
            child = PathTreeNode()
            node.attach_child(name, child)
            pending.append((child_data, child))
    return root


def dump_records(node: PathTreeNode) -> list[dict[str, Any]]:
    """Encode node and its descendants as a flat list of records."""
    records: list[dict[str, Any]] = []
    pending: list[tuple[PathTreeNode, int | None, str | None]] = [(node, None, None)]
    while pending:
        current, parent, name = pending.pop()
        index = len(records)
        record: dict[str, Any] = {} if parent is None else {'parent': parent, 'name': name}
        if current.has_value:
            record['value'] = current.peek_value()
        records.append(record)
        for child_name in reversed(current.child_names()):
            pending.append((current.children[child_name], index, child_name))
    return records


def load_records(
    records: list[dict[str, Any]], separator: str = DEFAULT_SEPARATOR
) -> PathTreeNode:
    """Decode a record list produced by dump_records().

    Raises:
        TypeError: If records is not a non-empty list of dicts.
        ValueError: On unknown keys, a bad parent index (it must point to
            an earlier record), or a name used twice under one parent.
        InvalidPathError: If a name is empty or contains separator.
    """
    if not isinstance(records, list) or not records:
        raise TypeError("records must be a non-empty list")

    nodes: list[PathTreeNode] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise TypeError(f"record must be dict, not {type(record).__name__}")
        unknown = set(record) - _RECORD_KEYS
        if unknown:
            raise ValueError(f"Unknown keys in record {index}: {sorted(unknown)}")

        node = PathTreeNode()
        if 'value' in record:
            node.set_value(record['value'])

        if index == 0:
            if 'parent' in record or 'name' in record:
                raise ValueError("The first record is the root and has no parent")
        else:
            parent = record.get('parent')
            if isinstance(parent, bool) or not isinstance(parent, int) \
                    or not 0 <= parent < index:
                raise ValueError(f"Invalid parent index in record {index}: {parent!r}")
            name = validate_segment(record.get('name'), separator)
            if name in nodes[parent].children:
                raise ValueError(f"Duplicate name '{name}' in record {index}")
            nodes[parent].attach_child(name, node)
        nodes.append(node)
    return nodes[0]


def check_node_names(node: PathTreeNode, separator: str = DEFAULT_SEPARATOR) -> None:
    """Validate every child name in the subtree of node.

    Raises:
        InvalidPathError: On the first invalid name.
    """
    pending = [node]
    while pending:
        current = pending.pop()
        for name, child in current.children.items():
            validate_segment(name, separator)
            pending.append(child)


def load_from_pathtree(tree: PathTree, separator: str = DEFAULT_SEPARATOR) -> PathTreeNode:
    """Return a structural copy of tree's root, valid for separator."""
    root = tree.root.copy()
    if tree.separator != separator:
        check_node_names(root, separator)
    return root


def to_json(tree: PathTree, **kwargs: Any) -> str:
    """Serialize tree to JSON. Stored values must be JSON-serializable.

    The document is {"nodes": [...]} holding the flat records of
    dump_records().

    Args:
        tree: The tree to serialize.
        **kwargs: Passed to json.dumps (e.g., indent=2).
    """
    return json.dumps({'nodes': dump_records(tree.root)}, **kwargs)


def from_json(
    text: str,
    name: str = 'root',
    separator: str = DEFAULT_SEPARATOR,
) -> PathTree:
    """Build a PathTree from a JSON document.

    Accepts the flat document written by to_json(), or a nested encoding
    as returned by PathTree.as_dict().
    """
    from .core import PathTree

    data = json.loads(text)
    if isinstance(data, dict) and 'nodes' in data:
        return PathTree.from_records(data['nodes'], name=name, separator=separator)
    return PathTree.from_dict(data, name=name, separator=separator)

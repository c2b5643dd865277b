# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree - A hierarchical key-value store addressed by paths.

This module provides the PathTree class, the core container of the
genro-pathtree library. A PathTree behaves like a virtual filesystem over
arbitrary Python objects: values live under slash-delimited paths, and
directories are created on demand.

Key Features:
    - **Directory auto-creation**: add('a/b/c', v) creates 'a' and 'a/b'
    - **Hybrid nodes**: a path can hold a value and children at once
    - **Pruning**: removing the last value of a branch drops the empty branch
    - **Subtree moves**: merge() relocates a subtree, merging into an
      existing destination and rejecting moves into itself
    - **Deterministic traversal**: crawl() is pre-order with siblings in
      lexicographic order

Path Syntax:
    - Segments separated by '/': 'config/database/host'
    - Leading/trailing separators are ignored: '/config/' == 'config'
    - Root: '' or '/'
    - Empty segments ('a//b') are rejected with InvalidPathError

Example:
    Basic usage::

        tree = PathTree()
        tree.add('config/database/host', 'localhost')
        tree.add('config/database/port', 5432)

        print(tree.obtain('config/database/host'))  # 'localhost'
        print(tree.list_directory('config/database'))  # ['host', 'port']

        for path, value in tree.crawl('config'):
            print(path, value)

    Moving subtrees::

        tree.merge('config/database', 'services/db')
        print(tree.exists('config'))  # False, pruned
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from ..exceptions import (
    AlreadyExistsError,
    InvalidPathError,
    PathNotFoundError,
    SelfContainmentError,
)
from ..node import PathTreeNode
from ..paths import (
    DEFAULT_SEPARATOR,
    is_descendant,
    join_path,
    normalize,
    validate_separator,
)
from .loading import (
    check_node_names,
    dump_node,
    dump_records,
    load_from_pathtree,
    load_node,
    load_records,
)

logger = logging.getLogger(__name__)


class PathTree:
    """A hierarchical key-value container addressed by paths.

    PathTree provides:
    - add(path, value) / tree[path] = value: Store values with autocreate
    - obtain(path) / tree[path]: Read values
    - remove(path) / remove_tree(path): Delete values or whole subtrees
    - merge(source, destination): Move a subtree
    - crawl(path) / list_directory(path): Traverse

    Each node owns its children in a dict, so every path segment is an O(1)
    lookup. Nodes keep no reference to their parent.

    The tree is not thread-safe: callers sharing an instance across threads
    must serialize access themselves.

    Example:
        >>> tree = PathTree()
        >>> tree.add('a/b/c', 1)
        >>> tree.add('a/b/d', 2)
        >>> list(tree.crawl('a'))
        [('a/b/c', 1), ('a/b/d', 2)]
    """

    __slots__ = ('_root', '_name', '_separator')

    def __init__(
        self,
        source: dict | PathTree | None = None,
        name: str = 'root',
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        """Initialize a PathTree.

        Args:
            source: Optional initial data. Can be:
                - dict: Structural encoding as produced by as_dict()
                - PathTree: Copy the structure of another tree
            name: Label of the tree.
            separator: Single character separating path segments.

        Example:
            >>> PathTree({'children': {'a': {'value': 1}}})
            >>> PathTree(other_tree)  # copy
            >>> PathTree(name='settings', separator='.')
        """
        self._separator = validate_separator(separator)
        self._name = name
        self._root = PathTreeNode()

        if source is not None:
            self._load_source(source)

    def _load_source(self, source: dict | PathTree) -> None:
        """Replace the root with a copy of source.

        Raises:
            TypeError: If source is not dict or PathTree.
        """
        if isinstance(source, dict):
            self._root = load_node(source, self._separator)
        elif isinstance(source, PathTree):
            self._root = load_from_pathtree(source, self._separator)
        else:
            raise TypeError(
                f"source must be dict or PathTree, not {type(source).__name__}"
            )

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        name: str = 'root',
        separator: str = DEFAULT_SEPARATOR,
    ) -> PathTree:
        """Build a tree from the structural encoding returned by as_dict()."""
        return cls(data, name=name, separator=separator)

    @classmethod
    def from_records(
        cls,
        records: list[dict[str, Any]],
        name: str = 'root',
        separator: str = DEFAULT_SEPARATOR,
    ) -> PathTree:
        """Build a tree from the flat records returned by as_records()."""
        tree = cls(name=name, separator=separator)
        tree._root = load_records(records, separator)
        return tree

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing top-level names."""
        return f"PathTree({self._name!r}, {self._root.child_names()})"

    def __len__(self) -> int:
        """Return the number of stored values (walks the whole tree)."""
        return sum(1 for _ in self.crawl())

    def __iter__(self) -> Iterator[str]:
        """Iterate over the paths of all stored values, in crawl order."""
        for path, _ in self.crawl():
            yield path

    def __contains__(self, path: str) -> bool:
        """Check if path resolves to a node.

        Malformed paths and non-str keys are never contained.
        """
        try:
            return self.exists(path)
        except (InvalidPathError, TypeError):
            return False

    def __getitem__(self, path: str) -> Any:
        """Get the value at path (see obtain)."""
        return self.obtain(path)

    def __setitem__(self, path: str, value: Any) -> None:
        """Set the value at path, creating directories (see add)."""
        self.add(path, value)

    def __delitem__(self, path: str) -> None:
        """Remove the value at path (see remove)."""
        self.remove(path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathTree):
            return NotImplemented
        return self._root == other._root

    __hash__ = None  # type: ignore[assignment]

    @property
    def name(self) -> str:
        """Label of the tree."""
        return self._name

    @property
    def separator(self) -> str:
        """Path segment separator."""
        return self._separator

    @property
    def root(self) -> PathTreeNode:
        """The root node (path '')."""
        return self._root

    # ==================== Path Utilities ====================

    def _split(self, path: str) -> tuple[str, ...]:
        return normalize(path, self._separator)

    def _join(self, segments: tuple[str, ...] | list[str]) -> str:
        return join_path(segments, self._separator)

    def _walk(self, segments: tuple[str, ...]) -> PathTreeNode | None:
        """Follow segments from the root, returning None if one is missing."""
        node = self._root
        for segment in segments:
            node = node.child(segment)
            if node is None:
                return None
        return node

    def _chain(self, segments: tuple[str, ...]) -> list[PathTreeNode] | None:
        """Return the nodes from the root to the end of segments, or None.

        The result has len(segments) + 1 items, chain[0] being the root.
        """
        chain = [self._root]
        for segment in segments:
            node = chain[-1].child(segment)
            if node is None:
                return None
            chain.append(node)
        return chain

    def _walk_create(self, segments: tuple[str, ...]) -> PathTreeNode:
        """Follow segments from the root, creating missing nodes."""
        node = self._root
        for segment in segments:
            node = node.child_or_create(segment)
        return node

    def _require_chain(self, path: str, segments: tuple[str, ...]) -> list[PathTreeNode]:
        chain = self._chain(segments)
        if chain is None:
            raise PathNotFoundError(f"Path '{path}' not found", path)
        return chain

    def _prune(self, chain: list[PathTreeNode], segments: tuple[str, ...]) -> None:
        """Detach empty nodes from the end of chain upwards.

        Stops at the root or at the first node that still holds a value or
        a child.
        """
        for depth in range(len(segments), 0, -1):
            if not chain[depth].is_empty:
                break
            chain[depth - 1].detach_child(segments[depth - 1])
            logger.debug("Pruned empty node '%s'", self._join(segments[:depth]))

    def _detach(
        self, chain: list[PathTreeNode], segments: tuple[str, ...]
    ) -> PathTreeNode:
        """Detach the subtree at the end of chain and prune its ancestors.

        The root cannot be detached: its content is moved to a new node
        and the root is left empty.
        """
        if not segments:
            subtree = PathTreeNode()
            subtree.children = self._root.children
            if self._root.has_value:
                subtree.set_value(self._root.take_value())
            self._root.children = {}
            return subtree

        subtree = chain[-2].detach_child(segments[-1])
        self._prune(chain[:-1], segments[:-1])
        return subtree

    def _iter_nodes(self) -> Iterator[PathTreeNode]:
        """Yield every node of the tree, root included, in no particular order."""
        pending = [self._root]
        while pending:
            node = pending.pop()
            yield node
            pending.extend(node.children.values())

    def _check_unowned(self, path: str, subtree: PathTreeNode) -> None:
        """Refuse a subtree sharing nodes with this tree or with itself.

        Either case would give a node two owners, or close a cycle.
        """
        owned = {id(node) for node in self._iter_nodes()}
        seen: set[int] = set()
        pending = [subtree]
        while pending:
            node = pending.pop()
            if id(node) in owned:
                raise SelfContainmentError(
                    f"Cannot insert at '{path}': node already belongs to this tree",
                    path,
                )
            if id(node) in seen:
                raise SelfContainmentError(
                    f"Cannot insert at '{path}': subtree holds the same node twice",
                    path,
                )
            seen.add(id(node))
            pending.extend(node.children.values())

    def _graft(self, segments: tuple[str, ...], subtree: PathTreeNode) -> None:
        """Place subtree at segments, merging into an existing node."""
        if not segments:
            self._merge_nodes(self._root, subtree)
            return

        parent = self._walk_create(segments[:-1])
        existing = parent.child(segments[-1])
        if existing is None:
            parent.attach_child(segments[-1], subtree)
        else:
            self._merge_nodes(existing, subtree)

    def _merge_nodes(self, destination: PathTreeNode, source: PathTreeNode) -> None:
        """Move the content of source into destination.

        Source values overwrite destination values; children present on
        both sides are merged recursively.
        """
        pending = [(destination, source)]
        while pending:
            dest, src = pending.pop()
            if src.has_value:
                dest.set_value(src.take_value())
            for name, child in src.children.items():
                existing = dest.child(name)
                if existing is None:
                    dest.attach_child(name, child)
                else:
                    pending.append((existing, child))
            src.children = {}

    # ==================== Core API ====================

    def create_directory(self, path: str) -> None:
        """Create the directory at path and any missing parent (mkdir -p).

        Args:
            path: Path of the directory.

        Raises:
            InvalidPathError: If path is malformed.

        Example:
            >>> tree.create_directory('p/q')
            >>> tree.exists('p/q')
            True
        """
        self._walk_create(self._split(path))

    def add(self, path: str, value: Any) -> Any:
        """Store value at path, creating directories as needed.

        An existing value is overwritten.

        Args:
            path: Path of the value (e.g., 'config/database/host').
            value: The value to store. None is a valid value.

        Returns:
            The previous value at path, or None if there was none.

        Raises:
            InvalidPathError: If path is malformed.

        Example:
            >>> tree.add('x', 10)
            >>> tree.add('x', 20)
            10
        """
        return self._walk_create(self._split(path)).set_value(value)

    def insert(self, path: str, value: Any) -> None:
        """Store value at path, refusing to overwrite an existing value.

        Raises:
            InvalidPathError: If path is malformed.
            AlreadyExistsError: If a value is already stored at path.
        """
        segments = self._split(path)
        node = self._walk(segments)
        if node is not None and node.has_value:
            raise AlreadyExistsError(f"Path '{path}' already holds a value", path)
        self._walk_create(segments).set_value(value)

    def insert_subtree(self, path: str, subtree: PathTreeNode) -> None:
        """Attach subtree at path. The tree takes ownership of subtree.

        Missing parent directories are created. The whole tree is scanned
        to make sure subtree is not already part of it.

        Raises:
            TypeError: If subtree is not a PathTreeNode.
            InvalidPathError: If path or a name inside subtree is malformed.
            AlreadyExistsError: If a node already exists at path.
            SelfContainmentError: If subtree, or a node below it, already
                belongs to this tree, or appears twice inside subtree.
        """
        if not isinstance(subtree, PathTreeNode):
            raise TypeError(
                f"subtree must be PathTreeNode, not {type(subtree).__name__}"
            )
        segments = self._split(path)
        if self._walk(segments) is not None:
            raise AlreadyExistsError(f"Path '{path}' already exists", path)
        self._check_unowned(path, subtree)
        check_node_names(subtree, self._separator)
        self._walk_create(segments[:-1]).attach_child(segments[-1], subtree)

    def obtain(self, path: str) -> Any:
        """Get the value stored at path.

        Args:
            path: Path of the value.

        Returns:
            The stored value.

        Raises:
            InvalidPathError: If path is malformed.
            PathNotFoundError: If path does not resolve, or resolves to a
                directory without value.
        """
        node = self._walk(self._split(path))
        if node is None:
            raise PathNotFoundError(f"Path '{path}' not found", path)
        if not node.has_value:
            raise PathNotFoundError(f"Path '{path}' holds no value", path)
        return node.peek_value()

    def get(self, path: str, default: Any = None) -> Any:
        """Get the value at path, or default if there is none."""
        try:
            return self.obtain(path)
        except PathNotFoundError:
            return default

    def get_node(self, path: str) -> PathTreeNode:
        """Get the node at path.

        Raises:
            InvalidPathError: If path is malformed.
            PathNotFoundError: If path does not resolve.
        """
        node = self._walk(self._split(path))
        if node is None:
            raise PathNotFoundError(f"Path '{path}' not found", path)
        return node

    def exists(self, path: str) -> bool:
        """True if path resolves to a node, with or without value."""
        return self._walk(self._split(path)) is not None

    def remove(self, path: str) -> Any:
        """Remove the value at path.

        If the node is left empty it is detached, and so are its ancestors
        while they keep becoming empty. A node that still has children is
        kept as a directory.

        Args:
            path: Path of the value.

        Returns:
            The removed value, or None if the node held no value.

        Raises:
            InvalidPathError: If path is malformed.
            PathNotFoundError: If path does not resolve.
        """
        segments = self._split(path)
        chain = self._require_chain(path, segments)
        value = chain[-1].take_value()
        self._prune(chain, segments)
        return value

    def pop(self, path: str, default: Any = None) -> Any:
        """Remove and return the value at path, or default if path is missing."""
        try:
            return self.remove(path)
        except PathNotFoundError:
            return default

    def remove_tree(self, path: str) -> PathTreeNode:
        """Detach and return the whole subtree at path.

        Ancestors left empty are pruned. Removing the root path returns
        the entire content and leaves the tree empty.

        Raises:
            InvalidPathError: If path is malformed.
            PathNotFoundError: If path does not resolve.
        """
        segments = self._split(path)
        chain = self._require_chain(path, segments)
        subtree = self._detach(chain, segments)
        logger.debug("Removed subtree '%s'", self._join(segments))
        return subtree

    def merge(self, source_path: str, destination_path: str) -> None:
        """Move the subtree at source_path to destination_path.

        Missing directories along destination_path are created. If a node
        already exists at the destination the two subtrees are merged:
        values coming from the source win, children only present in the
        destination are kept.

        Args:
            source_path: Path of the subtree to move.
            destination_path: Where to place it.

        Raises:
            InvalidPathError: If either path is malformed.
            PathNotFoundError: If source_path does not resolve.
            SelfContainmentError: If destination_path is source_path or
                lies below it.

        Example:
            >>> tree.add('m/n', 5)
            >>> tree.merge('m/n', 'y/n')
            >>> tree.obtain('y/n')
            5
            >>> tree.exists('m')
            False
        """
        source = self._split(source_path)
        destination = self._split(destination_path)
        chain = self._require_chain(source_path, source)
        if is_descendant(destination, source):
            raise SelfContainmentError(
                f"Cannot merge '{source_path}' into '{destination_path}': "
                "destination is inside source",
                source_path,
            )

        subtree = self._detach(chain, source)
        self._graft(destination, subtree)
        logger.debug(
            "Merged '%s' into '%s'", self._join(source), self._join(destination)
        )

    def merge_tree(self, other: PathTree, destination_path: str = '') -> None:
        """Merge a copy of another tree's content at destination_path.

        The same conflict rules as merge() apply. other is left untouched.

        Raises:
            InvalidPathError: If destination_path is malformed, or a name
                in other contains this tree's separator.
        """
        destination = self._split(destination_path)
        subtree = load_from_pathtree(other, self._separator)
        self._graft(destination, subtree)
        logger.debug("Merged tree '%s' into '%s'", other.name, self._join(destination))

    def crawl(self, path: str = '') -> Iterator[tuple[str, Any]]:
        """Iterate over the values stored under path.

        Depth-first pre-order traversal; siblings are visited in
        lexicographic order. Directory nodes without value are traversed but
        not yielded. Each call returns a new iterator.

        Args:
            path: Path of the subtree to crawl (default: root).

        Returns:
            Iterator of (full_path, value) tuples.

        Raises:
            InvalidPathError: If path is malformed.
            PathNotFoundError: If path does not resolve. Raised by the call
                itself, not on first iteration.
        """
        segments = self._split(path)
        node = self._walk(segments)
        if node is None:
            raise PathNotFoundError(f"Path '{path}' not found", path)
        return self._crawl(node, segments)

    def _crawl(
        self, start: PathTreeNode, segments: tuple[str, ...]
    ) -> Iterator[tuple[str, Any]]:
        stack = [(segments, start)]
        while stack:
            segments, node = stack.pop()
            if node.has_value:
                yield self._join(segments), node.peek_value()
            for name in reversed(node.child_names()):
                stack.append((segments + (name,), node.children[name]))

    def list_directory(self, path: str = '') -> list[str]:
        """Return the names of the direct children of path, sorted.

        Raises:
            InvalidPathError: If path is malformed.
            PathNotFoundError: If path does not resolve.
        """
        return self.get_node(path).child_names()

    # ==================== Iteration ====================

    def paths(self) -> list[str]:
        """Return the paths of all stored values in crawl order."""
        return list(self)

    def values(self) -> list[Any]:
        """Return all stored values in crawl order."""
        return [value for _, value in self.crawl()]

    def items(self) -> list[tuple[str, Any]]:
        """Return (path, value) pairs in crawl order."""
        return list(self.crawl())

    # ==================== Conversion ====================

    def as_dict(self) -> dict[str, Any]:
        """Return the structural encoding of the tree.

        Every node becomes a dict with an optional 'value' key and an
        optional 'children' key. See genro_pathtree.tree.loading.
        """
        return dump_node(self._root)

    def as_records(self) -> list[dict[str, Any]]:
        """Return the flat record encoding of the tree (see to_json)."""
        return dump_records(self._root)

    def copy(self) -> PathTree:
        """Return an independent copy (stored values are shared)."""
        return PathTree(self, name=self._name, separator=self._separator)

    def clear(self) -> None:
        """Remove every value and directory. The root is kept."""
        self._root = PathTreeNode()
        logger.debug("Cleared tree '%s'", self._name)

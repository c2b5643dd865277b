# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree node class."""

from __future__ import annotations

from typing import Any, Iterator


class _Missing:
    """Marker for a node that holds no value (None is a valid value)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return '<missing>'


MISSING: Any = _Missing()


class PathTreeNode:
    """A vertex of a PathTree.

    Each node has:
    - value: The data stored exactly at this point, if any
    - children: Dict of owned child nodes, keyed by segment name

    A node can hold a value and children at the same time. Nodes keep no
    reference to their parent: navigation always starts from the tree root.

    Example:
        >>> node = PathTreeNode('Alice')
        >>> node.child_or_create('address').set_value('Main St.')
        >>> node.child_names()
        ['address']
        >>> node.peek_value()
        'Alice'
    """

    __slots__ = ('_value', 'children')

    def __init__(self, value: Any = MISSING) -> None:
        """Initialize a PathTreeNode.

        Args:
            value: Optional value stored at the node. Omit it to create
                a pure directory node.
        """
        self._value = value
        self.children: dict[str, PathTreeNode] = {}

    def __repr__(self) -> str:
        value_repr = f"value={self._value!r}, " if self.has_value else ''
        return f"PathTreeNode({value_repr}children={self.child_names()})"

    def __len__(self) -> int:
        """Return the number of direct children."""
        return len(self.children)

    def __iter__(self) -> Iterator[tuple[str, PathTreeNode]]:
        """Iterate over (name, child) pairs in lexicographic order."""
        for name in self.child_names():
            yield name, self.children[name]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathTreeNode):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            mine, theirs = pending.pop()
            if mine.has_value != theirs.has_value:
                return False
            if mine.has_value and mine._value != theirs._value:
                return False
            if mine.children.keys() != theirs.children.keys():
                return False
            for name, child in mine.children.items():
                pending.append((child, theirs.children[name]))
        return True

    __hash__ = None  # type: ignore[assignment]

    # ==================== State ====================

    @property
    def has_value(self) -> bool:
        """True if a value is stored at this node."""
        return self._value is not MISSING

    @property
    def is_empty(self) -> bool:
        """True if the node holds neither a value nor children."""
        return not self.has_value and not self.children

    @property
    def is_directory(self) -> bool:
        """True if the node has at least one child."""
        return bool(self.children)

    @property
    def is_leaf(self) -> bool:
        """True if the node holds a value and has no children."""
        return self.has_value and not self.children

    # ==================== Value ====================

    def set_value(self, value: Any) -> Any:
        """Store value, returning the previous one (or None)."""
        previous = self._value
        self._value = value
        return None if previous is MISSING else previous

    def take_value(self) -> Any:
        """Clear the value and return it (or None if there was none)."""
        previous = self._value
        self._value = MISSING
        return None if previous is MISSING else previous

    def peek_value(self, default: Any = None) -> Any:
        """Return the stored value without removing it."""
        return default if self._value is MISSING else self._value

    # ==================== Children ====================

    def child(self, name: str) -> PathTreeNode | None:
        """Return the child called name, or None."""
        return self.children.get(name)

    def child_or_create(self, name: str) -> PathTreeNode:
        """Return the child called name, creating an empty one if missing."""
        node = self.children.get(name)
        if node is None:
            node = self.children[name] = PathTreeNode()
        return node

    def attach_child(self, name: str, node: PathTreeNode) -> None:
        """Give ownership of node to this node under name."""
        self.children[name] = node

    def detach_child(self, name: str) -> PathTreeNode | None:
        """Remove the child called name and return it (or None)."""
        return self.children.pop(name, None)

    def child_names(self) -> list[str]:
        """Return child names in lexicographic order."""
        return sorted(self.children)

    def copy(self) -> PathTreeNode:
        """Return a structural copy of this subtree.

        Nodes are duplicated, stored values are shared.
        """
        clone = PathTreeNode(self._value)
        pending = [(self, clone)]
        while pending:
            source, target = pending.pop()
            for name, child in source.children.items():
                twin = target.children[name] = PathTreeNode(child._value)
                pending.append((child, twin))
        return clone

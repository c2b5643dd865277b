# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-PathTree - Hierarchical key-value store addressed by paths.

A lightweight, zero-dependency library that stores arbitrary values under
slash-delimited paths, like a virtual filesystem, for the Genro ecosystem
(Genro Kyō).
"""

import logging

__version__ = "0.1.0"

from .exceptions import (
    AlreadyExistsError,
    InvalidPathError,
    PathNotFoundError,
    PathTreeError,
    SelfContainmentError,
)
from .node import PathTreeNode
from .paths import join_path, normalize
from .tree import (
    PathTree,
    dump_node,
    dump_records,
    from_json,
    load_node,
    load_records,
    to_json,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "PathTree",
    "PathTreeNode",
    # Paths
    "normalize",
    "join_path",
    # Serialization
    "dump_node",
    "load_node",
    "dump_records",
    "load_records",
    "to_json",
    "from_json",
    # Exceptions
    "PathTreeError",
    "InvalidPathError",
    "PathNotFoundError",
    "SelfContainmentError",
    "AlreadyExistsError",
]

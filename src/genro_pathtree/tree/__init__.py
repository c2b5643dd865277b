# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree package - Hierarchical key-value store addressed by paths.

The package is organized into:
- core: Main PathTree class with path traversal, mutation and crawling
- loading: Structural encoding to/from nested dicts and JSON

Example:
    >>> from genro_pathtree import PathTree
    >>> tree = PathTree()
    >>> tree.add('config/name', 'MyApp')
    >>> tree['config/name']
    'MyApp'
"""

from .core import PathTree
from .loading import (
    dump_node,
    dump_records,
    from_json,
    load_node,
    load_records,
    to_json,
)

__all__ = [
    "PathTree",
    "dump_node",
    "load_node",
    "dump_records",
    "load_records",
    "to_json",
    "from_json",
]

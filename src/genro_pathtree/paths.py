# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path parsing utilities.

Every PathTree operation goes through normalize() before touching the tree,
so equivalent spellings of a path ('/a/b/', 'a/b') always address the same
node.

Example:
    >>> normalize('/config/db/')
    ('config', 'db')
    >>> normalize('/')
    ()
    >>> join_path(('config', 'db'))
    'config/db'
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from .exceptions import InvalidPathError

DEFAULT_SEPARATOR = '/'


def validate_separator(separator: str) -> str:
    """Check that separator is a single character.

    Raises:
        ValueError: If separator is not a one-character string.
    """
    if not isinstance(separator, str) or len(separator) != 1:
        raise ValueError(f"separator must be a single character, not {separator!r}")
    return separator


def forbidden_characters(separator: str = DEFAULT_SEPARATOR) -> frozenset[str]:
    """Characters that may never appear inside a segment."""
    return frozenset((separator,))


def normalize(path: str, separator: str = DEFAULT_SEPARATOR) -> tuple[str, ...]:
    """Split a path string into its segments.

    Leading and trailing separators are ignored; the root path ('' or a lone
    separator) normalizes to an empty tuple.

    Args:
        path: Path string (e.g., 'config/database/host').
        separator: Segment separator.

    Returns:
        Tuple of non-empty segments.

    Raises:
        TypeError: If path is not a string.
        InvalidPathError: If the path contains an empty segment
            (e.g., 'a//b') or a forbidden character.
    """
    if not isinstance(path, str):
        raise TypeError(f"path must be str, not {type(path).__name__}")
    return _normalize(path, separator)


@lru_cache(maxsize=1024)
def _normalize(path: str, separator: str) -> tuple[str, ...]:
    body = path[1:] if path.startswith(separator) else path
    if body.endswith(separator):
        body = body[:-1]
    if not body:
        if len(path) > 1:
            raise InvalidPathError(f"Empty segment in path '{path}'", path)
        return ()

    segments = tuple(body.split(separator))
    for segment in segments:
        validate_segment(segment, separator, path)
    return segments


def validate_segment(
    segment: str, separator: str = DEFAULT_SEPARATOR, path: str | None = None
) -> str:
    """Check that segment can be used as a node name.

    Args:
        segment: The candidate name.
        separator: Separator of the tree the name belongs to.
        path: Full path, for the error message.

    Raises:
        InvalidPathError: If segment is empty, not a string, or contains a
            forbidden character.
    """
    where = path if path is not None else segment
    if not isinstance(segment, str):
        raise InvalidPathError(
            f"Segment must be str, not {type(segment).__name__}", path
        )
    if not segment:
        raise InvalidPathError(f"Empty segment in path '{where}'", where)
    if forbidden_characters(separator).intersection(segment):
        raise InvalidPathError(
            f"Forbidden character in segment '{segment}' of path '{where}'", where
        )
    return segment


def join_path(segments: Iterable[str], separator: str = DEFAULT_SEPARATOR) -> str:
    """Return the canonical spelling of a segment sequence ('' for root)."""
    return separator.join(segments)


def is_descendant(candidate: tuple[str, ...], ancestor: tuple[str, ...]) -> bool:
    """True if candidate equals ancestor or lies below it."""
    return candidate[:len(ancestor)] == ancestor

# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PathTree exceptions."""

from __future__ import annotations


class PathTreeError(Exception):
    """Base exception for PathTree errors.

    Attributes:
        path: The path the failing operation was called with.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message


class InvalidPathError(PathTreeError, ValueError):
    """Raised when a path is malformed (empty or forbidden segment)."""

    pass


class PathNotFoundError(PathTreeError, KeyError):
    """Raised when a path does not resolve, or resolves to a node without value."""

    pass


class SelfContainmentError(PathTreeError):
    """Raised when a merge would place a subtree inside itself."""

    pass


class AlreadyExistsError(PathTreeError):
    """Raised by strict insertions when the target is already taken."""

    pass

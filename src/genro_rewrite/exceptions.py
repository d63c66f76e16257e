# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Genro Rewrite.

This module defines custom exceptions used throughout the rewrite engine.
A path that matches no rule is not an error: the router passes it through.
"""

__all__ = [
    "RouteConfigurationError",
    "PathTooLong",
]


class RouteConfigurationError(Exception):
    """Raised when a rewrite rule cannot be compiled.

    This exception indicates a problem in the configured rule itself, not in
    the request: an invalid sub-regex inside a ``[name:regex]`` segment, an
    invalid raw regular expression, or the same group name declared twice in
    one rule. The same configuration always fails the same way.

    Attributes:
        pattern: The rule's left-hand pattern as configured.
        reason: Human-readable description of the problem.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid rewrite rule '{pattern}': {reason}")


class PathTooLong(Exception):  # noqa: N818 - mirrors HTTP "URI Too Long"
    """Raised when a path exceeds the configured matching bound.

    Raised by the ``limits`` plugin before any rule is tried.

    Attributes:
        path: The rejected path.
        limit: The configured maximum length.
    """

    def __init__(self, path: str, limit: int) -> None:
        self.path = path
        self.limit = limit
        super().__init__(f"Path of length {len(path)} exceeds limit of {limit}")

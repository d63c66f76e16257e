# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Match results returned by the router.

Example::

    result = router.parse("news/42", "get")
    path, match = result
    if match:
        print(match.rule, match.args)
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

__all__ = ["ParseResult", "RouteMatch", "RuleMode"]


class RuleMode(str, Enum):
    """How a rule captures arguments, decided once when it is compiled."""

    NAMED = "named"
    REGEX = "regex"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A successful rule match.

    Attributes:
        rule: The matched rule's left-hand pattern, exactly as configured.
        args: Captured values. A dict in declaration order for named rules,
            a list in group order for regex rules (whole match excluded).
        target: The rewritten path.
        mode: The rule mode that produced ``args``.
        method: The method the rules were resolved for.
    """

    rule: str
    args: dict[str, str] | list[str]
    target: str
    mode: RuleMode
    method: str = ""

    @property
    def named(self) -> dict[str, str]:
        """Named arguments (empty for regex rules)."""
        return dict(self.args) if isinstance(self.args, dict) else {}

    @property
    def positional(self) -> list[str]:
        """Arguments as a list, whatever the mode."""
        if isinstance(self.args, dict):
            return list(self.args.values())
        return list(self.args)


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of ``parse``: the resulting path and the match, if any.

    Unpacks as ``(path, match)``. Evaluates to False on pass-through.
    """

    path: str
    match: RouteMatch | None = None

    @property
    def matched(self) -> bool:
        return self.match is not None

    def __iter__(self) -> Iterator[object]:
        yield self.path
        yield self.match

    def __bool__(self) -> bool:
        return self.match is not None

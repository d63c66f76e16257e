# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Rule pattern compiler.

A rule pattern uses ``/`` as path separator and is written in one of two
modes, chosen per rule when it is compiled.

Named mode
----------
At least one segment has the shape ``[name]`` or ``[name:regex]``::

    /[type]/[id]          => /category/[type]/[id]
    /[type:\\w+]/[id:\\d+]  => /category/[type]/[id]

``[name]`` matches one or more characters other than ``/``. With an explicit
sub-regex the segment matches that regex instead; a sub-regex that must
contain ``/`` has to escape it as ``\\/``, otherwise the scanner takes it as
a separator. ``*`` is not separator-aware: use a lazy ``*?`` so a wildcard
does not swallow the following segments. Segments of other shapes are kept
as regex fragments.

Regex mode
----------
No segment has the named shape. The pattern (without its leading ``/``) is
a regular expression with numbered groups::

    /(\\w+)/(\\d+)  => /category/$1/$2

Both modes match the whole path, case-insensitively.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from genro_rewrite.exceptions import RouteConfigurationError

from .match import RouteMatch, RuleMode
from .pathinfo import normalize_path
from .templates import substitute_named, substitute_positional

__all__ = ["CompiledRule", "compile_rule", "parse_group", "split_segments"]

ESCAPE = "\\"
SEPARATOR = "/"
DEFAULT_GROUP_REGEX = r"[^/]+"

_GROUP_SHAPE = re.compile(r"\[(\w+)(?::(.*))?\]")


def split_segments(pattern: str) -> list[str]:
    """Split ``pattern`` on ``/`` not immediately preceded by ``\\``.

    Escaped separators stay in their segment as ``\\/``.
    """
    segments: list[str] = []
    current: list[str] = []
    escaped = False
    for char in pattern:
        if char == SEPARATOR and not escaped:
            segments.append("".join(current))
            current = []
        else:
            current.append(char)
        escaped = char == ESCAPE
    segments.append("".join(current))
    return segments


def parse_group(segment: str) -> tuple[str, str | None] | None:
    """Return ``(name, sub_regex)`` if the whole segment is a named group."""
    if not segment.startswith("["):
        return None
    match = _GROUP_SHAPE.fullmatch(segment)
    if match is None:
        return None
    return match.group(1), match.group(2)


@dataclass(frozen=True)
class CompiledRule:
    """A rule compiled into an anchored, case-insensitive matcher.

    Attributes:
        pattern: Left-hand pattern as configured.
        replacement: Replacement template as configured.
        mode: ``RuleMode.NAMED`` or ``RuleMode.REGEX``.
        regex: Compiled expression, used with ``fullmatch``.
        groups: Group names in declaration order (named mode only).
        is_root: True when the pattern addresses the root path.
    """

    pattern: str
    replacement: str
    mode: RuleMode
    regex: re.Pattern[str]
    groups: tuple[str, ...] = ()
    is_root: bool = False

    def match(self, path: str, method: str = "") -> RouteMatch | None:
        """Match a normalized path; return None when the rule does not apply."""
        if self.is_root and not path:
            # Targets share the stripped form of incoming paths, root included
            return RouteMatch(
                rule=self.pattern,
                args=[],
                target=normalize_path(self.replacement),
                mode=self.mode,
                method=method,
            )
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        if self.mode is RuleMode.NAMED:
            values = {name: found.group(name) or "" for name in self.groups}
            target = substitute_named(self.replacement, values)
            args: dict[str, str] | list[str] = values
        else:
            captured = [value or "" for value in found.groups()]
            target = substitute_positional(self.replacement, captured)
            args = captured
        return RouteMatch(
            rule=self.pattern,
            args=args,
            target=normalize_path(target),
            mode=self.mode,
            method=method,
        )

    def describe(self) -> dict[str, object]:
        return {
            "pattern": self.pattern,
            "replacement": self.replacement,
            "mode": self.mode.value,
            "groups": list(self.groups),
            "regex": self.regex.pattern,
        }


def compile_rule(pattern: str, replacement: str) -> CompiledRule:
    """Compile one rule.

    Raises:
        RouteConfigurationError: on a duplicate group name or an invalid
            regular expression.
    """
    stripped = pattern[1:] if pattern.startswith(SEPARATOR) else pattern
    groups: list[str] = []
    fragments: list[str] = []
    if stripped:
        for segment in split_segments(stripped):
            group = parse_group(segment)
            if group is None:
                fragments.append(segment)
                continue
            name, sub_regex = group
            if name in groups:
                raise RouteConfigurationError(pattern, f"duplicate group name '{name}'")
            groups.append(name)
            body = DEFAULT_GROUP_REGEX if sub_regex is None else sub_regex
            fragments.append(f"(?P<{name}>{body})")
    if groups:
        mode = RuleMode.NAMED
        source = SEPARATOR.join(fragments)
    else:
        mode = RuleMode.REGEX
        source = stripped
    try:
        regex = re.compile(source, re.IGNORECASE)
    except re.error as exc:
        raise RouteConfigurationError(pattern, str(exc)) from exc
    return CompiledRule(
        pattern=pattern,
        replacement=replacement,
        mode=mode,
        regex=regex,
        groups=tuple(groups),
        is_root=not stripped,
    )

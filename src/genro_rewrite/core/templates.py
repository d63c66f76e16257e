# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Replacement templates.

Two template languages, one per rule mode:

- named rules use ``[name]`` tokens: ``/category/[type]/[id]``
- regex rules use positional backreferences: ``/category/$1/$2``,
  ``/category/${1}/${2}`` or ``/category/\\1/\\2``

Substitution is a single pass over the template, so captured values are
never re-scanned for tokens.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

__all__ = ["substitute_named", "substitute_positional"]

_NAMED_TOKEN = re.compile(r"\[(\w+)\]")
# Up to two digits, as in "$12" or "\12"; "${N}" disambiguates "${1}0".
_POSITIONAL_TOKEN = re.compile(r"\$(?:(\d{1,2})|\{(\d{1,2})\})|\\(\d{1,2})")


def substitute_named(template: str, values: Mapping[str, str]) -> str:
    """Replace ``[name]`` tokens with ``values[name]``.

    Tokens whose name is not in ``values`` are kept verbatim.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in values:
            return values[name]
        return match.group(0)

    return _NAMED_TOKEN.sub(_replace, template)


def substitute_positional(template: str, groups: Sequence[str]) -> str:
    """Expand ``$N``, ``${N}`` and ``\\N`` with ``groups[N - 1]``.

    ``$0`` and ``\\0`` (whole match) are kept verbatim. References past
    the last group expand to an empty string.
    """

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1) or match.group(2) or match.group(3))
        if index == 0:
            return match.group(0)
        if index > len(groups):
            return ""
        return groups[index - 1]

    return _POSITIONAL_TOKEN.sub(_replace, template)

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Rule storage for Genro Rewrite.

Rules are configured as a mapping of buckets::

    {
        "global": {"/[type]/[id]": "/category/[type]/[id]"},
        "get": {"/comment/hot/[uid]": "/blog/comment/type/hot/user/[uid]"},
        "post": {...},
    }

``global`` applies to every request method. A method bucket (lower-cased
HTTP method) takes precedence over ``global``: its rules come first, and a
pattern present in both buckets uses the method bucket's replacement.

Objects
-------
``RuleTable``
    Ordered association of ``pattern -> replacement`` pairs with a position
    index. Iteration order is insertion order; re-adding a pattern replaces
    its value in place.

``RuleStore``
    Holds the buckets. Malformed input never raises: a config that is not a
    mapping becomes an empty store, and a bucket that is not a
    ``str -> str`` mapping is dropped with a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

__all__ = ["GLOBAL_BUCKET", "RuleStore", "RuleTable"]

GLOBAL_BUCKET = "global"

logger = logging.getLogger(__name__)

_BUCKET_ADAPTER: TypeAdapter[dict[str, str]] = TypeAdapter(dict[str, str])


class RuleTable:
    """Ordered ``pattern -> replacement`` pairs with an index for lookups."""

    __slots__ = ("_pairs", "_index")

    def __init__(self, pairs: Mapping[str, str] | None = None) -> None:
        self._pairs: list[tuple[str, str]] = []
        self._index: dict[str, int] = {}
        if pairs:
            for pattern, replacement in pairs.items():
                self.add(pattern, replacement)

    def add(self, pattern: str, replacement: str) -> RuleTable:
        """Append a rule, or replace the value of an existing pattern in place."""
        position = self._index.get(pattern)
        if position is None:
            self._index[pattern] = len(self._pairs)
            self._pairs.append((pattern, replacement))
        else:
            self._pairs[position] = (pattern, replacement)
        return self

    def get(self, pattern: str, default: str | None = None) -> str | None:
        position = self._index.get(pattern)
        if position is None:
            return default
        return self._pairs[position][1]

    def patterns(self) -> list[str]:
        return [pattern for pattern, _ in self._pairs]

    def items(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def merged_over(self, base: RuleTable) -> RuleTable:
        """Return own pairs followed by the pairs of ``base`` not overridden here.

        Both sides keep their own relative order.
        """
        merged = RuleTable()
        for pattern, replacement in self._pairs:
            merged.add(pattern, replacement)
        for pattern, replacement in base._pairs:
            if pattern not in self._index:
                merged.add(pattern, replacement)
        return merged

    def as_dict(self) -> dict[str, str]:
        return dict(self._pairs)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._index

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleTable):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"RuleTable({self._pairs!r})"


class RuleStore:
    """Bucketed rule configuration, replaced as a whole by ``set_config``."""

    __slots__ = ("_buckets",)

    def __init__(self, config: Any = None) -> None:
        self._buckets: dict[str, RuleTable] = {}
        self.set_config(config)

    def set_config(self, config: Any) -> RuleStore:
        """Replace every stored rule with the content of ``config``.

        ``config`` may be a mapping of buckets or another ``RuleStore``
        (copied). Anything else yields an empty store.
        """
        if isinstance(config, RuleStore):
            config = config.config
        buckets: dict[str, RuleTable] = {}
        if isinstance(config, Mapping):
            for name, bucket in config.items():
                if not isinstance(name, str):
                    logger.warning("Ignoring rule bucket with non-string name %r", name)
                    continue
                try:
                    rules = _BUCKET_ADAPTER.validate_python(bucket)
                except ValidationError:
                    logger.warning("Ignoring malformed rule bucket %r", name)
                    continue
                table = buckets.setdefault(name.lower(), RuleTable())
                for pattern, replacement in rules.items():
                    table.add(pattern, replacement)
        elif config is not None:
            logger.warning(
                "Rule configuration must be a mapping, got %s; routing disabled",
                type(config).__name__,
            )
        self._buckets = buckets
        return self

    @property
    def config(self) -> dict[str, dict[str, str]]:
        """Plain-dict copy of the stored configuration."""
        return {name: table.as_dict() for name, table in self._buckets.items()}

    def methods(self) -> list[str]:
        """Names of the method-specific buckets."""
        return [name for name in self._buckets if name != GLOBAL_BUCKET]

    def bucket(self, name: str) -> RuleTable:
        """Return a copy of the named bucket, or an empty table if it does not exist."""
        return self._buckets.get(name.lower(), RuleTable()).merged_over(RuleTable())

    def resolve_effective_rules(self, method: str | None) -> RuleTable:
        """Merge the ``method`` bucket over ``global``.

        Method rules keep their declared order and come first; ``global``
        rules whose pattern the method bucket does not redefine follow in
        their declared order. Without a method bucket this is ``global``.
        """
        global_rules = self._buckets.get(GLOBAL_BUCKET, RuleTable())
        key = (method or "").lower()
        method_rules = self._buckets.get(key) if key != GLOBAL_BUCKET else None
        if method_rules is None:
            return global_rules.merged_over(RuleTable())
        return method_rules.merged_over(global_rules)

    def __repr__(self) -> str:
        return f"RuleStore({self.config!r})"

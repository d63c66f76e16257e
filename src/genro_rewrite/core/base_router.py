# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Plugin-free rewrite engine for Genro Rewrite.

This module exposes :class:`BaseRouter`, which resolves the effective rule
set for a request method, compiles rules on demand and rewrites paths.
Subclasses add middleware but must preserve these semantics.

Constructor and slots
---------------------
Constructor signature::

    BaseRouter(config=None, *, name=None)

- ``config`` is a bucket mapping (see :mod:`genro_rewrite.core.rules`) or a
  ``RuleStore``. Malformed values yield an empty rule set: every path
  passes through unchanged.
- ``name`` is an optional label used in logs and ``repr``.
- Slots: ``name``, ``_store`` (the ``RuleStore``), ``_compiled``
  (``(pattern, replacement)`` → ``CompiledRule``), ``_pipeline`` (the parse
  callable after wrapping).

Rule resolution
---------------
``resolve_effective_rules(method)`` returns the method bucket in declared
order followed by the ``global`` rules the method bucket does not redefine.
Rule order decides which rule wins when several would match.

Compilation
-----------
Rules are compiled lazily and cached until the next ``set_config``. A rule
that cannot be compiled raises ``RouteConfigurationError`` from the
``parse`` call that first reaches it; rules after the first match are never
compiled. ``validate()`` compiles everything eagerly.

Parsing
-------
``parse(path, method)`` normalizes ``path`` (strips ``/`` at both ends),
tries each effective rule in order and returns a ``ParseResult``. The first
match wins; without a match the normalized path comes back unchanged and
``ParseResult.match`` is None.

Hooks for subclasses
--------------------
- ``_wrap_parse``: override to wrap the parse callable (middleware stack).
- ``_after_rule_compiled``: invoked once per freshly compiled rule.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from genro_toolbox.typeutils import safe_is_instance

from genro_rewrite.exceptions import RouteConfigurationError

from .match import ParseResult
from .pathinfo import method_from_environ, normalize_path, path_info_from_environ
from .patterns import CompiledRule, compile_rule
from .rules import GLOBAL_BUCKET, RuleStore, RuleTable

__all__ = ["BaseRouter"]

ParseCallable = Callable[[str, str], ParseResult]


class BaseRouter:
    """Plugin-free rewrite engine.

    Responsibilities:
        - Hold the rule configuration and resolve per-method precedence
        - Compile rules once per configuration
        - Rewrite paths, first match wins
        - Provide hooks for subclasses to wrap parsing
    """

    __slots__ = ("name", "_store", "_compiled", "_pipeline")

    def __init__(self, config: Any = None, *, name: str | None = None) -> None:
        self.name = name
        self._store = RuleStore()
        self._compiled: dict[tuple[str, str], CompiledRule] = {}
        self._pipeline: ParseCallable = self._match_rules
        self.set_config(config)
        self._rebuild_pipeline()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_config(self, config: Any) -> BaseRouter:
        """Replace the whole rule configuration and drop compiled rules."""
        if safe_is_instance(config, "genro_rewrite.core.rules.RuleStore"):
            self._store = config
        else:
            self._store = RuleStore(config)
        self._compiled = {}
        return self

    @property
    def store(self) -> RuleStore:
        return self._store

    @property
    def config(self) -> dict[str, dict[str, str]]:
        return self._store.config

    def resolve_effective_rules(self, method: str | None) -> RuleTable:
        """Return the ordered rules that apply to ``method``."""
        return self._store.resolve_effective_rules(method)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------
    def compiled(self, pattern: str, replacement: str) -> CompiledRule:
        """Return the compiled rule, compiling it on first use."""
        key = (pattern, replacement)
        rule = self._compiled.get(key)
        if rule is None:
            rule = compile_rule(pattern, replacement)
            self._compiled[key] = rule
            self._after_rule_compiled(rule)
        return rule

    def validate(self) -> BaseRouter:
        """Compile every configured rule now.

        Raises:
            RouteConfigurationError: for the first rule that does not compile.
        """
        for bucket in [GLOBAL_BUCKET, *self._store.methods()]:
            for pattern, replacement in self._store.bucket(bucket):
                self.compiled(pattern, replacement)
        return self

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    def parse(self, path: str | None, method: str | None = "get") -> ParseResult:
        """Rewrite ``path`` with the first matching rule for ``method``.

        Args:
            path: Request path; surrounding ``/`` are ignored.
            method: HTTP method, case-insensitive.

        Returns:
            ``ParseResult`` with the rewritten path and the match, or the
            normalized input path and ``match=None`` on pass-through.

        Raises:
            RouteConfigurationError: if a rule reached during the scan
                cannot be compiled.
        """
        return self._pipeline(normalize_path(path), (method or "get").lower())

    def rewrite(self, path: str | None, method: str | None = "get") -> str:
        """Return only the rewritten path."""
        return self.parse(path, method).path

    def parse_environ(self, environ: Mapping[str, Any]) -> ParseResult:
        """Parse the path-info and method of a WSGI-style environ."""
        return self.parse(path_info_from_environ(environ), method_from_environ(environ))

    def _match_rules(self, path: str, method: str) -> ParseResult:
        for pattern, replacement in self.resolve_effective_rules(method):
            match = self.compiled(pattern, replacement).match(path, method)
            if match is not None:
                return ParseResult(match.target, match)
        return ParseResult(path)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def rules(self, method: str | None = None) -> list[dict[str, Any]]:
        """Describe the effective rules for ``method`` in match order.

        Rules that do not compile are reported with an ``error`` key instead
        of raising.
        """
        method_bucket = self._store.bucket(method) if method else RuleTable()
        described: list[dict[str, Any]] = []
        for pattern, replacement in self.resolve_effective_rules(method):
            origin = method.lower() if method and pattern in method_bucket else GLOBAL_BUCKET
            try:
                info = self.compiled(pattern, replacement).describe()
            except RouteConfigurationError as exc:
                info = {"pattern": pattern, "replacement": replacement, "error": exc.reason}
            info["bucket"] = origin
            described.append(info)
        return described

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def _rebuild_pipeline(self) -> None:
        self._pipeline = self._wrap_parse(self._match_rules)

    def _wrap_parse(self, call_next: ParseCallable) -> ParseCallable:
        return call_next

    def _after_rule_compiled(self, rule: CompiledRule) -> None:
        pass

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label} buckets={sorted(self.config)}>"

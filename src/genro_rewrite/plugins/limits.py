"""Limits plugin for Genro Rewrite.

Bounds the input handed to the rule matchers. Sub-regexes come from
configuration and may backtrack badly on long inputs; capping the path
length caps the matching work per request.

Configuration
-------------
Accepted keys (router-level or per-method):
    - ``enabled``: Gate the plugin entirely (default True)
    - ``max_length``: Longest normalized path tried against the rules
      (default 2048)
    - ``on_exceed``: ``"raise"`` raises ``PathTooLong``; ``"pass"`` skips
      matching and returns the path unchanged (default "raise")

Example::

    router = Router(rules, plugins=("limits",), limits_max_length=512)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal

from pydantic import PositiveInt

from genro_rewrite.core.match import ParseResult
from genro_rewrite.core.router import Router
from genro_rewrite.exceptions import PathTooLong
from genro_rewrite.plugins._base_plugin import BasePlugin

DEFAULT_MAX_LENGTH = 2048


class LimitsPlugin(BasePlugin):
    """Reject or pass through paths longer than ``max_length``."""

    plugin_code = "limits"
    plugin_description = "Bounds path length before matching"

    def configure(  # type: ignore[override]
        self,
        enabled: bool = True,
        max_length: PositiveInt = DEFAULT_MAX_LENGTH,
        on_exceed: Literal["raise", "pass"] = "raise",
    ):
        pass  # Storage is handled by the wrapper

    def wrap_parse(self, router, call_next: Callable):
        def bounded(path: str, method: str):
            cfg = self.configuration(method)
            limit = cfg.get("max_length", DEFAULT_MAX_LENGTH)
            if len(path) <= limit:
                return call_next(path, method)
            if cfg.get("on_exceed", "raise") == "pass":
                return ParseResult(path)
            raise PathTooLong(path, limit)

        return bounded


Router.register_plugin(LimitsPlugin)

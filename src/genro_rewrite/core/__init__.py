"""Core runtime aggregator for Genro Rewrite.

Exposes the runtime building blocks from a single module:
``BaseRouter``, ``Router``, ``RuleStore``, ``compile_rule``.

Public API:
    - ``BaseRouter``: Plugin-free rewrite engine
    - ``Router``: Plugin-enabled router with middleware support
    - ``RuleStore`` / ``RuleTable``: Bucketed rules and ordered rule sets
    - ``compile_rule`` / ``CompiledRule``: Pattern compiler and its output
    - ``ParseResult`` / ``RouteMatch`` / ``RuleMode``: Results

Importing this module performs only imports; it does not register plugins
or instantiate routers.
"""

from .base_router import BaseRouter
from .match import ParseResult, RouteMatch, RuleMode
from .pathinfo import method_from_environ, normalize_path, path_info_from_environ
from .patterns import CompiledRule, compile_rule, split_segments
from .router import Router
from .rules import GLOBAL_BUCKET, RuleStore, RuleTable
from .templates import substitute_named, substitute_positional

__all__ = [
    "BaseRouter",
    "CompiledRule",
    "GLOBAL_BUCKET",
    "ParseResult",
    "RouteMatch",
    "Router",
    "RuleMode",
    "RuleStore",
    "RuleTable",
    "compile_rule",
    "method_from_environ",
    "normalize_path",
    "path_info_from_environ",
    "split_segments",
    "substitute_named",
    "substitute_positional",
]

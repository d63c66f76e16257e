"""Genro Rewrite - Method-aware URL path rewriting for Python.

Public API surface for matching request paths against ordered rewrite rules
and producing the rewritten path with the captured arguments.

Public exports:
    - ``Router``: Plugin-enabled rewrite router
    - ``BaseRouter``: Plugin-free rewrite engine
    - ``RuleStore`` / ``RuleTable``: Rule configuration and ordered rule sets
    - ``ParseResult`` / ``RouteMatch``: Parse outcome and match metadata
    - ``compile_rule``: Pattern compiler for a single rule
    - ``RouteConfigurationError`` / ``PathTooLong``: Errors

Plugin registration happens lazily via ``import_module`` to avoid cycles.
Built-in plugins (logging, limits) are auto-registered on first import.

Example::

    from genro_rewrite import Router

    router = Router({
        "global": {"/[type]/[id]": "/category/[type]/[id]"},
        "get": {"/special": "/x"},
    })
    path, match = router.parse("news/42", "get")
    # path == "category/news/42"
    # match.args == {"type": "news", "id": "42"}
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    BaseRouter,
    CompiledRule,
    ParseResult,
    RouteMatch,
    Router,
    RuleMode,
    RuleStore,
    RuleTable,
    compile_rule,
    path_info_from_environ,
)
from .exceptions import PathTooLong, RouteConfigurationError

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "limits"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "BaseRouter",
    "CompiledRule",
    "ParseResult",
    "PathTooLong",
    "RouteConfigurationError",
    "RouteMatch",
    "Router",
    "RuleMode",
    "RuleStore",
    "RuleTable",
    "compile_rule",
    "path_info_from_environ",
]

"""Logging plugin for Genro Rewrite.

Wraps ``parse`` with configurable log messages including timing.

Configuration
-------------
Accepted keys (router-level or per-method):
    - ``enabled``: Gate the plugin entirely (default True)
    - ``hit``: Log rewrites, "GET news/42 -> category/news/42" (default True)
    - ``miss``: Log pass-through paths (default True)
    - ``log``: Use logger.info() when available (default True)
    - ``print``: Always use print() (default False)

Example::

    from genro_rewrite import Router

    router = Router(rules, plugins=("logging",))

    # Or silence misses for one method:
    router.logging.configure(_target="get", miss=False)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from genro_rewrite.core.router import Router
from genro_rewrite.plugins._base_plugin import BasePlugin


class LoggingPlugin(BasePlugin):
    """Logging plugin with configurable hit/miss messages and timing."""

    plugin_code = "logging"
    plugin_description = "Logs rewrites with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: logging.Logger | None = None, **cfg):
        self._logger = logger or logging.getLogger("genro_rewrite")
        super().__init__(router, **cfg)

    def configure(  # type: ignore[override]
        self,
        enabled: bool = True,
        hit: bool = True,
        miss: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        Args:
            enabled: Enable/disable the plugin entirely.
            hit: Log "{METHOD} {path} -> {target}" when a rule matches.
            miss: Log "{METHOD} {path} pass-through" when nothing matches.
            log: Use logger.info() when handlers available.
            print: Always use print() instead of logger.
        """
        pass  # Storage is handled by the wrapper

    def _emit(self, message: str, *, cfg: dict | None = None):
        """Emit a log message via configured sink."""
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            can_log = callable(has_handlers) and has_handlers()
            if can_log:
                logger.info(message)
            else:
                print(message)

    def on_compile(self, router, rule):
        self._logger.debug(
            "compiled %s rule %r as %r", rule.mode.value, rule.pattern, rule.regex.pattern
        )

    def wrap_parse(self, router, call_next: Callable):
        """Wrap parsing with hit/miss logging and timing."""

        def logged(path: str, method: str):
            cfg = self._effective_config(method)
            if not cfg["enabled"]:
                return call_next(path, method)
            t0 = time.perf_counter()
            result = call_next(path, method)
            elapsed = (time.perf_counter() - t0) * 1000
            if result.match is not None:
                if cfg["hit"]:
                    self._emit(
                        f"{method.upper()} {path} -> {result.path} "
                        f"[{result.match.rule}] ({elapsed:.2f} ms)",
                        cfg=cfg,
                    )
            elif cfg["miss"]:
                self._emit(f"{method.upper()} {path} pass-through ({elapsed:.2f} ms)", cfg=cfg)
            return result

        return logged

    def _effective_config(self, method: str) -> dict:
        """Get effective configuration for a method, merging defaults."""
        defaults = {"enabled": True, "hit": True, "miss": True, "log": True, "print": False}
        cfg = defaults | self.configuration(method)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


Router.register_plugin(LoggingPlugin)

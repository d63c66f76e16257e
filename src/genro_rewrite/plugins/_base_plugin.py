"""Plugin contract definitions for Genro Rewrite.

This module defines the base class used by the Router plugin system.

``BasePlugin``
    Base class that every plugin must subclass. Provides:
        - Configuration helpers that delegate to the router's ``plugin_info`` store
        - Optional hooks ``on_compile`` and ``wrap_parse`` for the Router pipeline

    Required class attributes:
        - ``plugin_code``: unique identifier used for registration (e.g. "logging")
        - ``plugin_description``: human-readable description of the plugin

    Constructor signature: ``BasePlugin(router, **config)``

    Key methods:
        - ``configure(**config)``: Define accepted configuration parameters
        - ``configuration(method=None)``: Read merged configuration
        - ``on_compile(router, rule)``: Called when a rule is compiled
        - ``wrap_parse(router, call_next)``: Build middleware chain

Configuration targets are ``"_all_"`` (every method) or a lower-cased HTTP
method, so a plugin can behave differently for ``post`` than for ``get``.

Example::

    from genro_rewrite.plugins._base_plugin import BasePlugin

    class MyPlugin(BasePlugin):
        plugin_code = "myplugin"
        plugin_description = "My custom plugin"

        def configure(self, enabled: bool = True, threshold: int = 10):
            pass  # Storage handled by wrapper

        def wrap_parse(self, router, call_next):
            def wrapper(path, method):
                print(f"Before {method} {path}")
                return call_next(path, method)
            return wrapper
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any, get_type_hints

from pydantic import BaseModel, ConfigDict, create_model

__all__ = ["BasePlugin"]


def _options_model(configure: Callable) -> type[BaseModel]:
    """Build a pydantic model from the parameters of a configure() method."""
    hints = get_type_hints(configure)
    fields: dict[str, Any] = {}
    for name, param in inspect.signature(configure).parameters.items():
        if name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[name] = (hints.get(name, Any), default)
    return create_model(  # type: ignore[call-overload, no-any-return]
        f"{configure.__qualname__.replace('.', '_')}_Options",
        __config__=ConfigDict(extra="forbid"),
        **fields,
    )


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() method to handle flags, _target, validation, and storage."""
    models: list[type[BaseModel]] = []

    @wraps(original_configure)
    def wrapper(
        self: BasePlugin, *, _target: str = "_all_", flags: str | None = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        # Handle multiple targets (comma-separated)
        if "," in _target:
            targets = [t.strip() for t in _target.split(",") if t.strip()]
            for t in targets:
                wrapper(self, _target=t, **kwargs)
            return

        # Type hints resolve on first use, once the plugin module is fully loaded
        if not models:
            models.append(_options_model(original_configure))
        options = models[0](**kwargs).model_dump(exclude_unset=True)
        self._write_config(_target.lower(), options)

    return wrapper


class BasePlugin:
    """Hook interface and configuration helpers for router plugins.

    Subclass this to create custom plugins. Override the hooks you need
    and define your configuration schema in ``configure()``.
    """

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])  # type: ignore[method-assign]

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "_all_", {"config": {"enabled": True}, "locals": {}}
        )

    def _write_config(self, target: str, config: dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, method: str | None = None) -> dict[str, Any]:
        """Read merged configuration (base + optional per-method override).

        Args:
            method: If provided, merge the method's config over the base config.

        Returns:
            Dict of configuration values.
        """
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("_all_", {}).get("config", {}))
        if method:
            merged.update(plugin_bucket.get(method.lower(), {}).get("config", {}))
        return merged

    def _parse_flags(self, flags: str) -> dict[str, bool]:
        """Parse flag string like "enabled,miss:off" into boolean dict."""
        mapping: dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def _get_store(self) -> dict[str, Any]:
        return self._router._plugin_info  # type: ignore[no-any-return]

    # =========================================================================
    # METHODS TO OVERRIDE IN CUSTOM PLUGINS
    # =========================================================================

    def configure(self, *, _target: str = "_all_", flags: str | None = None) -> None:
        """Override to define accepted configuration parameters.

        The wrapper added by __init_subclass__ handles:
            - Parsing ``flags`` (e.g. "enabled,miss:off") into booleans
            - Routing to ``_target`` ("_all_", a method, or comma-separated)
            - Pydantic validation and coercion against the configure() signature
            - Writing to the router's config store

        Args:
            _target: Where to write config. "_all_" for every method,
                     "post" for one method, or "get,head" for several.
            flags: String like "enabled,miss:off" parsed into booleans.
        """
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def on_compile(self, router: Any, rule: Any) -> None:  # pragma: no cover - default no-op
        """Override to run logic when a rule is compiled.

        Called once per rule and configuration load, before its first match.

        Args:
            router: The Router compiling the rule.
            rule: The ``CompiledRule``.
        """

    def wrap_parse(self, router: Any, call_next: Callable) -> Callable:
        """Override to wrap parsing with custom logic.

        Return a callable taking ``(path, method)`` that calls
        ``call_next(path, method)`` and returns its ``ParseResult`` (or
        returns one of its own to short-circuit).

        Args:
            router: The Router instance.
            call_next: The next callable in the chain.

        Returns:
            A callable with the same signature as call_next.
        """
        return call_next

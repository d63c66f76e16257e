# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Router with plugin pipeline for Genro Rewrite.

``Router`` extends ``BaseRouter`` with a global plugin registry, per-router
plugin instances, middleware wrapping around ``parse``, and plugin state
stored on the router.

Internal state
--------------
- ``_plugins``: instantiated plugins in the order they were attached.
- ``_plugins_by_name``: name → plugin instance.
- ``_plugin_info``: per-plugin state store on the router, one bucket per
  target (``"_all_"`` or an HTTP method).

Global registry
---------------
``Router.register_plugin(plugin_class, name=None)`` validates that
``plugin_class`` is a subclass of ``BasePlugin`` with a ``plugin_code``.

Attaching plugins
-----------------
``plug(plugin_name, **config)`` looks up the plugin class by name in the
global registry, instantiates it, rebuilds the parse pipeline and returns
``self``. The constructor accepts ``plugins=("logging", ...)`` together with
``<plugin>_<option>`` keyword arguments routed to each plugin::

    Router(rules, plugins=("logging",), logging_miss=False)

Wrapping pipeline
-----------------
``_wrap_parse(call_next)`` builds middleware layers from the current
``_plugins`` in reverse order (last attached closest to the engine). Each
layer is skipped for methods where the plugin is disabled.

Example::

    from genro_rewrite import Router

    router = Router(
        {"global": {"/[type]/[id]": "/category/[type]/[id]"}},
        plugins=("logging",),
    )
    router.rewrite("news/42")  # "category/news/42"
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import wraps
from typing import Any

from genro_toolbox import dictExtract

from genro_rewrite.core.base_router import BaseRouter, ParseCallable
from genro_rewrite.core.patterns import CompiledRule
from genro_rewrite.plugins._base_plugin import BasePlugin

__all__ = ["Router"]

_PLUGIN_REGISTRY: dict[str, type[BasePlugin]] = {}


class Router(BaseRouter):
    """Router with plugin registry and pipeline support.

    Extends BaseRouter with:
        - Global plugin registry for registering plugin classes
        - Per-router plugin instances with middleware wrapping
        - Per-method plugin state and configuration
    """

    __slots__ = BaseRouter.__slots__ + (
        "_plugins",
        "_plugins_by_name",
        "_plugin_info",
    )

    def __init__(
        self,
        config: Any = None,
        *,
        name: str | None = None,
        plugins: Iterable[str] = (),
        **plugin_options: Any,
    ) -> None:
        self._plugins: list[BasePlugin] = []
        self._plugins_by_name: dict[str, BasePlugin] = {}
        self._plugin_info: dict[str, dict[str, Any]] = {}
        super().__init__(config, name=name)
        plugins = [plugins] if isinstance(plugins, str) else list(plugins)
        unused = set(plugin_options)
        for plugin in plugins:
            prefix = f"{plugin}_"
            options = dictExtract(plugin_options, prefix, slice_prefix=True, pop=False)
            unused -= {key for key in plugin_options if key.startswith(prefix)}
            self.plug(plugin, **options)
        if unused:
            raise TypeError(f"Unexpected router options: {', '.join(sorted(unused))}")

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: type[BasePlugin], name: str | None = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined.
            name: Optional override name. If provided, overwrites any existing
                  registration. If not provided, uses plugin_code and raises
                  if already registered with a different class.

        Raises:
            TypeError: If plugin_class is not a BasePlugin subclass.
            ValueError: If plugin_code is missing or name collision occurs.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> dict[str, type[BasePlugin]]:
        """Return a copy of the global plugin registry."""
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> Router:
        """Attach a plugin by name (previously registered globally).

        Args:
            plugin: Name of the plugin to attach.
            **config: Configuration options passed to the plugin.

        Returns:
            self (for method chaining).

        Raises:
            TypeError: If plugin is not a string.
            ValueError: If plugin is not registered or already attached.
        """
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        if plugin in self._plugins_by_name:
            raise ValueError(
                f"Plugin '{plugin}' is already attached to this router. "
                "Use configure() to update settings."
            )
        instance = plugin_class(router=self, **config)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        for rule in self._compiled.values():
            instance.on_compile(self, rule)
        self._rebuild_pipeline()
        return self

    def iter_plugins(self) -> list[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, method: str | None = None) -> dict[str, Any]:
        """Return plugin config (global + per-method overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        return plugin.configuration(method)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins_by_name.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to router '{self.name}'")
        return plugin

    def _get_plugin_bucket(self, plugin_name: str) -> dict[str, Any]:
        bucket = self._plugin_info.get(plugin_name)
        if bucket is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to router '{self.name}'"
            )
        bucket.setdefault("_all_", {"config": {}, "locals": {}})
        return bucket

    # ------------------------------------------------------------------
    # Runtime helpers (state stored on plugin_info)
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, method: str, plugin_name: str, enabled: bool = True) -> None:
        """Enable or disable a plugin for one method ("_all_" for every method)."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(method.lower(), {"config": {}, "locals": {}})
        entry.setdefault("locals", {})["enabled"] = bool(enabled)

    def is_plugin_enabled(self, method: str, plugin_name: str) -> bool:
        """Check if a plugin is enabled for a method.

        Resolution order (first found wins):
        1. method locals (runtime override via set_plugin_enabled)
        2. method config (static via configure(_target=method, enabled=...))
        3. global locals (runtime override via set_plugin_enabled for _all_)
        4. global config (static via configure(enabled=...))
        5. default: True
        """
        bucket = self._get_plugin_bucket(plugin_name)
        for key in (method.lower(), "_all_"):
            data = bucket.get(key, {})
            if "enabled" in data.get("locals", {}):
                return bool(data["locals"]["enabled"])
            if "enabled" in data.get("config", {}):
                return bool(data["config"]["enabled"])
        return True

    def set_runtime_data(self, method: str, plugin_name: str, key: str, value: Any) -> None:
        """Set runtime data for a plugin/method combination."""
        bucket = self._get_plugin_bucket(plugin_name)
        entry = bucket.setdefault(method.lower(), {"config": {}, "locals": {}})
        entry.setdefault("locals", {})[key] = value

    def get_runtime_data(self, method: str, plugin_name: str, key: str, default: Any = None) -> Any:
        """Get runtime data for a plugin/method combination."""
        bucket = self._get_plugin_bucket(plugin_name)
        return bucket.get(method.lower(), {}).get("locals", {}).get(key, default)

    # ------------------------------------------------------------------
    # Overrides/hooks
    # ------------------------------------------------------------------
    def _wrap_parse(self, call_next: ParseCallable) -> ParseCallable:
        wrapped = call_next
        for plugin in reversed(self._plugins):
            plugin_call = plugin.wrap_parse(self, wrapped)
            wrapped = self._create_wrapper(plugin, plugin_call, wrapped)
        return wrapped

    def _create_wrapper(
        self,
        plugin: BasePlugin,
        plugin_call: ParseCallable,
        next_handler: ParseCallable,
    ) -> ParseCallable:
        @wraps(next_handler)
        def wrapper(path: str, method: str):
            if not self.is_plugin_enabled(method, plugin.name):
                return next_handler(path, method)
            return plugin_call(path, method)

        return wrapper

    def _after_rule_compiled(self, rule: CompiledRule) -> None:
        for plugin in self._plugins:
            plugin.on_compile(self, rule)

    def rules(self, method: str | None = None) -> list[dict[str, Any]]:
        described = super().rules(method)
        if self._plugins:
            names = [plugin.name for plugin in self._plugins]
            enabled = [n for n in names if self.is_plugin_enabled(method or "_all_", n)]
            for info in described:
                info["plugins"] = enabled
        return described

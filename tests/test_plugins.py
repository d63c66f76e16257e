# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""Tests for the plugin pipeline and the built-in plugins."""

import logging

import pytest
from pydantic import ValidationError

from genro_rewrite import ParseResult, PathTooLong, Router
from genro_rewrite.plugins._base_plugin import BasePlugin  # Not public API

RULES = {
    "global": {"/[type]/[id]": "/category/[type]/[id]"},
    "post": {"/form/[name]": "/submit/[name]"},
}


class DummyLogger:
    def __init__(self):
        self.records = []

    def has_handlers(self):
        return True

    def info(self, message):
        self.records.append(message)

    def debug(self, message, *args):
        pass


class CapturePlugin(BasePlugin):
    plugin_code = "capture"
    plugin_description = "Captures calls for testing"

    def __init__(self, router, **config):
        super().__init__(router, **config)
        self.calls = []
        self.compiled = []

    def on_compile(self, router, rule):
        self.compiled.append(rule.pattern)

    def wrap_parse(self, router, call_next):
        def wrapper(path, method):
            self.calls.append((method, path))
            return call_next(path, method)

        return wrapper


class BlockPlugin(BasePlugin):
    plugin_code = "block"
    plugin_description = "Short-circuits parsing for blocked prefixes"

    def configure(self, enabled: bool = True, prefix: str = "admin"):
        pass

    def wrap_parse(self, router, call_next):
        def wrapper(path, method):
            prefix = self.configuration(method).get("prefix", "admin")
            if path.startswith(prefix):
                return ParseResult("forbidden")
            return call_next(path, method)

        return wrapper


Router.register_plugin(CapturePlugin)
Router.register_plugin(BlockPlugin)


def logged_router(**options):
    router = Router(RULES, plugins=("logging",), **options)
    router.logging._logger = DummyLogger()  # type: ignore[attr-defined]
    return router


# --- registry ---


def test_builtin_plugins_are_registered():
    available = Router.available_plugins()
    assert "logging" in available
    assert "limits" in available


def test_register_plugin_validation():
    with pytest.raises(TypeError):
        Router.register_plugin(object)  # type: ignore[arg-type]

    class NoCode(BasePlugin):
        pass

    with pytest.raises(ValueError):
        Router.register_plugin(NoCode)

    class OtherCapture(BasePlugin):
        plugin_code = "capture"

    with pytest.raises(ValueError):
        Router.register_plugin(OtherCapture)


def test_plug_errors():
    router = Router(RULES)
    with pytest.raises(TypeError):
        router.plug(CapturePlugin)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="Unknown plugin"):
        router.plug("missing")
    router.plug("capture")
    with pytest.raises(ValueError, match="already attached"):
        router.plug("capture")


def test_unknown_plugin_attribute():
    router = Router(RULES)
    with pytest.raises(AttributeError):
        router.logging  # noqa: B018
    with pytest.raises(AttributeError):
        router.get_config("logging")


def test_unexpected_router_options():
    with pytest.raises(TypeError, match="bogus_flag"):
        Router(RULES, plugins=("logging",), bogus_flag=True)


# --- pipeline ---


def test_capture_plugin_wraps_parse_and_sees_compilation():
    router = Router(RULES).plug("capture")
    router.parse("/news/1/")
    router.parse("news/2")
    assert router.capture.calls == [("get", "news/1"), ("get", "news/2")]
    assert router.capture.compiled == ["/[type]/[id]"]
    router.set_config(RULES)
    router.parse("news/3")
    assert router.capture.compiled == ["/[type]/[id]", "/[type]/[id]"]


def test_plug_after_compilation_reports_compiled_rules():
    router = Router(RULES)
    router.parse("news/1")
    router.plug("capture")
    assert router.capture.compiled == ["/[type]/[id]"]


def test_plugins_apply_in_attachment_order():
    router = Router(RULES, plugins=("block", "capture"))
    assert router.rewrite("admin/1") == "forbidden"
    # block runs first and short-circuits before capture
    assert router.capture.calls == []
    assert [p.name for p in router.iter_plugins()] == ["block", "capture"]


def test_plugin_disabled_per_method():
    router = Router(RULES, plugins=("block",))
    router.set_plugin_enabled("post", "block", False)
    assert router.rewrite("admin/1", "get") == "forbidden"
    assert router.rewrite("admin/1", "post") == "category/admin/1"
    assert router.is_plugin_enabled("get", "block") is True
    assert router.is_plugin_enabled("post", "block") is False


def test_plugin_disabled_by_configuration():
    router = Router(RULES, plugins=("block",))
    router.block.configure(_target="get,head", enabled=False)
    assert router.rewrite("admin/1", "get") == "category/admin/1"
    assert router.rewrite("admin/1", "head") == "category/admin/1"
    assert router.rewrite("admin/1", "post") == "forbidden"


def test_plugin_config_per_method():
    router = Router(RULES, plugins=("block",), block_prefix="secret")
    router.block.configure(_target="post", prefix="form")
    assert router.get_config("block") == {"enabled": True, "prefix": "secret"}
    assert router.get_config("block", "post")["prefix"] == "form"
    assert router.rewrite("form/x", "post") == "forbidden"
    assert router.rewrite("secret/1", "get") == "forbidden"


def test_plugin_configure_is_validated():
    router = Router(RULES, plugins=("block",))
    with pytest.raises(ValidationError):
        router.block.configure(prefix=["not", "a", "string"])


def test_runtime_data():
    router = Router(RULES, plugins=("capture",))
    router.set_runtime_data("get", "capture", "hits", 3)
    assert router.get_runtime_data("get", "capture", "hits") == 3
    assert router.get_runtime_data("post", "capture", "hits", 0) == 0


def test_rules_lists_enabled_plugins():
    router = Router(RULES, plugins=("capture", "block"))
    router.set_plugin_enabled("post", "block", False)
    described = router.rules("post")
    assert described[0]["plugins"] == ["capture"]
    assert router.rules("get")[0]["plugins"] == ["capture", "block"]


# --- logging plugin ---


def test_logging_plugin_logs_hits_and_misses():
    router = logged_router()
    records = router.logging._logger.records
    assert router.rewrite("news/42") == "category/news/42"
    assert router.rewrite("a/b/c") == "a/b/c"
    assert "GET news/42 -> category/news/42 [/[type]/[id]]" in records[0]
    assert "GET a/b/c pass-through" in records[1]


def test_logging_plugin_options_from_constructor():
    router = logged_router(logging_miss=False)
    router.rewrite("a/b/c")
    router.rewrite("news/1")
    assert len(router.logging._logger.records) == 1


def test_logging_plugin_flags_per_method():
    router = logged_router()
    router.logging.configure(_target="post", flags="hit:off")
    router.rewrite("form/x", "post")
    router.rewrite("news/1", "get")
    records = router.logging._logger.records
    assert len(records) == 1
    assert records[0].startswith("GET news/1")


def test_logging_plugin_print_sink(capsys):
    router = logged_router(logging_print=True)
    router.rewrite("news/1")
    assert "category/news/1" in capsys.readouterr().out
    assert router.logging._logger.records == []


def test_logging_plugin_falls_back_to_print_without_handlers(capsys):
    class SilentLogger(DummyLogger):
        def has_handlers(self):
            return False

    router = Router(RULES, plugins=("logging",))
    router.logging._logger = SilentLogger()  # type: ignore[attr-defined]
    router.rewrite("news/1")
    assert "GET news/1 -> category/news/1" in capsys.readouterr().out
    assert router.logging._logger.records == []


def test_logging_plugin_logs_compilation(caplog):
    router = Router(RULES, plugins=("logging",))
    with caplog.at_level(logging.DEBUG, logger="genro_rewrite"):
        router.rewrite("news/1")
    assert "compiled named rule '/[type]/[id]'" in caplog.text


# --- limits plugin ---


def test_limits_plugin_raises_on_long_paths():
    router = Router(RULES, plugins=("limits",), limits_max_length=8)
    assert router.rewrite("news/1") == "category/news/1"
    with pytest.raises(PathTooLong) as excinfo:
        router.rewrite("news/123456789")
    assert excinfo.value.limit == 8
    assert excinfo.value.path == "news/123456789"


def test_limits_plugin_pass_mode():
    router = Router(RULES, plugins=("limits",), limits_max_length=8, limits_on_exceed="pass")
    result = router.parse("/news/123456789/")
    assert result.path == "news/123456789"
    assert result.match is None


def test_limits_plugin_rejects_invalid_options():
    with pytest.raises(ValidationError):
        Router(RULES, plugins=("limits",), limits_max_length=0)
    with pytest.raises(ValidationError):
        Router(RULES, plugins=("limits",), limits_on_exceed="explode")


def test_limits_plugin_default_bound():
    router = Router({"global": {"/(a+)+b": "/never"}}, plugins=("limits",))
    with pytest.raises(PathTooLong):
        router.parse("a" * 5000)


def test_limits_plugin_coerces_string_options():
    router = Router(RULES, plugins=("limits",), limits_max_length="8")
    assert router.get_config("limits")["max_length"] == 8
    assert router.rewrite("news/1") == "category/news/1"
    with pytest.raises(PathTooLong) as excinfo:
        router.rewrite("news/123456789")
    assert excinfo.value.limit == 8


# --- option coercion ---


def test_logging_plugin_coerces_string_booleans():
    router = logged_router(logging_miss="false", logging_hit="off")
    assert router.get_config("logging")["miss"] is False
    assert router.get_config("logging")["hit"] is False
    router.rewrite("a/b/c")
    router.rewrite("news/1")
    assert router.logging._logger.records == []


def test_configure_stores_coerced_values_per_method():
    router = logged_router()
    router.logging.configure(_target="post", miss="no")
    router.rewrite("a/b/c", "post")
    router.rewrite("a/b/c", "get")
    records = router.logging._logger.records
    assert router.get_config("logging", "post")["miss"] is False
    assert len(records) == 1
    assert records[0].startswith("GET a/b/c pass-through")

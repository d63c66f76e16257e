# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Path-info acquisition from a WSGI-style environ.

The router works on normalized paths: no leading or trailing ``/``. The
helpers here read the routing subject from the server environment:

1. ``PATH_INFO`` when the server provides a non-empty one;
2. otherwise the path component of ``REQUEST_URI`` with runs of ``/``
   collapsed, unless the URI addresses a script file directly;
3. otherwise the root path.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

__all__ = ["method_from_environ", "normalize_path", "path_info_from_environ"]

_SLASH_RUN = re.compile(r"/+")
_SCRIPT_SUFFIXES = (".php", ".py")


def normalize_path(path: str | None) -> str:
    """Strip leading and trailing ``/`` from ``path``."""
    return (path or "").strip("/")


def path_info_from_environ(environ: Mapping[str, Any]) -> str:
    path_info = environ.get("PATH_INFO") or ""
    if not path_info:
        uri = environ.get("REQUEST_URI") or ""
        path = uri.split("?", 1)[0]
        direct_script = ".php?" in uri.lower() or path.lower().endswith(_SCRIPT_SUFFIXES)
        if path and not direct_script:
            path_info = _SLASH_RUN.sub("/", path)
        else:
            path_info = "/"
    return normalize_path(path_info)


def method_from_environ(environ: Mapping[str, Any]) -> str:
    return str(environ.get("REQUEST_METHOD") or "get").lower()

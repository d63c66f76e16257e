"""Plugin package for Genro Rewrite.

This package contains built-in plugins for the Router.

Note: Do not import concrete plugins here to keep imports side-effect free.
Concrete plugin modules (logging, limits) self-register when imported
via the main genro_rewrite package.
"""

__all__: list[str] = []

"""
routekit - URL routing with templated paths and hosts.

This package provides:
- ``{name}`` path and host templates with defaults and regex constraints
- Compilation of templates into cached regular-expression matchers
- Reverse URL building with default elision ("pretty" URLs)
- Method and scheme gates per route
- An ordered router with resumable matching
- Layered YAML/JSON/env configuration and a ``routekit`` CLI
"""

from .compiler.template import Placeholder, scan_placeholders
from .compiler.compiler import (
    CompiledTemplate,
    TemplateCompiler,
    PathCompiler,
    HostCompiler,
    get_compiler,
)
from .diagnostics.errors import (
    TemplateDiagnostic,
    ConfigurationError,
    TemplateSyntaxError,
    TemplateSemanticError,
    ConstraintSyntaxError,
    UnknownStyleError,
)
from .cache import (
    TemplateCache,
    CacheStats,
    compile_template,
    get_global_cache,
    set_global_cache,
)
from .route import Route, PathType
from .collection import RouteCollection
from .router import Router, RouteMatch, MatchCursor
from .config import ConfigLoader, ConfigError, load_router

__version__ = "0.3.0"

__all__ = [
    # Compiler
    "Placeholder",
    "scan_placeholders",
    "CompiledTemplate",
    "TemplateCompiler",
    "PathCompiler",
    "HostCompiler",
    "get_compiler",
    # Diagnostics
    "TemplateDiagnostic",
    "ConfigurationError",
    "TemplateSyntaxError",
    "TemplateSemanticError",
    "ConstraintSyntaxError",
    "UnknownStyleError",
    # Caching
    "TemplateCache",
    "CacheStats",
    "compile_template",
    "get_global_cache",
    "set_global_cache",
    # Routing
    "Route",
    "PathType",
    "RouteCollection",
    "Router",
    "RouteMatch",
    "MatchCursor",
    # Config
    "ConfigLoader",
    "ConfigError",
    "load_router",
]

"""Compiler package for route templates."""

from .template import Placeholder, scan_placeholders, FORMAT_VARIABLE
from .compiler import (
    CompiledTemplate,
    TemplateCompiler,
    PathCompiler,
    HostCompiler,
    get_compiler,
)

__all__ = [
    "Placeholder",
    "scan_placeholders",
    "FORMAT_VARIABLE",
    "CompiledTemplate",
    "TemplateCompiler",
    "PathCompiler",
    "HostCompiler",
    "get_compiler",
]

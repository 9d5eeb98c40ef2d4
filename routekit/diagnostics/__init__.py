"""Diagnostics package."""

from .errors import (
    TemplateDiagnostic,
    ConfigurationError,
    TemplateSyntaxError,
    TemplateSemanticError,
    ConstraintSyntaxError,
    UnknownStyleError,
)

__all__ = [
    "TemplateDiagnostic",
    "ConfigurationError",
    "TemplateSyntaxError",
    "TemplateSemanticError",
    "ConstraintSyntaxError",
    "UnknownStyleError",
]

"""
Diagnostic errors for route templates.
"""

from dataclasses import dataclass
from typing import Optional, List


@dataclass
class TemplateDiagnostic:
    """Base class for all template diagnostics."""
    message: str
    template: Optional[str] = None
    position: Optional[int] = None
    suggestions: List[str] = None

    def __post_init__(self):
        if self.suggestions is None:
            self.suggestions = []

    def __str__(self) -> str:
        return self.message

    def format(self) -> str:
        """Format diagnostic for display."""
        parts = [f"{self.__class__.__name__}: {self.message}"]

        # Point at the offending character
        if self.template is not None:
            parts.append(f"  --> {self.template}")
            if self.position is not None:
                parts.append("      " + " " * self.position + "^")

        if self.suggestions:
            parts.append("\nSuggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                parts.append(f"  {i}) {suggestion}")

        return "\n".join(parts)


class ConfigurationError(TemplateDiagnostic, Exception):
    """Route is configured in a way that can never work."""
    pass


class TemplateSyntaxError(ConfigurationError):
    """Malformed template, e.g. an unbalanced brace."""
    pass


class TemplateSemanticError(ConfigurationError):
    """Well-formed template with invalid meaning, e.g. a repeated variable."""
    pass


class ConstraintSyntaxError(ConfigurationError):
    """A variable constraint is not a valid regular expression."""

    def __init__(self, message: str, variable: str, constraint: str, **kwargs):
        super().__init__(message, **kwargs)
        self.variable = variable
        self.constraint = constraint

    def format(self) -> str:
        parts = [
            f"ConstraintSyntaxError: {self.message}",
            f"  Variable:   {self.variable}",
            f"  Constraint: {self.constraint}",
        ]
        if self.template is not None:
            parts.append(f"  Template:   {self.template}")
        return "\n".join(parts)


class UnknownStyleError(ConfigurationError):
    """Compiler style other than "path" or "host"."""
    pass

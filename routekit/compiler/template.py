"""
Template scanning.

A template is literal text with ``{name}`` placeholders::

    /{controller}/{action}/{id}
    {subdomain}.example.com
    /feeds/latest.{_format}

Placeholder names are ``[A-Za-z0-9_]+`` and unique within one template.
"""

import re
from dataclasses import dataclass
from typing import List

from ..diagnostics.errors import TemplateSyntaxError, TemplateSemanticError

PLACEHOLDER_RE = re.compile(r"\{([A-Za-z0-9_]+)\}")

# Variable that carries a file-format suffix ("/file.{_format}")
FORMAT_VARIABLE = "_format"


@dataclass(frozen=True)
class Placeholder:
    """A ``{name}`` slot and its position in the raw template."""
    name: str
    start: int
    end: int

    @property
    def token(self) -> str:
        return "{" + self.name + "}"

    def prev_char(self, template: str) -> str:
        return template[self.start - 1] if self.start > 0 else ""

    def next_char(self, template: str) -> str:
        return template[self.end] if self.end < len(template) else ""


def scan_placeholders(template: str) -> List[Placeholder]:
    """
    Find all placeholders, left to right.

    Raises:
        TemplateSyntaxError: a brace that is not part of a valid placeholder
        TemplateSemanticError: the same name used twice
    """
    placeholders: List[Placeholder] = []
    seen = set()
    pos = 0

    for match in PLACEHOLDER_RE.finditer(template):
        _check_literal(template, pos, match.start())
        name = match.group(1)
        if name in seen:
            raise TemplateSemanticError(
                f"Duplicate variable name: {name}",
                template=template,
                position=match.start(),
                suggestions=[f"Rename one of the {{{name}}} placeholders"],
            )
        seen.add(name)
        placeholders.append(Placeholder(name, match.start(), match.end()))
        pos = match.end()

    _check_literal(template, pos, len(template))
    return placeholders


def _check_literal(template: str, start: int, end: int):
    """Literal text between placeholders may not contain braces."""
    for i in range(start, end):
        char = template[i]
        if char == "{":
            raise TemplateSyntaxError(
                "Unbalanced '{' or invalid variable name",
                template=template,
                position=i,
                suggestions=["Variable names may only contain letters, digits and '_'"],
            )
        if char == "}":
            raise TemplateSyntaxError(
                "Unexpected '}' without matching '{'",
                template=template,
                position=i,
            )

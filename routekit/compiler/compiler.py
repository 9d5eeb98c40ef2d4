"""
Compiler that turns route templates into executable matchers and builders.
"""

import re
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple

from .template import FORMAT_VARIABLE, Placeholder, scan_placeholders
from ..diagnostics.errors import ConstraintSyntaxError, UnknownStyleError

logger = logging.getLogger("routekit.compiler")

# Case-insensitive, unicode (implicit for str patterns), "." spans newlines
MATCH_FLAGS = re.IGNORECASE | re.DOTALL


@dataclass
class CompiledTemplate:
    """A template compiled against a fixed set of defaults and constraints."""
    raw: str
    style: str
    regex: Pattern
    groups: Dict[str, str]
    placeholders: List[Placeholder]
    defaults: Dict[str, Any]
    constraints: Dict[str, str]
    requisites: Dict[str, Pattern]
    compiler: "TemplateCompiler" = field(repr=False, compare=False)

    @property
    def variables(self) -> List[str]:
        """Variable names in order of appearance."""
        return [p.name for p in self.placeholders]

    def match(self, subject: str) -> Optional[Dict[str, Any]]:
        """Match *subject*; returns the bindings or None."""
        return self.compiler.match(self, subject)

    def build(self, params: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """Substitute *params* into the template; returns None on failure."""
        return self.compiler.build(self, params)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "raw": self.raw,
            "style": self.style,
            "regex": self.regex.pattern,
            "variables": self.variables,
            "optional": [name for name in self.variables if name in self.defaults],
            "defaults": {k: v for k, v in self.defaults.items() if k in self.variables},
            "constraints": {k: v for k, v in self.constraints.items() if k in self.variables},
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


def _param_value(value: Any) -> Optional[str]:
    """None, False and "" all mean "not given"."""
    if value is None or value is False or value == "":
        return None
    return str(value)


class TemplateCompiler:
    """
    Base compiler. Subclasses fix the delimiter and the rules for which
    delimiter is swallowed together with an optional variable.
    """

    style: str = ""
    delimiter: str = ""
    default_requisite: str = ""

    def compile(
        self,
        template: str,
        defaults: Optional[Mapping[str, Any]] = None,
        constraints: Optional[Mapping[str, str]] = None,
    ) -> CompiledTemplate:
        """
        Compile *template*.

        Variables present in *defaults* become optional. *constraints* maps
        variable names to regex fragments restricting what they capture.

        Raises:
            TemplateSyntaxError: malformed placeholder
            TemplateSemanticError: duplicate variable
            ConstraintSyntaxError: invalid constraint regex
        """
        defaults = dict(defaults or {})
        constraints = dict(constraints or {})
        placeholders = scan_placeholders(template)

        parts: List[str] = []
        groups: Dict[str, str] = {}
        requisites: Dict[str, Pattern] = {}
        pos = 0

        for index, placeholder in enumerate(placeholders):
            # Generated group names keep digit-leading variables legal
            group = f"v{index}"
            groups[group] = placeholder.name

            capture = self._capture(template, placeholder, constraints)
            requisites[placeholder.name] = self._compile_requisite(
                template, placeholder.name, capture
            )

            fragment, absorb_before, absorb_after = self._fragment(
                template,
                placeholder,
                f"(?P<{group}>{capture})",
                placeholder.name in defaults,
            )
            parts.append(re.escape(template[pos:placeholder.start - absorb_before]))
            parts.append(fragment)
            pos = placeholder.end + absorb_after

        parts.append(re.escape(template[pos:]))
        source = self._finalize("".join(parts))

        try:
            regex = re.compile(source, MATCH_FLAGS)
        except re.error as e:
            # Constraints compiled fine alone but broke the whole expression
            raise ConstraintSyntaxError(
                f"Constraints produce an invalid expression: {e}",
                variable=", ".join(p.name for p in placeholders),
                constraint=source,
                template=template,
            ) from e

        logger.debug("Compiled %s template %r -> %s", self.style, template, source)

        return CompiledTemplate(
            raw=template,
            style=self.style,
            regex=regex,
            groups=groups,
            placeholders=placeholders,
            defaults=defaults,
            constraints=constraints,
            requisites=requisites,
            compiler=self,
        )

    def _capture(
        self,
        template: str,
        placeholder: Placeholder,
        constraints: Mapping[str, str],
    ) -> str:
        return constraints.get(placeholder.name, self.default_requisite)

    def _compile_requisite(self, template: str, name: str, capture: str) -> Pattern:
        try:
            return re.compile(f"(?:{capture})", MATCH_FLAGS)
        except re.error as e:
            raise ConstraintSyntaxError(
                f"Invalid constraint for '{name}': {e}",
                variable=name,
                constraint=capture,
                template=template,
            ) from e

    def _fragment(
        self,
        template: str,
        placeholder: Placeholder,
        named: str,
        optional: bool,
    ) -> Tuple[str, int, int]:
        """
        Regex for one placeholder.

        Returns (fragment, literal chars absorbed before, literal chars
        absorbed after).
        """
        if optional:
            return f"(?:{named})?", 0, 0
        return named, 0, 0

    def _finalize(self, source: str) -> str:
        return source

    def normalize_subject(self, subject: Optional[str]) -> str:
        return subject or ""

    def match(self, compiled: CompiledTemplate, subject: Optional[str]) -> Optional[Dict[str, Any]]:
        m = compiled.regex.fullmatch(self.normalize_subject(subject))
        if m is None:
            return None

        bindings = {
            name: compiled.defaults[name]
            for name in compiled.variables
            if name in compiled.defaults
        }
        for group, name in compiled.groups.items():
            value = m.group(group)
            if value:
                bindings[name] = value
        return bindings

    def build(
        self,
        compiled: CompiledTemplate,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """
        Build a concrete string from *params*.

        Placeholders are resolved right to left so a trailing delimiter left
        by an elided variable is trimmed before earlier ones are handled.
        A value equal to its default is elided wherever the matcher lets the
        variable be left out, otherwise the default text is kept.
        """
        params = params or {}
        result = compiled.raw

        for placeholder in reversed(compiled.placeholders):
            name = placeholder.name
            param = _param_value(params.get(name))
            default = None
            if name in compiled.defaults:
                default = "" if compiled.defaults[name] is None else str(compiled.defaults[name])

            if param is not None and not compiled.requisites[name].fullmatch(param):
                logger.debug("Cannot build %r: %s=%r violates its constraint", compiled.raw, name, param)
                return None

            if param is None and default is None:
                logger.debug("Cannot build %r: missing required variable %s", compiled.raw, name)
                return None

            elidable = self._elidable(compiled.raw, placeholder)
            if param is not None and param != default:
                replace = param
            elif elidable:
                replace = ""
            else:
                # The matcher still needs the surrounding text, keep the default
                replace = default

            head = result[:placeholder.start]
            tail = result[placeholder.end:]
            if not replace and elidable:
                head, tail = self._trim(placeholder, head, tail)
            result = head + replace + tail

        return self._normalize_built(result)

    def _elidable(self, template: str, placeholder: Placeholder) -> bool:
        """Whether a defaulted variable may be left out together with its delimiter."""
        return True

    def _trim(self, placeholder: Placeholder, head: str, tail: str) -> Tuple[str, str]:
        return head, tail

    def _normalize_built(self, result: str) -> str:
        """Collapse delimiters doubled by elided variables."""
        if not self.delimiter:
            return result
        return re.sub(re.escape(self.delimiter) + "{2,}", self.delimiter, result)


class PathCompiler(TemplateCompiler):
    """Compiler for "/"-delimited path templates."""

    style = "path"
    delimiter = "/"
    default_requisite = "[^/,;?<>]+"
    format_requisite = r"\w+"

    def _is_format(self, template: str, placeholder: Placeholder) -> bool:
        return placeholder.name == FORMAT_VARIABLE and placeholder.prev_char(template) == "."

    def _capture(self, template, placeholder, constraints):
        if self._is_format(template, placeholder):
            return constraints.get(placeholder.name, self.format_requisite)
        return super()._capture(template, placeholder, constraints)

    def _fragment(self, template, placeholder, named, optional):
        prev_char = placeholder.prev_char(template)
        next_char = placeholder.next_char(template)

        # ".{_format}" is one unit: the dot goes wherever the format goes
        if self._is_format(template, placeholder):
            fragment = r"\." + named
            return (f"(?:{fragment})?" if optional else fragment), 1, 0

        if not optional:
            return named, 0, 0

        # Whole "/segment" is optional
        if prev_char == "/" and (next_char == "/" or (next_char == "" and placeholder.start > 1)):
            return f"(?:/{named})?", 1, 0

        return f"(?:{named})?", 0, 0

    def _finalize(self, source: str) -> str:
        return "/?" + source

    def normalize_subject(self, subject):
        return "/" + (subject or "").strip("/")

    def _trim(self, placeholder, head, tail):
        if placeholder.name == FORMAT_VARIABLE and head.endswith("."):
            head = head[:-1]
        elif not tail:
            head = head.rstrip(self.delimiter)
        return head, tail

    def _normalize_built(self, result):
        return "/" + super()._normalize_built(result).strip(self.delimiter)


class HostCompiler(TemplateCompiler):
    """Compiler for "."-delimited host templates."""

    style = "host"
    delimiter = "."
    default_requisite = "[^.,;?<>]+"

    def _fragment(self, template, placeholder, named, optional):
        if not optional:
            return named, 0, 0

        # Whole "label." is optional
        if self._elidable(template, placeholder):
            return f"(?:{named}\\.)?", 0, 1

        return f"(?:{named})?", 0, 0

    def _elidable(self, template, placeholder):
        return placeholder.next_char(template) == "." and placeholder.prev_char(template) in ("", ".")

    def normalize_subject(self, subject):
        return (subject or "").strip()

    def _trim(self, placeholder, head, tail):
        # The label's trailing dot goes with it
        if tail.startswith(self.delimiter):
            tail = tail[1:]
        return head, tail


_COMPILERS: Dict[str, TemplateCompiler] = {
    PathCompiler.style: PathCompiler(),
    HostCompiler.style: HostCompiler(),
}


def get_compiler(style: str) -> TemplateCompiler:
    """Return the shared compiler for *style* ("path" or "host")."""
    try:
        return _COMPILERS[style]
    except KeyError:
        raise UnknownStyleError(
            f"Unknown template style {style!r}",
            suggestions=[f"Use one of: {', '.join(sorted(_COMPILERS))}"],
        ) from None

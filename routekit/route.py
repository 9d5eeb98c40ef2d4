"""
Route Class
A path template with optional host, scheme and method gates.
"""

import logging
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union
from urllib.parse import urlsplit

from .cache import compile_template
from .compiler.compiler import CompiledTemplate
from .diagnostics.errors import ConfigurationError

logger = logging.getLogger("routekit.route")

SCHEMES = ("http", "https")


class PathType(str, Enum):
    """Which parts of the URL ``Route.build()`` produces."""

    # Full URL if _host and _scheme are given, network path if only
    # _host is given, path otherwise
    AUTO = "auto"
    # /foo/bar
    ONLY = "path"
    # http://example.com/foo/bar
    FULL = "full"
    # //example.com/foo/bar
    NETWORK = "network"


class Route:
    """
    Route with fluent API.

    Usage:
        route = Route("/{controller}/{action}/{id}", {"action": "index", "id": ""})
        route.set_constraint("id", r"\\d+").set_method("GET|POST").set_host("{lang}.example.com")

        route.match("/users/edit/3", "GET", "en.example.com", "https")
        # {"controller": "users", "action": "edit", "id": "3", ...}

        route.build({"controller": "users"})
        # "/users"

    ``match()`` and ``build()`` never change the route; results are
    returned by value and ``None`` means no match / cannot build.
    """

    def __init__(
        self,
        path: Optional[str] = "/",
        defaults: Optional[Mapping[str, Any]] = None,
        constraints: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize a Route instance

        Args:
            path: Path template, e.g. "/{controller}/{action}/{id}"
            defaults: Default values; variables with a default are optional
            constraints: Regex fragments per variable, e.g. {"id": r"\\d+"}
        """
        self._path = "/"
        self._host: Optional[str] = None
        self._scheme: Optional[str] = None
        self._method: Optional[str] = None
        self._methods: FrozenSet[str] = frozenset()
        self._defaults: Dict[str, Any] = {}
        self._constraints: Dict[str, str] = {}
        self._compiled_path: Optional[CompiledTemplate] = None
        self._compiled_host: Optional[CompiledTemplate] = None

        self._update(
            path=self._normalize_path(path),
            defaults=dict(defaults or {}),
            constraints=dict(constraints or {}),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Route":
        """
        Create a route from a mapping.

        Keys: path, defaults, constraints, host, scheme, method.
        """
        route = cls(
            data.get("path", "/"),
            data.get("defaults"),
            data.get("constraints"),
        )
        route.set_host(data.get("host"))
        route.set_scheme(data.get("scheme"))
        route.set_method(data.get("method"))
        return route

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self._path,
            "host": self._host,
            "scheme": self._scheme,
            "method": self._method,
            "defaults": dict(self._defaults),
            "constraints": dict(self._constraints),
        }

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def _update(self, **state) -> "Route":
        """
        Apply new settings and recompile.

        Nothing is changed if compilation fails, so configuration errors
        surface here and the route stays usable.
        """
        path = state.get("path", self._path)
        host = state.get("host", self._host)
        defaults = state.get("defaults", self._defaults)
        constraints = state.get("constraints", self._constraints)

        compiled_path = compile_template(path, "path", defaults, constraints)
        compiled_host = None
        if host:
            compiled_host = compile_template(host, "host", defaults, constraints)

        self._path = path
        self._host = host
        self._defaults = defaults
        self._constraints = constraints
        self._compiled_path = compiled_path
        self._compiled_host = compiled_host
        return self

    @staticmethod
    def _normalize_path(path: Optional[str]) -> str:
        if not path:
            return "/"
        # Keep only the path of a URL ("/home?page=2" -> "/home")
        path = urlsplit(str(path)).path
        return "/" + path.strip("/")

    def get_compiled_path(self) -> CompiledTemplate:
        return self._compiled_path

    def get_compiled_host(self) -> Optional[CompiledTemplate]:
        return self._compiled_host

    @property
    def variables(self) -> list:
        """Variable names of the host template followed by the path template."""
        names = list(self._compiled_host.variables) if self._compiled_host else []
        return names + [n for n in self._compiled_path.variables if n not in names]

    # ------------------------------------------------------------------
    # Setters (chainable)
    # ------------------------------------------------------------------

    def set_path(self, path: Optional[str]) -> "Route":
        """
        Set the path template.

        Args:
            path: Path template; always stored with a leading slash and
                without a trailing one

        Returns:
            Self for method chaining
        """
        return self._update(path=self._normalize_path(path))

    def set_host(self, host: Optional[str]) -> "Route":
        """
        Set the host template, e.g. "{subdomain}.example.com".

        Args:
            host: Host template; None or "" matches any host. Only the
                network location of a URL is kept
                ("example.com/users" -> "example.com").

        Returns:
            Self for method chaining
        """
        host = (host or "").strip()
        if host:
            host = urlsplit(host if "://" in host else "//" + host).netloc
        return self._update(host=host or None)

    def set_scheme(self, scheme: Optional[str]) -> "Route":
        """
        Set the expected scheme: "http", "https" or None for any.

        Raises:
            ConfigurationError: any other scheme
        """
        scheme = (scheme or "").strip().lower() or None
        if scheme is not None and scheme not in SCHEMES:
            raise ConfigurationError(
                f"Unsupported scheme {scheme!r}",
                suggestions=["Use 'http', 'https' or None for any scheme"],
            )
        self._scheme = scheme
        return self

    def set_method(self, method: Optional[str]) -> "Route":
        """
        Set accepted request methods.

        Args:
            method: "GET", "get|post" etc.; None or "" accepts any method

        Returns:
            Self for method chaining
        """
        method = (method or "").strip().upper() or None
        self._method = method
        self._methods = frozenset(
            token.strip() for token in (method or "").split("|") if token.strip()
        )
        return self

    def set_defaults(self, defaults: Optional[Mapping[str, Any]]) -> "Route":
        """Replace all default values."""
        return self._update(defaults=dict(defaults or {}))

    def set_default(self, key: str, value: Any) -> "Route":
        """Set one default value, making the variable optional."""
        return self._update(defaults={**self._defaults, key: value})

    def set_constraints(self, constraints: Optional[Mapping[str, str]]) -> "Route":
        """
        Replace all constraints.

        Usage:
            route.set_constraints({"lang": "en|bg", "id": r"\\d+"})
        """
        return self._update(constraints=dict(constraints or {}))

    def set_constraint(self, key: str, value: str) -> "Route":
        """Set the regex fragment a variable must match."""
        return self._update(constraints={**self._constraints, key: value})

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    def get_path(self) -> str:
        return self._path

    def get_host(self) -> Optional[str]:
        """Host template, None means any host."""
        return self._host

    def get_scheme(self) -> Optional[str]:
        """Expected scheme, None means any scheme."""
        return self._scheme

    def get_method(self) -> Optional[str]:
        """Accepted methods as "GET|POST", None means any method."""
        return self._method

    def get_defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def get_default(self, key: str) -> Any:
        """Default value for *key*, None if no default is set."""
        return self._defaults.get(key)

    def has_default(self, key: str) -> bool:
        return key in self._defaults

    def get_constraints(self) -> Dict[str, str]:
        return dict(self._constraints)

    def get_constraint(self, key: str) -> Optional[str]:
        """Constraint for *key*, None if no constraint is set."""
        return self._constraints.get(key)

    def has_constraint(self, key: str) -> bool:
        return key in self._constraints

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match(
        self,
        path: str,
        method: Optional[str] = "GET",
        host: Optional[str] = "",
        scheme: Optional[str] = "",
    ) -> Optional[Dict[str, Any]]:
        """
        Match a request against the route.

        Args:
            path: Request path, "/users/3"
            method: "GET", "POST", etc.
            host: "example.com"
            scheme: "http" or "https"

        Returns:
            Defaults merged with captured variables, or None if any of
            method, path, host or scheme does not match
        """
        if not self.match_method(method):
            return None

        path_vars = self._compiled_path.match(path)
        if path_vars is None:
            return None

        bindings = dict(self._defaults)
        bindings.update(path_vars)

        if self._compiled_host is not None:
            host_vars = self._compiled_host.match(host)
            if host_vars is None:
                return None
            bindings.update(host_vars)

        if not self.match_scheme(scheme):
            return None

        return bindings

    def match_path(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Bindings for the path variables, or None.

        A template without variables matches with ``{}``, which is falsy:
        test the result with ``is None`` or use ``matches_path()``.
        """
        return self._compiled_path.match(path)

    def match_host(self, host: str) -> Optional[Dict[str, Any]]:
        """
        Bindings for the host variables, or None.

        Gives ``{}`` when any host is accepted; test the result with
        ``is None`` or use ``matches_host()``.
        """
        if self._compiled_host is None:
            return {}
        return self._compiled_host.match(host)

    def matches_path(self, path: str) -> bool:
        return self.match_path(path) is not None

    def matches_host(self, host: str) -> bool:
        return self.match_host(host) is not None

    def match_method(self, method: Optional[str]) -> bool:
        if not self._methods:
            return True
        return (method or "").strip().upper() in self._methods

    def match_scheme(self, scheme: Optional[str]) -> bool:
        if not self._scheme:
            return True
        scheme = (scheme or "").strip().lower()
        if scheme.endswith("://"):
            scheme = scheme[:-3]
        return scheme == self._scheme

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build(
        self,
        params: Optional[Mapping[str, Any]] = None,
        path_type: Union[PathType, str] = PathType.AUTO,
    ) -> Optional[str]:
        """
        Build a URL from *params*.

        Values equal to their defaults are left out, making shorter URLs.
        The pseudo parameters "_host" and "_scheme" override the route's
        host and scheme when a network or full URL is produced.

        Returns:
            The URL, or None when a required variable is missing or a value
            violates its constraint

        Raises:
            ConfigurationError: *path_type* is not a PathType value
        """
        params = dict(params or {})
        try:
            path_type = PathType(path_type)
        except ValueError:
            raise ConfigurationError(
                f"Unknown path type {path_type!r}",
                suggestions=[f"Use one of: {', '.join(t.value for t in PathType)}"],
            ) from None

        path = self._compiled_path.build(params)
        if path is None:
            return None

        if path_type is PathType.AUTO:
            if params.get("_host"):
                path_type = PathType.FULL if params.get("_scheme") else PathType.NETWORK
            else:
                path_type = PathType.ONLY

        if path_type is PathType.ONLY:
            return path

        if params.get("_host"):
            host = str(params["_host"])
        elif self._compiled_host is not None:
            host = self._compiled_host.build(params)
            if host is None:
                logger.debug("Cannot build host %r for %r", self._host, self._path)
                return None
        else:
            return path

        if not host:
            return path

        url = f"//{host}{path}"
        if path_type is PathType.FULL:
            scheme = params.get("_scheme") or self._scheme
            if scheme:
                url = f"{str(scheme).rstrip(':/')}:{url}"
        return url

    def __repr__(self) -> str:
        methods_str = self._method or "ANY"
        host_str = f"{self._scheme + '://' if self._scheme else ''}{self._host or ''}"
        return f"<Route [{methods_str}] {host_str}{self._path}>"

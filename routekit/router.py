"""
Router - tries named routes in registration order.

Matching keeps no state on the router: the first match carries a cursor
over the remaining candidates, so "continue matching" works per request.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .collection import RouteCollection
from .route import PathType, Route

logger = logging.getLogger("routekit.router")


@dataclass(frozen=True)
class RouteMatch:
    """Result of a successful route match."""
    name: str
    route: Route
    params: Dict[str, Any]
    cursor: "MatchCursor" = field(repr=False, compare=False)

    def as_dict(self) -> Dict[str, Any]:
        """Bindings with the route name under "_name"."""
        return {"_name": self.name, **self.params}

    def next(self) -> Optional["RouteMatch"]:
        """Continue with the routes after this one."""
        return self.cursor.next()


class MatchCursor:
    """
    Iterator over all routes matching one request.

    Candidates are snapshotted when the cursor is created, so later
    changes to the router do not affect it.
    """

    def __init__(
        self,
        candidates: List[Tuple[str, Route]],
        path: str,
        method: Optional[str] = "GET",
        host: Optional[str] = "",
        scheme: Optional[str] = "",
    ):
        self.path = path
        self.method = method
        self.host = host
        self.scheme = scheme
        self._candidates = candidates
        self._position = 0

    @property
    def remaining(self) -> int:
        """Number of routes not tried yet."""
        return len(self._candidates) - self._position

    def next(self) -> Optional[RouteMatch]:
        """Next matching route, or None when exhausted."""
        while self._position < len(self._candidates):
            name, route = self._candidates[self._position]
            self._position += 1
            params = route.match(self.path, self.method, self.host, self.scheme)
            if params is not None:
                logger.debug("Route %r matched %s %s", name, self.method, self.path)
                return RouteMatch(name=name, route=route, params=params, cursor=self)
        return None

    def __iter__(self):
        return self

    def __next__(self) -> RouteMatch:
        result = self.next()
        if result is None:
            raise StopIteration
        return result


class Router(RouteCollection):
    """
    Route collection with request dispatch and URL building.

    Usage:
        router = Router()
        router.add("article", Route("/show/{title}"))
        match = router.match("/show/hello", "GET", "example.com", "https")
        match.name, match.params   # "article", {"title": "hello"}
        router.build("article", {"title": "hello"})   # "/show/hello"
    """

    def iter_matches(
        self,
        path: str,
        method: Optional[str] = "GET",
        host: Optional[str] = "",
        scheme: Optional[str] = "",
    ) -> MatchCursor:
        """Cursor over every route that matches the request, in order."""
        return MatchCursor(list(self), path, method, host, scheme)

    def match(
        self,
        path: str,
        method: Optional[str] = "GET",
        host: Optional[str] = "",
        scheme: Optional[str] = "",
    ) -> Optional[RouteMatch]:
        """
        First route that matches the request.

        Returns:
            RouteMatch (call ``.next()`` on it to keep matching), or None
        """
        result = self.iter_matches(path, method, host, scheme).next()
        if result is None:
            logger.debug("No route matches %s %s (host=%r, scheme=%r)", method, path, host, scheme)
        return result

    def build(
        self,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        path_type: Union[PathType, str] = PathType.AUTO,
    ) -> Optional[str]:
        """
        Build a URL for the route *name*.

        Returns:
            URL, or None if the route is unknown or cannot be built
        """
        route = self.get(name)
        if route is None:
            logger.debug("Cannot build unknown route %r", name)
            return None
        return route.build(params, path_type)

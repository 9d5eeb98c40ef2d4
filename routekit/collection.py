"""
Ordered collection of named routes.
"""

from collections import OrderedDict
from typing import Dict, Iterator, Optional, Tuple

from .route import Route


class RouteCollection:
    """
    Named routes kept in registration order.

    Usage:
        routes = RouteCollection()
        routes.add("home", Route("/")).add("article", Route("/show/{title}"))
        routes.get("home")
    """

    def __init__(self):
        self._routes: "OrderedDict[str, Route]" = OrderedDict()

    def add(self, name: str, route: Route) -> "RouteCollection":
        """Add a route to the end of the list, replacing one with the same name."""
        self._routes.pop(name, None)
        self._routes[name] = route
        return self

    def set(self, name: str, route: Route) -> "RouteCollection":
        """Replace a route in place, or add it to the end if the name is new."""
        self._routes[name] = route
        return self

    def get(self, name: str) -> Optional[Route]:
        return self._routes.get(name)

    def has(self, name: str) -> bool:
        return name in self._routes

    def delete(self, name: str) -> "RouteCollection":
        self._routes.pop(name, None)
        return self

    def flush(self) -> "RouteCollection":
        """Remove all routes."""
        self._routes.clear()
        return self

    def all(self) -> Dict[str, Route]:
        return dict(self._routes)

    def count(self) -> int:
        return len(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, name: str) -> bool:
        return name in self._routes

    def __iter__(self) -> Iterator[Tuple[str, Route]]:
        return iter(list(self._routes.items()))

"""
Shared fixtures for the routekit test suite.
"""

import pytest

from routekit import Route
from routekit.cache import TemplateCache, set_global_cache


@pytest.fixture(autouse=True)
def template_cache():
    """Fresh global template cache for every test."""
    cache = TemplateCache()
    set_global_cache(cache)
    yield cache
    set_global_cache(None)


@pytest.fixture
def mvc_route():
    """The classic /{controller}/{action}/{param} route."""
    return Route(
        "/{controller}/{action}/{param}",
        {"controller": "home", "action": "index", "param": ""},
    )

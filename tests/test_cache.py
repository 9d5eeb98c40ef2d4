"""
Tests for the compiled template cache.
"""

import pytest

from routekit import Route
from routekit.cache import TemplateCache, compile_template, get_global_cache
from routekit.diagnostics.errors import TemplateSyntaxError


class TestTemplateCache:
    """Test TemplateCache."""

    def setup_method(self):
        self.cache = TemplateCache(max_size=2)

    def test_miss_then_hit(self):
        first = self.cache.compile_with_cache("/show/{slug}")
        second = self.cache.compile_with_cache("/show/{slug}")

        assert first is second
        stats = self.cache.get_stats()
        assert stats.misses == 1
        assert stats.hits == 1
        assert stats.hit_rate == 0.5

    def test_key_includes_style_defaults_and_constraints(self):
        base = self.cache.compile_with_cache("{lang}")

        assert self.cache.compile_with_cache("{lang}", "host") is not base
        assert self.cache.compile_with_cache("{lang}", defaults={"lang": "en"}) is not base
        assert self.cache.compile_with_cache("{lang}", constraints={"lang": "en"}) is not base

    def test_lru_eviction(self):
        self.cache.compile_with_cache("/a")
        self.cache.compile_with_cache("/b")
        # Touch /a so /b is the least recently used
        self.cache.compile_with_cache("/a")
        self.cache.compile_with_cache("/c")

        assert len(self.cache) == 2
        assert "/a" in self.cache
        assert "/b" not in self.cache
        assert "/c" in self.cache
        assert self.cache.get_stats().evictions == 1

    def test_ttl(self):
        cache = TemplateCache(ttl=-1)
        first = cache.compile_with_cache("/a")

        assert cache.compile_with_cache("/a") is not first
        assert cache.get_stats().evictions == 1

    def test_errors_counted_and_raised(self):
        with pytest.raises(TemplateSyntaxError):
            self.cache.compile_with_cache("/{a")

        assert self.cache.get_stats().errors == 1
        assert len(self.cache) == 0

    def test_invalidate(self):
        self.cache.compile_with_cache("/a")
        self.cache.compile_with_cache("/b", defaults={"x": 1})

        self.cache.invalidate("/b", defaults={"x": 1})
        assert len(self.cache) == 1

        self.cache.invalidate()
        assert len(self.cache) == 0

    def test_disabled(self):
        with self.cache.disabled():
            self.cache.compile_with_cache("/a")
            assert len(self.cache) == 0

        assert self.cache.max_size == 2
        self.cache.compile_with_cache("/a")
        assert len(self.cache) == 1

    def test_put_records_compile_time(self):
        compiled = compile_template("/a", use_cache=False)
        self.cache.put(compiled, 0.25)

        assert "/a" in self.cache
        assert self.cache.get_stats().total_compile_time == 0.25

    def test_reset_stats(self):
        self.cache.compile_with_cache("/a")
        self.cache.reset_stats()

        assert self.cache.get_stats().to_dict()["misses"] == 0


class TestGlobalCache:
    """Test the module-level cache used by routes."""

    def test_fixture_installs_cache(self, template_cache):
        assert get_global_cache() is template_cache

    def test_compile_template(self, template_cache):
        compiled = compile_template("/show/{slug}")

        assert compile_template("/show/{slug}") is compiled
        assert compile_template("/show/{slug}", use_cache=False) is not compiled
        assert "/show/{slug}" in template_cache

    def test_routes_share_compiled_templates(self):
        first = Route("/show/{slug}", {"slug": "index"})
        second = Route("/show/{slug}", {"slug": "index"})

        assert first.get_compiled_path() is second.get_compiled_path()

"""
Caching layer for compiled templates.

Provides:
- Thread-safe LRU cache with TTL
- Template fingerprinting for cache keys
- Cache statistics
"""

import threading
import time
import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, Mapping
from collections import OrderedDict
from contextlib import contextmanager

from .compiler.compiler import CompiledTemplate, get_compiler

logger = logging.getLogger("routekit.cache")


@dataclass
class CacheStats:
    """Cache statistics for monitoring."""
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    errors: int = 0
    total_compile_time: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Export stats as dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "errors": self.errors,
            "total_compile_time": self.total_compile_time,
            "hit_rate": self.hit_rate,
        }


@dataclass
class CacheEntry:
    """Cache entry with metadata."""
    compiled: CompiledTemplate
    created_at: float

    def is_expired(self, ttl: Optional[float]) -> bool:
        """Check if entry has expired."""
        if ttl is None:
            return False
        return time.time() - self.created_at > ttl


class TemplateCache:
    """Thread-safe LRU cache for compiled templates with TTL support."""

    def __init__(
        self,
        max_size: int = 1000,
        ttl: Optional[float] = None,
        enable_stats: bool = True,
    ):
        """
        Initialize template cache.

        Args:
            max_size: Maximum number of templates to cache
            ttl: Time-to-live in seconds (None = no expiration)
            enable_stats: Enable statistics collection
        """
        self.max_size = max_size
        self.ttl = ttl
        self.enable_stats = enable_stats

        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    def _fingerprint(
        self,
        template: str,
        style: str = "path",
        defaults: Optional[Mapping[str, Any]] = None,
        constraints: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Generate cache key from the template and everything that affects
        its compilation.
        """
        defaults = sorted((k, repr(v)) for k, v in (defaults or {}).items())
        constraints = sorted((constraints or {}).items())
        cache_input = f"{style}:{template}:{defaults}:{constraints}"
        return hashlib.sha256(cache_input.encode()).hexdigest()[:16]

    def get(
        self,
        template: str,
        style: str = "path",
        defaults: Optional[Mapping[str, Any]] = None,
        constraints: Optional[Mapping[str, str]] = None,
    ) -> Optional[CompiledTemplate]:
        """
        Get compiled template from cache.

        Returns:
            Compiled template or None if not cached
        """
        key = self._fingerprint(template, style, defaults, constraints)

        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                if self.enable_stats:
                    self._stats.misses += 1
                return None

            if entry.is_expired(self.ttl):
                del self._cache[key]
                if self.enable_stats:
                    self._stats.evictions += 1
                    self._stats.misses += 1
                return None

            # Update LRU order
            self._cache.move_to_end(key)

            if self.enable_stats:
                self._stats.hits += 1

            return entry.compiled

    def put(
        self,
        compiled: CompiledTemplate,
        compile_time: float = 0.0,
    ):
        """
        Store compiled template in cache.

        Args:
            compiled: Compiled template
            compile_time: Time taken to compile (seconds), added to the stats
        """
        key = self._fingerprint(
            compiled.raw, compiled.style, compiled.defaults, compiled.constraints
        )
        now = time.time()

        with self._lock:
            if self.enable_stats:
                self._stats.total_compile_time += compile_time

            if self.max_size <= 0:
                return

            # Evict LRU if at capacity
            if len(self._cache) >= self.max_size and key not in self._cache:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug("Evicted template %s from cache", evicted)
                if self.enable_stats:
                    self._stats.evictions += 1

            self._cache[key] = CacheEntry(
                compiled=compiled,
                created_at=now,
            )
            self._cache.move_to_end(key)

    def compile_with_cache(
        self,
        template: str,
        style: str = "path",
        defaults: Optional[Mapping[str, Any]] = None,
        constraints: Optional[Mapping[str, str]] = None,
    ) -> CompiledTemplate:
        """
        Compile template with caching.

        This is the main API for cached compilation.

        Raises:
            ConfigurationError: Invalid template, constraint or style
        """
        cached = self.get(template, style, defaults, constraints)
        if cached is not None:
            return cached

        start_time = time.time()

        try:
            compiled = get_compiler(style).compile(template, defaults, constraints)
        except Exception:
            if self.enable_stats:
                with self._lock:
                    self._stats.errors += 1
            raise

        compile_time = time.time() - start_time
        self.put(compiled, compile_time)

        return compiled

    def invalidate(self, template: Optional[str] = None, style: str = "path", **kwargs):
        """
        Invalidate cache entries.

        Args:
            template: Specific template to invalidate (None = clear all)
            style: Style the template was compiled with
            **kwargs: defaults / constraints used for the entry
        """
        with self._lock:
            if template is None:
                self._cache.clear()
            else:
                key = self._fingerprint(template, style, **kwargs)
                self._cache.pop(key, None)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                errors=self._stats.errors,
                total_compile_time=self._stats.total_compile_time,
            )

    def reset_stats(self):
        """Reset statistics counters."""
        with self._lock:
            self._stats = CacheStats()

    @contextmanager
    def disabled(self):
        """Context manager to temporarily disable cache."""
        old_size = self.max_size
        self.max_size = 0
        try:
            yield
        finally:
            self.max_size = old_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, template: str) -> bool:
        """Check if a path template without defaults/constraints is cached."""
        key = self._fingerprint(template)
        with self._lock:
            return key in self._cache


# Global cache instance
_global_cache: Optional[TemplateCache] = None


def get_global_cache() -> TemplateCache:
    """Get or create global cache instance."""
    global _global_cache
    if _global_cache is None:
        _global_cache = TemplateCache()
    return _global_cache


def set_global_cache(cache: Optional[TemplateCache]):
    """Set global cache instance."""
    global _global_cache
    _global_cache = cache


def compile_template(
    template: str,
    style: str = "path",
    defaults: Optional[Mapping[str, Any]] = None,
    constraints: Optional[Mapping[str, str]] = None,
    use_cache: bool = True,
) -> CompiledTemplate:
    """
    Convenience function to compile templates with optional caching.

    Args:
        template: Template string
        style: "path" or "host"
        defaults: Default values (make variables optional)
        constraints: Regex fragments per variable
        use_cache: Whether to use global cache
    """
    if use_cache:
        return get_global_cache().compile_with_cache(template, style, defaults, constraints)
    return get_compiler(style).compile(template, defaults, constraints)

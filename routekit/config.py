"""
Config system - layered configuration for route tables.

A config file lists named routes plus a few runtime settings::

    routes:
      home:
        path: /
      mvc:
        path: /{controller}/{action}/{id}
        defaults: {controller: home, action: index, id: ""}
        constraints: {id: '\\d+'}
        method: GET|POST
      localized:
        path: /docs/{page}
        host: "{lang}.example.com"
        scheme: https
        defaults: {lang: en}
    cache:
      max_size: 512
    logging:
      level: INFO
"""

import os
import json
import logging
from glob import glob
from pathlib import Path
from typing import Any, Dict, Optional

from .cache import TemplateCache, set_global_cache
from .diagnostics.errors import ConfigurationError
from .route import Route
from .router import Router

logger = logging.getLogger("routekit.config")

DEFAULTS: Dict[str, Any] = {
    "routes": {},
    "cache": {"max_size": 1000, "ttl": None},
    "logging": {"level": "WARNING"},
}


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or applied."""
    pass


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "ROUTEKIT_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = json.loads(json.dumps(DEFAULTS))

    @classmethod
    def load(
        cls,
        paths: Optional[list] = None,
        env_prefix: str = "ROUTEKIT_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Merge order (later overrides earlier):
        1. Built-in defaults
        2. Config files (YAML or JSON, glob patterns supported)
        3. .env file entries starting with the prefix
        4. Environment variables starting with the prefix
        5. Manual overrides

        Args:
            paths: List of config file paths
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matched = sorted(glob(pattern))
        if not matched:
            raise ConfigError(f"Config file not found: {pattern}")

        for path_str in matched:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigError(f"Unsupported config file type: {path}")

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        self._merge_file_data(path, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        self._merge_file_data(path, data)

    def _merge_file_data(self, path: Path, data: Any):
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(f"Top level of {path} must be a mapping")
        logger.debug("Loaded config file %s", path)
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        env_path = Path(path)
        if not env_path.exists():
            return

        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip('"').strip("'")

                    if key.startswith(self.env_prefix):
                        self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert ROUTEKIT_CACHE__MAX_SIZE to nested dict."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def to_dict(self) -> dict:
        return self.config_data


def configure_cache(loader: ConfigLoader) -> TemplateCache:
    """Install a global template cache sized from config."""
    try:
        max_size = int(loader.get("cache.max_size", 1000))
        ttl = loader.get("cache.ttl")
        ttl = float(ttl) if ttl is not None else None
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid cache settings: {e}") from e

    cache = TemplateCache(max_size=max_size, ttl=ttl)
    set_global_cache(cache)
    return cache


def load_router(loader: ConfigLoader, router: Optional[Router] = None) -> Router:
    """
    Build a Router from the "routes" section, in file order.

    Raises:
        ConfigError: a route entry is malformed or its template is invalid
    """
    router = router if router is not None else Router()
    configure_cache(loader)

    routes = loader.get("routes") or {}
    if not isinstance(routes, dict):
        raise ConfigError("'routes' must be a mapping of name to route")

    for name, data in routes.items():
        if isinstance(data, str):
            data = {"path": data}
        if not isinstance(data, dict):
            raise ConfigError(f"Route {name!r} must be a mapping or a path string")
        try:
            router.add(name, Route.from_dict(data))
        except ConfigurationError as e:
            raise ConfigError(f"Route {name!r}: {e.format()}") from e

    logger.debug("Loaded %d routes", len(router))
    return router

"""
Tests for configuration loading and router construction.
"""

import json
import textwrap

import pytest

from routekit import Route, Router
from routekit.cache import get_global_cache
from routekit.config import ConfigError, ConfigLoader, load_router

ROUTES_YAML = textwrap.dedent(r"""
    routes:
      home: /
      article:
        path: /show/{title}
        method: GET
      mvc:
        path: /{controller}/{action}/{id}
        defaults: {controller: home, action: index, id: ""}
        constraints: {id: '\d+'}
      localized:
        path: /docs/{page}
        host: "{lang}.example.com"
        scheme: https
        defaults: {lang: en}
    cache:
      max_size: 64
    logging:
      level: INFO
""")


@pytest.fixture
def routes_file(tmp_path):
    path = tmp_path / "routes.yaml"
    path.write_text(ROUTES_YAML)
    return str(path)


class TestConfigLoader:
    """Test layered config loading."""

    def test_defaults(self):
        loader = ConfigLoader.load()

        assert loader.get("routes") == {}
        assert loader.get("cache.max_size") == 1000
        assert loader.get("cache.ttl") is None
        assert loader.get("logging.level") == "WARNING"

    def test_yaml_file(self, routes_file):
        loader = ConfigLoader.load(paths=[routes_file])

        assert list(loader.get("routes")) == ["home", "article", "mvc", "localized"]
        assert loader.get("routes.mvc.constraints.id") == r"\d+"
        assert loader.get("cache.max_size") == 64
        assert loader.get("missing.key", "fallback") == "fallback"

    def test_json_file(self, tmp_path):
        path = tmp_path / "routes.json"
        path.write_text(json.dumps({"routes": {"home": {"path": "/"}}}))

        loader = ConfigLoader.load(paths=[str(path)])
        assert loader.get("routes.home.path") == "/"

    def test_later_files_win(self, tmp_path, routes_file):
        override = tmp_path / "override.json"
        override.write_text(json.dumps({"cache": {"ttl": 30}}))

        loader = ConfigLoader.load(paths=[routes_file, str(override)])

        assert loader.get("cache.max_size") == 64
        assert loader.get("cache.ttl") == 30

    def test_glob_pattern(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps({"routes": {"a": "/a"}}))
        (tmp_path / "b.json").write_text(json.dumps({"routes": {"b": "/b"}}))

        loader = ConfigLoader.load(paths=[str(tmp_path / "*.json")])
        assert list(loader.get("routes")) == ["a", "b"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader.load(paths=[str(tmp_path / "missing.yaml")])

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "routes.toml"
        path.write_text("")

        with pytest.raises(ConfigError, match="Unsupported"):
            ConfigLoader.load(paths=[str(path)])

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "routes.yaml"
        path.write_text("routes: [unclosed\n")

        with pytest.raises(ConfigError, match="Cannot read"):
            ConfigLoader.load(paths=[str(path)])

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "routes.json"
        path.write_text('{"routes": ')

        with pytest.raises(ConfigError, match="Cannot read"):
            ConfigLoader.load(paths=[str(path)])

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "routes.yaml"
        path.write_text("- /\n- /about\n")

        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader.load(paths=[str(path)])

    def test_environment(self, monkeypatch, routes_file):
        monkeypatch.setenv("ROUTEKIT_CACHE__MAX_SIZE", "128")
        monkeypatch.setenv("ROUTEKIT_LOGGING__LEVEL", "DEBUG")

        loader = ConfigLoader.load(paths=[routes_file])

        assert loader.get("cache.max_size") == 128
        assert loader.get("logging.level") == "DEBUG"

    def test_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# settings\n"
            "ROUTEKIT_CACHE__TTL=2.5\n"
            'ROUTEKIT_LOGGING__LEVEL="ERROR"\n'
            "OTHER_SETTING=1\n"
        )
        monkeypatch.setenv("ROUTEKIT_LOGGING__LEVEL", "INFO")

        loader = ConfigLoader.load(env_file=str(env_file))

        assert loader.get("cache.ttl") == 2.5
        # Real environment beats .env
        assert loader.get("logging.level") == "INFO"
        assert loader.get("other_setting") is None

    def test_missing_env_file_is_ignored(self, tmp_path):
        loader = ConfigLoader.load(env_file=str(tmp_path / ".env"))
        assert loader.get("cache.max_size") == 1000

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("ROUTEKIT_CACHE__MAX_SIZE", "128")

        loader = ConfigLoader.load(overrides={"cache": {"max_size": 8}})
        assert loader.get("cache.max_size") == 8

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("ROUTES_CACHE__MAX_SIZE", "16")

        loader = ConfigLoader.load(env_prefix="ROUTES_")
        assert loader.get("cache.max_size") == 16

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("no", False),
        ("42", 42),
        ("0.5", 0.5),
        ('{"a": 1}', {"a": 1}),
        ("[1, 2]", [1, 2]),
        ("GET|POST", "GET|POST"),
    ])
    def test_parse_value(self, raw, expected):
        assert ConfigLoader()._parse_value(raw) == expected


class TestLoadRouter:
    """Test building a Router from config."""

    def test_routes_in_file_order(self, routes_file):
        router = load_router(ConfigLoader.load(paths=[routes_file]))

        assert isinstance(router, Router)
        assert [name for name, _ in router] == ["home", "article", "mvc", "localized"]

    def test_routes_are_configured(self, routes_file):
        router = load_router(ConfigLoader.load(paths=[routes_file]))

        assert router.get("home").get_path() == "/"
        assert router.get("article").get_method() == "GET"
        assert router.get("mvc").get_constraint("id") == r"\d+"

        localized = router.get("localized")
        assert localized.get_host() == "{lang}.example.com"
        assert localized.get_scheme() == "https"

    def test_loaded_router_matches(self, routes_file):
        router = load_router(ConfigLoader.load(paths=[routes_file]))

        assert router.match("/users/edit/3").params == {
            "controller": "users",
            "action": "edit",
            "id": "3",
        }
        assert router.build("localized", {"page": "intro", "lang": "bg"}, "full") == "https://bg.example.com/docs/intro"

    def test_installs_cache(self, routes_file):
        load_router(ConfigLoader.load(paths=[routes_file]))
        assert get_global_cache().max_size == 64

    def test_adds_to_existing_router(self, routes_file):
        router = Router()
        router.add("first", Route("/first"))

        assert load_router(ConfigLoader.load(paths=[routes_file]), router) is router
        assert [name for name, _ in router][0] == "first"
        assert router.count() == 5

    def test_invalid_route(self):
        loader = ConfigLoader.load(overrides={"routes": {"broken": {"path": "/{id}/{id}"}}})

        with pytest.raises(ConfigError, match="broken"):
            load_router(loader)

    def test_invalid_scheme(self):
        loader = ConfigLoader.load(overrides={"routes": {"ftp": {"path": "/", "scheme": "ftp"}}})

        with pytest.raises(ConfigError, match="ftp"):
            load_router(loader)

    def test_malformed_entry(self):
        loader = ConfigLoader.load(overrides={"routes": {"bad": ["/"]}})

        with pytest.raises(ConfigError, match="bad"):
            load_router(loader)

    def test_invalid_cache_settings(self):
        loader = ConfigLoader.load(overrides={"cache": {"max_size": "lots"}})

        with pytest.raises(ConfigError, match="cache"):
            load_router(loader)

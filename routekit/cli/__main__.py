"""routekit CLI - Main Entry Point.

Commands:
    routes   - List configured routes
    match    - Match a request against configured routes
    build    - Build a URL for a named route
    compile  - Show the regular expression compiled from a template
"""

import sys
import json
import logging
from typing import Dict, Optional, Tuple

import click

from . import __cli_name__
from .output import success, error, kv, table, _CHECK, _CROSS
from .. import __version__
from ..compiler.compiler import get_compiler
from ..config import ConfigError, ConfigLoader, load_router
from ..diagnostics.errors import ConfigurationError
from ..route import PathType


def _parse_pairs(pairs: Tuple[str, ...], option: str) -> Dict[str, str]:
    """KEY=VALUE arguments to a dict."""
    result = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint=option)
        key, value = pair.split("=", 1)
        result[key.strip()] = value
    return result


def _load(ctx: click.Context):
    """Router from the --config file(s), loaded once per invocation."""
    if "router" not in ctx.obj:
        try:
            loader = ConfigLoader.load(
                paths=list(ctx.obj["config"]),
                env_file=ctx.obj["env_file"],
            )
            if not ctx.obj["verbose"]:
                level = str(loader.get("logging.level", "WARNING")).upper()
                logging.getLogger("routekit").setLevel(level)
            ctx.obj["router"] = load_router(loader)
        except (ConfigError, ValueError) as e:
            error(f"{_CROSS} {e}")
            sys.exit(2)
    return ctx.obj["router"]


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option("--config", "-c", multiple=True, help="Route config file (YAML or JSON)")
@click.option("--env-file", type=str, default=None, help=".env file with ROUTEKIT_ settings")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, config: Tuple[str, ...], env_file: Optional[str], verbose: bool):
    """Match requests against route templates and build URLs.

    \b
    Quick start:
      routekit -c routes.yaml routes
      routekit -c routes.yaml match /users/edit/3
      routekit -c routes.yaml build mvc controller=users
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["env_file"] = env_file
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@cli.command("routes")
@click.pass_context
def list_routes(ctx):
    """List configured routes in matching order."""
    router = _load(ctx)
    rows = [
        (
            name,
            route.get_method() or "ANY",
            route.get_scheme() or "*",
            route.get_host() or "*",
            route.get_path(),
        )
        for name, route in router
    ]
    table(["Name", "Method", "Scheme", "Host", "Path"], rows)


@cli.command("match")
@click.argument("path")
@click.option("--method", "-m", default="GET", show_default=True, help="Request method")
@click.option("--host", "-H", default="", help="Request host")
@click.option("--scheme", "-s", default="", help="Request scheme")
@click.option("--all", "all_matches", is_flag=True, help="Show every matching route")
@click.pass_context
def match(ctx, path: str, method: str, host: str, scheme: str, all_matches: bool):
    """
    Match a request and print the route name and variables.

    Examples:
      routekit -c routes.yaml match /user/edit/3
      routekit -c routes.yaml match / --host en.example.com --scheme https
    """
    router = _load(ctx)
    cursor = router.iter_matches(path, method, host, scheme)
    matches = list(cursor) if all_matches else [m for m in [cursor.next()] if m]

    if not matches:
        error(f"{_CROSS} No route matches {method.upper()} {path}")
        sys.exit(1)

    for result in matches:
        success(f"{_CHECK} {result.name}")
        click.echo(json.dumps(result.params, sort_keys=True, default=str))


@cli.command("build")
@click.argument("name")
@click.argument("params", nargs=-1)
@click.option(
    "--type", "path_type",
    type=click.Choice([t.value for t in PathType]),
    default=PathType.AUTO.value,
    show_default=True,
    help="Which URL parts to produce",
)
@click.pass_context
def build(ctx, name: str, params: Tuple[str, ...], path_type: str):
    """
    Build a URL for route NAME from KEY=VALUE parameters.

    Examples:
      routekit -c routes.yaml build article title=hello
      routekit -c routes.yaml build article title=hello _host=example.com --type full
    """
    router = _load(ctx)
    if not router.has(name):
        error(f"{_CROSS} Unknown route {name!r}")
        sys.exit(1)

    url = router.build(name, _parse_pairs(params, "PARAMS"), path_type)
    if url is None:
        error(f"{_CROSS} Cannot build {name!r}: missing or invalid parameters")
        sys.exit(1)
    click.echo(url)


@cli.command("compile")
@click.argument("template")
@click.option("--style", type=click.Choice(["path", "host"]), default="path", show_default=True)
@click.option("--default", "-d", "defaults", multiple=True, help="KEY=VALUE default")
@click.option("--constraint", "-r", "constraints", multiple=True, help="KEY=REGEX constraint")
def compile_template(template: str, style: str, defaults: Tuple[str, ...], constraints: Tuple[str, ...]):
    """
    Show the regular expression a template compiles to.

    Examples:
      routekit compile "/{controller}/{action}" -d action=index
      routekit compile "{lang}.example.com" --style host -r "lang=en|bg"
    """
    try:
        compiled = get_compiler(style).compile(
            template,
            _parse_pairs(defaults, "--default"),
            _parse_pairs(constraints, "--constraint"),
        )
    except ConfigurationError as e:
        error(e.format())
        sys.exit(2)

    data = compiled.to_dict()
    kv("style", data["style"])
    kv("regex", data["regex"])
    kv("variables", ", ".join(data["variables"]) or "-")
    kv("optional", ", ".join(data["optional"]) or "-")


def main():
    """Entry point for `routekit` command."""
    cli(obj={})


if __name__ == "__main__":
    main()

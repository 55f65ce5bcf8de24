"""Velox CLI - Main Entry Point.

Commands:
    routes   - List the route table in load order
    match    - Show which route matches a path
    url      - Build the URL of a named route
    request  - Dispatch a request through an application
    cache    - Cache configuration checks
"""

import sys
from typing import Optional, Tuple

import click

from velox.faults import Fault

from . import __cli_name__, __version__
from .colors import CROSS, error

config_option = click.option(
    "--config", "-c", "config_paths", multiple=True, type=click.Path(),
    help="Config file (YAML/JSON), may be repeated",
)
routes_option = click.option(
    "--routes", "-r", "routes_file", type=click.Path(exists=True, dir_okay=False),
    help="Route definition file (YAML/JSON)",
)


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, verbose: bool):
    """Velox - MVC framework command line."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _fail(ctx, command: str, e: Exception) -> None:
    error(f"  {CROSS} {command} failed: {e}")
    if ctx.obj.get("verbose") and isinstance(e, Fault):
        error(f"    {e.to_dict()}")
    sys.exit(1)


# ============================================================================
# Routing
# ============================================================================

@cli.command("routes")
@config_option
@routes_option
@click.pass_context
def routes_cmd(ctx, config_paths: Tuple[str, ...], routes_file: Optional[str]):
    """
    List the route table in load order.

    Examples:
      velox routes --routes routes.yaml
    """
    from .commands import cmd_routes

    try:
        cmd_routes(config_paths, routes_file)
    except Fault as e:
        _fail(ctx, "routes", e)


@cli.command("match")
@click.argument("path")
@config_option
@routes_option
@click.pass_context
def match_cmd(ctx, path: str, config_paths: Tuple[str, ...], routes_file: Optional[str]):
    """
    Show which route matches PATH and the parameters it binds.

    Examples:
      velox match /forum/topic/12 --routes routes.yaml
    """
    from .commands import cmd_match

    try:
        matched = cmd_match(path, config_paths, routes_file)
    except Fault as e:
        _fail(ctx, "match", e)
    else:
        if not matched:
            sys.exit(1)


@cli.command("url")
@click.argument("name")
@click.option("--param", "-p", "params", multiple=True, help="Route parameter as key=value")
@config_option
@routes_option
@click.pass_context
def url_cmd(ctx, name: str, params: Tuple[str, ...], config_paths: Tuple[str, ...], routes_file: Optional[str]):
    """
    Build the URL of route NAME.

    Examples:
      velox url topic -p id=12 --routes routes.yaml
    """
    from .commands import cmd_url, parse_pairs

    try:
        cmd_url(name, parse_pairs(params), config_paths, routes_file)
    except Fault as e:
        _fail(ctx, "url", e)


# ============================================================================
# Dispatch
# ============================================================================

@cli.command("request")
@click.argument("path")
@click.option("--app", "app_reference", required=True, help="Application as module:attribute")
@click.option("--data", "-d", "data", multiple=True, help="Post parameter as key=value")
@click.option("--no-body", is_flag=True, help="Only print the status")
def request_cmd(path: str, app_reference: str, data: Tuple[str, ...], no_body: bool):
    """
    Dispatch PATH through an application and print the response.

    The exit code is the application's exit status.

    Examples:
      velox request /forum --app myapp.web:app
    """
    from .commands import cmd_request, parse_pairs

    result = cmd_request(path, app_reference, parse_pairs(data, "-d"), show_body=not no_body)
    sys.exit(int(result.exit_status))


# ============================================================================
# Cache
# ============================================================================

@cli.group()
def cache():
    """Cache tier configuration checks."""
    pass


@cache.command("check")
@config_option
@click.pass_context
def cache_check(ctx, config_paths: Tuple[str, ...]):
    """
    Show cache tier configuration and test backend connectivity.

    Examples:
      velox cache check --config config/base.yaml
    """
    from .commands import cmd_cache_check

    try:
        healthy = cmd_cache_check(config_paths)
    except Fault as e:
        _fail(ctx, "cache check", e)
    else:
        if not healthy:
            sys.exit(1)


def main():
    """Entry point for `velox` command."""
    cli(obj={})


if __name__ == "__main__":
    main()

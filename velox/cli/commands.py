"""
Velox CLI — command implementations.

Each ``cmd_*`` function does the work of one command and reports
through the styled output helpers; ``__main__`` only parses options.
"""

from __future__ import annotations

import importlib
from typing import Any, Dict, List, Optional, Sequence

import click

from velox.app import Application, ExitStatus, RunResult
from velox.cache.core import CacheTier
from velox.cache.providers import create_cache_strategy
from velox.config import ConfigLoader, VeloxConfig
from velox.context import AppContext
from velox.http.request import HttpRequest
from velox.routing.router import Router, load_route_definitions

from .colors import CHECK, CROSS, error, info, kv, success, table, warning


def parse_pairs(pairs: Sequence[str], option: str = "-p") -> Dict[str, str]:
    """``["a=1", "b=2"]`` -> ``{"a": "1", "b": "2"}``."""
    parsed: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint=option)
        parsed[name] = value
    return parsed


def load_config(config_paths: Sequence[str] = ()) -> VeloxConfig:
    return ConfigLoader.load(paths=list(config_paths)).to_config()


def build_router(config_paths: Sequence[str] = (), routes_file: Optional[str] = None) -> Router:
    """Router over the configured routes, or over ``routes_file`` alone."""
    config = load_config(config_paths)
    config.use_system_cache = False
    definitions = load_route_definitions(routes_file) if routes_file else None
    return Router(AppContext(config=config), definitions)


def load_application(reference: str) -> Application:
    """Resolve ``module:attr`` to an Application (instance or factory)."""
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected module:attribute, got '{reference}'", param_hint="--app")

    target: Any = importlib.import_module(module_name)
    for part in attr.split("."):
        target = getattr(target, part)

    if not isinstance(target, Application) and callable(target):
        target = target()
    if not isinstance(target, Application):
        raise click.BadParameter(f"'{reference}' is not an Application", param_hint="--app")
    return target


# ============================================================================
# Routing
# ============================================================================

def cmd_routes(config_paths: Sequence[str] = (), routes_file: Optional[str] = None) -> None:
    router = build_router(config_paths, routes_file)
    rows = []
    for route in router:
        defaults = ", ".join(f"{k}={v}" for k, v in route.defaults.items())
        rows.append((route.name, route.path, route.controller, route.action, defaults))

    if not rows:
        warning("No routes defined")
        return
    table(["Name", "Path", "Controller", "Action", "Defaults"], rows)


def cmd_match(path: str, config_paths: Sequence[str] = (), routes_file: Optional[str] = None) -> bool:
    router = build_router(config_paths, routes_file)
    route = router.match_route(HttpRequest(path), use_cache=False)

    if route is None:
        error(f"  {CROSS} No route matches '{path}'")
        return False

    success(f"  {CHECK} {route.name}")
    kv("Path", route.path)
    kv("Controller", route.controller)
    kv("Action", route.action)
    for name, value in route.parameters.items():
        kv(f"  {name}", value)
    return True


def cmd_url(
    name: str,
    parameters: Dict[str, str],
    config_paths: Sequence[str] = (),
    routes_file: Optional[str] = None,
) -> str:
    router = build_router(config_paths, routes_file)
    url = router.make_url(name, parameters, use_cache=False)
    click.echo(url)
    return url


# ============================================================================
# Dispatch
# ============================================================================

def cmd_request(path: str, app_reference: str, data: Dict[str, str], show_body: bool = True) -> RunResult:
    app = load_application(app_reference)
    request = HttpRequest.from_url(path, post=data or None)
    result = app.run(request)

    status = result.response.status or 200
    if result.exit_status is ExitStatus.OK:
        success(f"  {CHECK} {status}")
    else:
        error(f"  {CROSS} {status} ({result.exit_status.name})")

    if show_body:
        click.echo(result.response.content)
    return result


# ============================================================================
# Cache
# ============================================================================

def cmd_cache_check(config_paths: Sequence[str] = ()) -> bool:
    """Show tier configuration and ping networked backends."""
    config = load_config(config_paths)
    healthy = True

    tiers: List = [
        (CacheTier.LOCAL, config.use_local_cache, config.local_cache),
        (CacheTier.GLOBAL, config.use_global_cache, config.global_cache),
    ]
    for tier, switch, tier_config in tiers:
        enabled = switch and tier_config.enabled
        info(f"{tier.value} cache")
        kv("Enabled", enabled)
        kv("Backend", tier_config.backend)
        kv("Serializer", tier_config.serializer)

        if not enabled or tier_config.backend != "redis":
            continue

        kv("Redis", tier_config.redis_url)
        strategy = create_cache_strategy(tier_config)
        try:
            strategy.client.ping()
        except Exception as e:
            error(f"  {CROSS} {tier.value} redis unreachable: {e}")
            healthy = False
        else:
            success(f"  {CHECK} {tier.value} redis reachable")
        finally:
            strategy.destroy()

    return healthy

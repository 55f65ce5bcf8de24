"""
Test suite for route patterns, constraints and the Router.

Covers:
- Type constraints: int, +int, page (with the translated "show all" label)
- Route.match / Route.matches: literals, variables, translatable tokens,
  arity rules, trailing defaults
- Router: table order, match caching, private copies of cached routes,
  URL building with trailing defaults, error routes, definition files
"""

from __future__ import annotations

import json

import pytest

from velox.faults import InvalidRouteError, MissingParameterError, UndefinedRouteError
from velox.http.request import HttpRequest
from velox.i18n import TranslatorRegistry
from velox.routing.constraints import TypeConstraint, parse_constraint, validate_constraint
from velox.routing.route import Route, TokenKind, parse_token
from velox.routing.router import (
    INVALID_CONTROLLER,
    PAGE_NOT_FOUND,
    ROUTE_MATCH_CACHE_PREFIX,
    Router,
    load_route_definitions,
)

from conftest import TRANSLATIONS


@pytest.fixture
def translators():
    return TranslatorRegistry(TRANSLATIONS)


# ============================================================================
# Constraints
# ============================================================================


class TestConstraints:
    @pytest.mark.parametrize("token", ["1", "659"])
    def test_positive_int_accepts(self, token):
        assert validate_constraint(TypeConstraint.POSITIVE_INT, token)

    @pytest.mark.parametrize("token", ["0", "-1", "5x", "5.0", "", "05", "+5", " 5"])
    def test_positive_int_rejects(self, token):
        assert not validate_constraint(TypeConstraint.POSITIVE_INT, token)

    @pytest.mark.parametrize("token", ["-5", "0", "5"])
    def test_int_accepts(self, token):
        assert validate_constraint(TypeConstraint.INT, token)

    @pytest.mark.parametrize("token", ["5x", "5.0", "abc", ""])
    def test_int_rejects(self, token):
        assert not validate_constraint(TypeConstraint.INT, token)

    def test_page_accepts_positive_int_and_show_all_label(self, translators):
        assert validate_constraint(TypeConstraint.PAGE, "1", translators)
        assert validate_constraint(TypeConstraint.PAGE, "all", translators)

    @pytest.mark.parametrize("token", ["0", "abc"])
    def test_page_rejects(self, translators, token):
        assert not validate_constraint(TypeConstraint.PAGE, token, translators)

    def test_page_label_follows_language(self, translators):
        translators.set_language(2)
        assert validate_constraint(TypeConstraint.PAGE, "alle", translators)
        assert not validate_constraint(TypeConstraint.PAGE, "all", translators)

    def test_page_without_translator(self):
        assert not validate_constraint(TypeConstraint.PAGE, "all")

    def test_no_constraint_accepts_anything(self):
        assert validate_constraint(TypeConstraint.NONE, "whatever")

    def test_unknown_constraint(self):
        with pytest.raises(InvalidRouteError):
            parse_constraint("float")


# ============================================================================
# Tokens
# ============================================================================


class TestTokens:
    def test_variable_with_constraint(self):
        token = parse_token(":id[+int]")
        assert token.kind is TokenKind.VARIABLE
        assert token.value == "id"
        assert token.constraint is TypeConstraint.POSITIVE_INT

    def test_translatable(self):
        token = parse_token("@view-topic")
        assert token.kind is TokenKind.TRANSLATABLE
        assert token.value == "view-topic"

    def test_literal(self):
        assert parse_token("forum").kind is TokenKind.LITERAL

    def test_unterminated_constraint(self):
        with pytest.raises(InvalidRouteError):
            parse_token(":id[int")

    def test_unknown_constraint_fails_at_route_creation(self):
        with pytest.raises(InvalidRouteError):
            Route("bad", "/a/:id[uuid]", "a", "b")

    def test_root_path_has_no_tokens(self):
        assert Route("index", "/", "index", "index").tokens == []

    def test_get_tokens_reparses_without_cache(self):
        route = Route("r", "/a/b", "c", "d")
        route._path = "/x/y/z"
        assert route.get_tokens() == ["a", "b"]
        assert route.get_tokens(use_cache=False) == ["x", "y", "z"]


# ============================================================================
# Route matching
# ============================================================================


class TestRouteMatching:
    def test_exact_path(self):
        route = Route("about", "/about/us", "page", "about")
        assert route.matches("about/us")
        assert not route.matches("about/them")

    def test_root_path(self):
        route = Route("index", "/", "index", "index")
        assert route.matches("")
        assert route.matches("/")
        assert not route.matches("other")

    def test_variables_are_bound(self):
        route = Route("topic", "/forum/:id[+int]", "forum", "view")
        assert route.matches("forum/12")
        assert route.parameters == {"id": "12"}

    def test_constraint_failure_rejects_route(self):
        route = Route("topic", "/forum/:id[+int]", "forum", "view")
        assert not route.matches("forum/5x")

    def test_more_request_tokens_fail(self):
        route = Route("topic", "/forum/:id", "forum", "view")
        assert not route.matches("forum/1/extra")

    def test_missing_trailing_token_needs_default(self):
        route = Route("page", "/page/:id/:sort", "page", "list", {"sort": "asc"})
        assert route.matches("page/5")
        assert route.parameters == {"sort": "asc", "id": "5"}
        assert not route.matches("page")

    def test_missing_literal_token_fails(self):
        route = Route("r", "/a/:x/edit", "a", "edit", {"x": "1"})
        assert not route.matches("a/3")

    def test_translatable_token_accepts_both_forms(self, translators):
        route = Route("topic", "/@view-topic/:id", "forum", "view-topic")
        assert route.match("/show/1", translators=translators) == {"id": "1"}
        assert route.match("/view-topic/1", translators=translators) == {"id": "1"}
        assert route.match("/other/1", translators=translators) is None

    def test_translatable_token_without_translator(self, translators):
        route = Route("topic", "/@view-topic/:id", "forum", "view-topic")
        assert route.match("/show/1") is None
        assert route.match("/show/1", use_translator=False, translators=translators) is None
        assert route.match("/view-topic/1") == {"id": "1"}

    def test_match_is_pure(self):
        route = Route("topic", "/forum/:id", "forum", "view", {"id": "0"})
        assert route.match("forum/3") == {"id": "3"}
        assert route.parameters == {"id": "0"}

    def test_failed_match_keeps_parameters(self):
        route = Route("topic", "/forum/:id[int]", "forum", "view")
        route.matches("forum/3")
        assert not route.matches("forum/x")
        assert route.parameters == {"id": "3"}

    def test_repeated_matches_are_deterministic(self, translators):
        first = Route("topic", "/@view-topic/:id[+int]", "forum", "view")
        second = Route("topic", "/@view-topic/:id[+int]", "forum", "view")
        assert first.matches("show/9", translators=translators)
        assert second.matches("show/9", translators=translators)
        assert first.parameters == second.parameters

    def test_clone_has_own_parameters(self):
        route = Route("topic", "/forum/:id", "forum", "view")
        route.matches("forum/1")
        copy = route.clone()
        copy.set_param("id", "2")
        assert route.get_param("id") == "1"

    def test_signature(self):
        route = Route("topic", "/forum/:id", "forum", "view")
        route.matches("forum/1")
        assert route.signature() == "topic(id='1')"


# ============================================================================
# Router
# ============================================================================


ROUTES = {
    "index": {"path": "/", "controller": "index", "action": "index"},
    "topic": {"path": "/@view-topic/:id[+int]", "controller": "forum", "action": "view-topic"},
    "any-topic": {"path": "/@view-topic/:slug", "controller": "forum", "action": "by-slug"},
    "page": {"path": "/page/:id/:sort", "controller": "index", "action": "index", "sort": "asc"},
    "both": {"path": "/both/:a/:b", "controller": "x", "action": "y", "a": "1", "b": "2"},
}


@pytest.fixture
def router(context):
    return Router(context, ROUTES)


class TestRouterTable:
    def test_parse_routes_extra_keys_become_defaults(self, router):
        assert router.get_route("page").defaults == {"sort": "asc"}

    def test_insertion_order(self, router):
        assert [r.name for r in router] == list(ROUTES)

    def test_missing_definition_keys(self, context):
        with pytest.raises(InvalidRouteError):
            Router(context, {"bad": {"path": "/"}}).get_routes()

    def test_list_definitions(self, context):
        router = Router(context, [{"name": "a", "path": "/a", "controller": "a", "action": "b"}])
        assert router.get_route("a").path == "/a"

    def test_add_route(self, router):
        router.add_route("extra", "/extra", "x", "y")
        assert router.match_route(HttpRequest("/extra"), use_cache=False).name == "extra"

    def test_table_is_cached(self, context):
        Router(context, ROUTES).get_routes(use_cache=True)
        cached = context.cache.fetch_local("velox.routes")
        assert list(cached) == list(ROUTES)

    def test_routes_from_config(self, context):
        router = Router(context)
        assert router.get_route("index") is not None


class TestRouterMatching:
    def test_first_match_wins(self, router):
        route = router.match_route(HttpRequest("/show/12"))
        assert route.name == "topic"
        assert route.parameters == {"id": "12"}

    def test_falls_through_to_later_route(self, router):
        route = router.match_route(HttpRequest("/show/intro"))
        assert route.name == "any-topic"
        assert route.get_param("slug") == "intro"

    def test_no_match(self, router):
        assert router.match_route(HttpRequest("/nothing/here/at/all")) is None

    def test_match_is_cached_per_path(self, router, context):
        router.match_route(HttpRequest("/show/12"), use_cache=True)
        cached = context.cache.fetch_local(f"{ROUTE_MATCH_CACHE_PREFIX}show/12")
        assert cached.name == "topic"

    def test_cached_route_is_not_shared_between_requests(self, router):
        first = router.match_route(HttpRequest("/show/12"), use_cache=True)
        first.set_param("id", "tampered")
        first.set_param("leak", True)

        second = router.match_route(HttpRequest("/show/12"), use_cache=True)

        assert second is not first
        assert second.parameters == {"id": "12"}
        assert router.get_route("topic").parameters == {}

    def test_table_templates_are_not_mutated(self, router):
        router.match_route(HttpRequest("/page/3"), use_cache=False)
        assert router.get_route("page").parameters == {"sort": "asc"}


class TestMakeUrl:
    def test_trailing_default_omitted(self, router):
        assert router.make_url("page", {"id": 5}) == "/page/5"

    def test_supplied_trailing_value(self, router):
        assert router.make_url("page", {"id": 5, "sort": "desc"}) == "/page/5/desc"

    def test_non_trailing_default_is_rendered(self, router):
        assert router.make_url("both") == "/both/1"

    def test_missing_parameter(self, router):
        with pytest.raises(MissingParameterError):
            router.make_url("page")

    def test_undefined_route(self, router):
        with pytest.raises(UndefinedRouteError):
            router.make_url("nope")

    def test_translatable_token(self, router):
        assert router.make_url("topic", {"id": 3}) == "/show/3"
        assert router.make_url("topic", {"id": 3}, use_translator=False) == "/view-topic/3"

    def test_root(self, router):
        assert router.make_url("index") == "/"

    def test_url_is_cached(self, router, context):
        router.make_url("page", {"id": 5}, use_cache=True)
        signature = json.dumps({"id": 5}, sort_keys=True)
        assert context.cache.fetch_local(f"velox.route-url|page.1.{signature}") == "/page/5"


class TestErrorRoutes:
    def test_page_not_found_route(self, router):
        request = HttpRequest("/does-not-exist")
        route = router.get_page_not_found_route(request)
        assert route.controller == "error"
        assert route.action == PAGE_NOT_FOUND
        assert route.get_param("request") is request

    def test_invalid_controller_route_carries_token_and_exception(self, router):
        request = HttpRequest("/x")
        exc = RuntimeError("x")
        route = router.get_invalid_controller_route(request, "token", exc)
        assert route.action == INVALID_CONTROLLER
        assert route.get_param("dispatch-token") == "token"
        assert route.get_param("exception") is exc

    def test_special_route_hook(self, router):
        assert router.get_special_route(HttpRequest("/x")) is None


class TestDefinitionFiles:
    def test_yaml_file_keeps_order(self, tmp_path):
        path = tmp_path / "routes.yaml"
        path.write_text(
            "routes:\n"
            "  b:\n    path: /b\n    controller: b\n    action: index\n"
            "  a:\n    path: /a\n    controller: a\n    action: index\n    page: 1\n"
        )
        definitions = load_route_definitions(path)
        assert list(definitions) == ["b", "a"]
        assert definitions["a"]["page"] == 1

    def test_json_file(self, tmp_path):
        path = tmp_path / "routes.json"
        path.write_text(json.dumps({"a": {"path": "/a", "controller": "a", "action": "b"}}))
        assert list(load_route_definitions(path)) == ["a"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidRouteError):
            load_route_definitions(tmp_path / "nope.yaml")

    def test_routes_file_from_config(self, context, tmp_path):
        path = tmp_path / "routes.yaml"
        path.write_text("extra:\n  path: /extra\n  controller: x\n  action: y\n")
        context.config.routes_file = str(path)
        assert Router(context).get_route("extra") is not None

"""Tests for the Router front end and class/function installation."""

import pytest

from declarative_routing import (
    EndpointSpec,
    Router,
    RouteTable,
    cache,
    controller,
    domains,
    endpoint,
    middleware,
    resource,
    suffix,
    where,
)
from declarative_routing.core.route import WILDCARD, NamedTarget
from declarative_routing.core.router import qualified_name
from declarative_routing.exceptions import RouteTableFrozenError, RuleSyntaxError


class TestFreeStandingRoutes:
    @pytest.mark.parametrize("verb", ["get", "post", "put", "patch", "delete"])
    def test_verb_helpers(self, router: Router, verb: str):
        getattr(router, verb)("items/{id}", "target").install()
        match = router.search("items/9", verb.upper())
        assert match.target == "target"
        assert match.params == {"id": "9"}

    def test_any_answers_every_method(self, router: Router):
        router.any("ping", "pong").install()
        assert router.search("ping", "OPTIONS").target == "pong"
        assert router.search("ping").target == "pong"

    def test_many_upper_cases_methods(self, router: Router):
        builder = router.many(["get", "head"], "ping", "pong")
        assert builder.methods == ("GET", "HEAD")

    def test_callable_target(self, router: Router, make_handler):
        handler = make_handler("health")
        router.get("health", handler).install()
        assert router.search("health", "GET").target is handler

    def test_same_rule_reregistered_last_wins(self, router: Router):
        router.get("users", "first").install()
        router.get("users", "second").install()
        assert router.search("users", "GET").target == "second"

    def test_default_table(self):
        assert isinstance(Router().table, RouteTable)


class TestGroups:
    def test_controller_scope(self, router: Router):
        users = router.controller("app.Users")
        users.action("list", EndpointSpec("list"))
        users.loading()
        assert router.search("users/list", "GET").target == NamedTarget("app.Users", "list")

    def test_resource_scope(self, router: Router):
        photos = router.resource("app.Photos", "pics")
        photos.register("show")
        photos.loading()
        assert router.search("pics/3", "GET").target == NamedTarget("app.Photos", "show")


class TestInstallClass:
    def test_controller_methods_become_routes(self, router: Router):
        @controller("users")
        class Users:
            def list(self):
                pass

            @endpoint("{id}", ["GET"])
            def show(self, id):
                pass

            def _helper(self):
                pass

        records = router.install_class(Users)

        assert [r.rule for r in records] == ["users/list", "users/{id}"]
        assert router.search("users/list", "POST").target == NamedTarget(
            qualified_name(Users), "list"
        )
        assert router.search("users/5", "GET").params == {"id": "5"}
        assert router.search("users/_helper", "GET") is None

    def test_default_prefix_from_class_name(self, router: Router):
        @controller()
        class BlogPosts:
            def recent(self):
                pass

        (record,) = router.install_class(BlogPosts)
        assert record.rule == "blogPosts/recent"

    def test_stacked_endpoints(self, router: Router):
        @controller("feed")
        class Feed:
            @endpoint("rss", ["GET"])
            @endpoint("atom", ["GET"])
            def render(self):
                pass

        records = router.install_class(Feed)
        assert [r.rule for r in records] == ["feed/rss", "feed/atom"]

    def test_group_and_action_options_merge(self, router: Router):
        @controller("users")
        @domains("api.example.com")
        @middleware(["auth"])
        @suffix(".json")
        @cache(30)
        class Users:
            @endpoint("{id}/edit", ["GET"])
            @middleware({"role": "admin"})
            def edit(self, id):
                pass

            @endpoint("{id}", ["GET"])
            @cache(5)
            @suffix("")
            def show(self, id):
                pass

        edit, show = router.install_class(Users)

        assert edit.rule == "users/{id}/edit.json"
        assert list(edit.middleware) == ["auth", "role"]
        assert edit.cache_hint == 30
        assert edit.domains == ("api.example.com",)

        assert show.rule == "users/{id}.json"
        assert show.cache_hint == 5

        match = router.search("users/7/edit.json", "GET", "api.example.com")
        assert match.params == {"id": "7"}
        assert router.search("users/7/edit.json", "GET", "www.example.com") is None

    def test_resource_registers_only_restful_methods(self, router: Router):
        @resource("photos")
        @where(id=r"\d+")
        class Photos:
            def index(self):
                pass

            def show(self, id):
                pass

            def archive(self):
                pass

        records = router.install_class(Photos)

        assert [r.rule for r in records] == ["photos", "photos/{id}"]
        assert router.search("photos/0", "GET") is None
        assert router.search("photos/12", "GET").params == {"id": "12"}

    def test_resource_then_controller(self, router: Router):
        @resource("photos")
        @controller("photos")
        class Photos:
            def index(self):
                pass

        records = router.install_class(Photos)

        assert [r.rule for r in records] == ["photos", "photos/index"]

    def test_inherited_methods_are_installed(self, router: Router):
        class Base:
            def ping(self):
                pass

        @controller("child")
        class Child(Base):
            def pong(self):
                pass

        records = router.install_class(Child)
        assert [r.rule for r in records] == ["child/ping", "child/pong"]

    def test_install_is_idempotent(self, router: Router):
        @controller("users")
        class Users:
            def list(self):
                pass

        assert len(router.install_class(Users)) == 1
        assert router.install_class(Users) == []
        assert len(router.table) == 1

    def test_malformed_rule_leaves_table_untouched(self, router: Router):
        @controller("reports")
        class Reports:
            @endpoint("summary")
            def summary(self):
                pass

            @endpoint("broken/{")
            def broken(self):
                pass

        with pytest.raises(RuleSyntaxError):
            router.install_class(Reports)

        assert router.table.routes == []

    def test_failed_install_can_be_retried(self, router: Router):
        @controller("reports")
        class Reports:
            def summary(self):
                pass

        router.freeze()
        with pytest.raises(RouteTableFrozenError):
            router.install_class(Reports)

        router.table.clear()
        records = router.install_class(Reports)

        assert [r.rule for r in records] == ["reports/summary"]

    def test_resource_not_inserted_when_controller_rule_fails(self, router: Router):
        @resource("photos")
        @controller("photos")
        class Photos:
            def index(self):
                pass

            @endpoint("bad}")
            def broken(self):
                pass

        with pytest.raises(RuleSyntaxError):
            router.install_class(Photos)

        assert len(router.table) == 0
        assert router.search("photos", "GET") is None

    def test_undeclared_class_installs_nothing(self, router: Router):
        class Plain:
            def list(self):
                pass

        assert router.install_class(Plain) == []
        assert len(router.table) == 0


class TestInstallFunction:
    def test_named_function_defaults_to_its_name(self, router: Router):
        def health():
            return "ok"

        (record,) = router.install_function(health)

        assert record.rule == "health"
        assert record.methods == ("GET", "POST")
        assert router.search("health", "GET").target is health

    def test_endpoint_and_options(self, router: Router):
        @endpoint("articles/{slug}", ["GET"])
        @where(slug="[a-z-]+")
        @cache(120)
        def article(slug):
            return slug

        (record,) = router.install_function(article)

        assert record.cache_hint == 120
        assert router.search("articles/hello-world", "GET").params == {"slug": "hello-world"}
        assert router.search("articles/Hello", "GET") is None

    def test_named_function_installed_once(self, router: Router):
        def health():
            pass

        router.install_function(health)
        assert router.install_function(health) == []

    def test_malformed_function_rule_can_be_retried(self, router: Router):
        @endpoint("feed", ["GET"])
        @endpoint("feed/{")
        def feed():
            pass

        with pytest.raises(RuleSyntaxError):
            router.install_function(feed)

        assert router.table.routes == []
        with pytest.raises(RuleSyntaxError):
            router.install_function(feed)

    def test_lambda_without_endpoint_is_skipped(self, router: Router):
        assert router.install_function(lambda: None) == []
        assert len(router.table) == 0

    def test_lambda_with_endpoint_installs_every_time(self, router: Router):
        handler = endpoint("ping", ["GET"])(lambda: "pong")

        router.install_function(handler)
        router.install_function(handler)

        assert router.search("ping", "GET").target is handler


class TestLifecycle:
    def test_freeze_blocks_installation(self, router: Router):
        router.freeze()
        with pytest.raises(RouteTableFrozenError):
            router.get("users", "list").install()

    def test_clear_resets_table_and_guards(self, router: Router):
        def health():
            pass

        router.install_function(health)
        router.freeze()
        router.clear()

        assert len(router.table) == 0
        assert len(router.install_function(health)) == 1

    def test_search_defaults_to_wildcards(self, router: Router):
        router.any("ping", "pong").install()
        match = router.search("/ping/")
        assert match.route.methods == (WILDCARD,)

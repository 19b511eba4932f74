"""
Unit tests for the route table.
"""

import dataclasses

import pytest

from cannedhttp.http.router import Route, RouteTable


def make_table() -> RouteTable:
    return RouteTable.from_pairs([
        ("/", "welcome"),
        ("/test", "Hello World"),
        ("/foo", "bar"),
    ])


class TestRouteTable:
    """Tests for RouteTable lookup."""

    def test_lookup_exact(self):
        routes = make_table()

        assert routes.lookup("/") == "welcome"
        assert routes.lookup("/test") == "Hello World"
        assert routes.lookup("/foo") == "bar"

    def test_no_match(self):
        assert make_table().lookup("/missing") is None

    @pytest.mark.parametrize("target", [
        "/test/",       # trailing slash
        "/TEST",        # case
        "/test?x=1",    # query string
        "/tes",         # prefix
        "/test/more",   # longer path
        "/%74est",      # percent-encoded
        "",
    ])
    def test_match_is_exact(self, target):
        assert make_table().lookup(target) is None

    def test_first_match_wins(self):
        routes = RouteTable([("/dup", "first"), ("/dup", "second")])
        assert routes.lookup("/dup") == "first"

    def test_empty_table(self):
        routes = RouteTable()
        assert len(routes) == 0
        assert routes.lookup("/") is None

    def test_accepts_route_objects(self):
        routes = RouteTable([Route("/a", "1"), ("/b", "2")])
        assert [route.path for route in routes] == ["/a", "/b"]

    def test_order_preserved(self):
        routes = make_table()
        assert [route.path for route in routes] == ["/", "/test", "/foo"]
        assert routes.routes[1] == Route(path="/test", body="Hello World")

    def test_len_and_contains(self):
        routes = make_table()
        assert len(routes) == 3
        assert "/foo" in routes
        assert "/bar" not in routes


class TestImmutability:
    """The table is shared across session threads and must never change."""

    def test_route_is_frozen(self):
        route = Route("/a", "1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            route.body = "2"

    def test_table_rejects_assignment(self):
        routes = make_table()
        with pytest.raises(AttributeError):
            routes._routes = ()

    def test_source_list_changes_do_not_leak(self):
        pairs = [("/a", "1")]
        routes = RouteTable(pairs)
        pairs.append(("/b", "2"))

        assert len(routes) == 1
        assert routes.lookup("/b") is None

    def test_routes_is_a_tuple(self):
        assert isinstance(make_table().routes, tuple)


def test_print_routes(capsys):
    make_table().print_routes()
    out = capsys.readouterr().out

    assert "Registered Routes:" in out
    assert "/test" in out
    assert "Hello World" in out

"""
=============================================================================
ROUTE TABLE
=============================================================================

Maps exact request-targets to canned response bodies.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /test                                                          │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTE TABLE (scanned top to bottom)                         │   │
    │   │                                                              │   │
    │   │   /       → "welcome ! available routes: /test, /foo"        │   │
    │   │   /test   → "Hello World"                    ← MATCH!        │   │
    │   │   /foo    → "bar"                                            │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   "Hello World"                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MATCHING RULES
=============================================================================

1. EXACT: the target must equal the route path character for character.
   "/test" does not match "/test/", "/TEST" or "/test?x=1".

2. FIRST MATCH WINS: routes are tried in insertion order, so if two
   routes share a path only the first one is reachable.

3. NO METHOD FILTER: a route answers every method.

=============================================================================
IMMUTABILITY
=============================================================================

The table is built once at start-up and then read concurrently by every
session thread. It is never written again, which is why no lock is needed:

- Route is a frozen dataclass
- RouteTable stores its routes in a tuple and exposes no mutators

A linear scan is fine at this size; a dict keyed by path would also have
to remember which duplicate came first.

=============================================================================
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Route:
    """
    A static mapping from an exact request path to a canned body.

        Route(path="/foo", body="bar")
    """

    path: str
    body: str


class RouteTable:
    """
    Ordered, read-only collection of routes.

    Usage:
        routes = RouteTable.from_pairs([
            ("/test", "Hello World"),
            ("/foo", "bar"),
        ])

        routes.lookup("/foo")      # "bar"
        routes.lookup("/missing")  # None
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[Union[Route, Tuple[str, str]]] = ()):
        """
        Build the table.

        Args:
            routes: Route objects or (path, body) pairs, in priority order.
        """
        built = []
        for entry in routes:
            if not isinstance(entry, Route):
                path, body = entry
                entry = Route(path=path, body=body)
            built.append(entry)
        object.__setattr__(self, "_routes", tuple(built))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "RouteTable":
        """Build a table from (path, body) string pairs."""
        return cls(Route(path=path, body=body) for path, body in pairs)

    def __setattr__(self, name, value):
        raise AttributeError("RouteTable is immutable")

    def lookup(self, path: str) -> Optional[str]:
        """
        Find the body for a request target.

        Args:
            path: Request-target as sent by the client.

        Returns:
            Body of the first route whose path equals `path`, or None.
        """
        for route in self._routes:
            if route.path == path:
                return route.body
        return None

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, path: object) -> bool:
        return any(route.path == path for route in self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({list(self._routes)!r})"

    def print_routes(self) -> None:
        """
        Print all routes (startup banner).

        Example output:
            Registered Routes:
            ------------------------------------------------------------
              /test      Hello World
              /foo       bar
            ------------------------------------------------------------
        """
        print("\nRegistered Routes:")
        print("-" * 60)
        for route in self._routes:
            print(f"  {route.path:10} {route.body}")
        print("-" * 60)

"""Shared pytest fixtures for declarative-routing tests."""

from collections.abc import Callable
from typing import Any

import pytest

from declarative_routing import Router, RouteTable


@pytest.fixture
def table() -> RouteTable:
    """Return an empty route table."""
    return RouteTable()


@pytest.fixture
def router(table: RouteTable) -> Router:
    """Return a router bound to the table fixture."""
    return Router(table)


@pytest.fixture
def make_handler() -> Callable[[str], Callable[..., Any]]:
    """Create a named handler returning its own name and parameters.

    Returns a callable that accepts the handler name and returns a
    function which, when called with keyword arguments, returns
    {"handler": name, **params}.
    """

    def _create(name: str) -> Callable[..., Any]:
        def handler(**params: str) -> dict[str, Any]:
            return {"handler": name, **params}

        handler.__name__ = name
        handler.__qualname__ = name
        return handler

    return _create

"""Declarative HTTP route registry with a FastAPI adapter."""

# Primary API: the main entry point
from declarative_routing.core.router import Router

# Declarations: decorators recording routes on classes and functions
from declarative_routing.core.declarations import (
    cache,
    controller,
    domains,
    endpoint,
    middleware,
    resource,
    suffix,
    where,
)

# Core types: for advanced users and type checking
from declarative_routing.core.builder import RouteBuilder
from declarative_routing.core.endpoint import EndpointSpec
from declarative_routing.core.group import Controller, Resource
from declarative_routing.core.options import RouteOptions
from declarative_routing.core.parser import CompiledRule, compile_rule
from declarative_routing.core.route import NamedTarget, RouteMatch, RouteRecord
from declarative_routing.core.table import RouteTable

# Exceptions: for error handling
from declarative_routing.exceptions import (
    ConstraintError,
    DeclarationError,
    RouteTableFrozenError,
    RouteValidationError,
    RoutingError,
    RuleSyntaxError,
)

__all__ = [
    # Primary API
    "Router",
    # Declarations
    "cache",
    "controller",
    "domains",
    "endpoint",
    "middleware",
    "resource",
    "suffix",
    "where",
    # Core types
    "CompiledRule",
    "Controller",
    "EndpointSpec",
    "NamedTarget",
    "Resource",
    "RouteBuilder",
    "RouteMatch",
    "RouteOptions",
    "RouteRecord",
    "RouteTable",
    "compile_rule",
    # Exceptions
    "ConstraintError",
    "DeclarationError",
    "RouteTableFrozenError",
    "RouteValidationError",
    "RoutingError",
    "RuleSyntaxError",
]

__version__ = "1.0.0"

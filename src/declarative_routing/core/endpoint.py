"""Endpoint specifications: a rule and the methods it answers."""

from collections.abc import Iterable
from dataclasses import dataclass

from declarative_routing.core.builder import RouteBuilder
from declarative_routing.core.options import RouteOptions
from declarative_routing.core.route import Target
from declarative_routing.core.table import RouteTable

# Methods used when an endpoint does not name any
DEFAULT_METHODS: tuple[str, ...] = ("GET", "POST")


@dataclass(frozen=True)
class EndpointSpec:
    """A declared endpoint's raw rule and method set.

    Attributes:
        rule: Path rule relative to any group prefix.
        methods: HTTP methods the endpoint answers.
    """

    rule: str
    methods: tuple[str, ...] = DEFAULT_METHODS

    @classmethod
    def of(cls, rule: str, methods: Iterable[str] | str = DEFAULT_METHODS) -> "EndpointSpec":
        if isinstance(methods, str):
            methods = (methods,)
        return cls(rule=rule, methods=tuple(method.upper() for method in methods))

    def builder(
        self,
        table: RouteTable,
        target: Target,
        options: RouteOptions | None = None,
    ) -> RouteBuilder:
        """Create a RouteBuilder carrying the set values of options."""
        builder = RouteBuilder(table, self.methods, self.rule, target)
        if options is not None:
            builder.options(options)
        return builder

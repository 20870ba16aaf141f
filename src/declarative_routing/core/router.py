"""Router: installs declared groups and functions into a route table.

The Router owns a RouteTable and is the entry point used during
application bootstrap (install, then optionally freeze) and at request
time (search).
"""

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any

from declarative_routing.core.builder import RouteBuilder
from declarative_routing.core.declarations import get_endpoints, get_groups, get_options
from declarative_routing.core.endpoint import EndpointSpec
from declarative_routing.core.group import Controller, Resource
from declarative_routing.core.options import RouteOptions
from declarative_routing.core.route import WILDCARD, RouteMatch, RouteRecord, Target
from declarative_routing.core.table import RouteTable

logger = logging.getLogger(__name__)

_LAMBDA_NAME = "<lambda>"


def qualified_name(obj: Any) -> str:
    """Return "module.QualifiedName" for a class or function."""
    return f"{obj.__module__}.{obj.__qualname__}"


def _public_methods(cls: type) -> list[tuple[str, Callable[..., Any]]]:
    """Public functions of cls and its bases, in declaration order."""
    members: dict[str, Any] = {}
    for klass in reversed(cls.__mro__[:-1]):
        members.update(vars(klass))
    return [
        (name, member)
        for name, member in members.items()
        if not name.startswith("_") and inspect.isfunction(member)
    ]


class Router:
    """Route registry front end.

    Usage::

        router = Router()
        router.get("health", health).install()
        router.install_class(UserResource)
        router.freeze()
        match = router.search("/users/42", "GET", "api.example.com")
    """

    def __init__(self, table: RouteTable | None = None) -> None:
        self._table = table if table is not None else RouteTable()
        self._installed_classes: set[str] = set()
        self._installed_functions: set[str] = set()

    @property
    def table(self) -> RouteTable:
        return self._table

    # Free-standing routes

    def many(self, methods: Iterable[str], rule: str, target: Target) -> RouteBuilder:
        return RouteBuilder(self._table, [method.upper() for method in methods], rule, target)

    def get(self, rule: str, target: Target) -> RouteBuilder:
        return self.many(["GET"], rule, target)

    def post(self, rule: str, target: Target) -> RouteBuilder:
        return self.many(["POST"], rule, target)

    def put(self, rule: str, target: Target) -> RouteBuilder:
        return self.many(["PUT"], rule, target)

    def patch(self, rule: str, target: Target) -> RouteBuilder:
        return self.many(["PATCH"], rule, target)

    def delete(self, rule: str, target: Target) -> RouteBuilder:
        return self.many(["DELETE"], rule, target)

    def any(self, rule: str, target: Target) -> RouteBuilder:
        return self.many([WILDCARD], rule, target)

    # Groups

    def controller(
        self,
        identifier: str,
        prefix: str | int = 1,
        options: RouteOptions | None = None,
    ) -> Controller:
        return Controller(self._table, identifier, prefix, options)

    def resource(
        self,
        identifier: str,
        prefix: str | int = 1,
        options: RouteOptions | None = None,
    ) -> Resource:
        return Resource(self._table, identifier, prefix, options)

    def install_class(self, cls: type) -> list[RouteRecord]:
        """Install the routes declared on a class.

        Resource routes are installed before controller routes. A class is
        installed at most once; later calls return an empty list. Every
        route is compiled before any is inserted, so a failed install
        leaves the table unchanged and the class can be installed again.

        Args:
            cls: Class decorated with @resource and/or @controller.

        Returns:
            The installed RouteRecords.

        Raises:
            RuleSyntaxError: If a rule is malformed.
            ConstraintError: If a constraint fragment is not a valid regex.
        """
        identifier = qualified_name(cls)
        if identifier in self._installed_classes:
            return []

        groups = {group.kind: group for group in get_groups(cls)}
        if not groups:
            logger.debug("Class has no routing declarations", extra={"group": identifier})
            self._installed_classes.add(identifier)
            return []

        options = get_options(cls)
        methods = _public_methods(cls)
        scopes: list[Controller] = []

        if "resource" in groups:
            scope = self.resource(identifier, groups["resource"].prefix, options)
            for name, method in methods:
                scope.register(name, get_options(method))
            scopes.append(scope)

        if "controller" in groups:
            scope = self.controller(identifier, groups["controller"].prefix, options)
            for name, method in methods:
                for spec in get_endpoints(method) or (EndpointSpec.of(name),):
                    scope.action(name, spec, get_options(method))
            scopes.append(scope)

        compiled = [(scope, scope.build()) for scope in scopes]
        records: list[RouteRecord] = []
        for scope, built in compiled:
            records.extend(scope.commit(built))
        self._installed_classes.add(identifier)

        logger.info(
            "Installed class routes",
            extra={"group": identifier, "route_count": len(records)},
        )
        return records

    def install_function(self, func: Callable[..., Any]) -> list[RouteRecord]:
        """Install the routes declared on a function.

        Named functions are installed at most once and default to a rule
        equal to their name. Lambdas are never deduplicated and are only
        installed when they carry @endpoint. The target is the function.
        """
        anonymous = func.__name__ == _LAMBDA_NAME
        identifier = qualified_name(func)

        if not anonymous and identifier in self._installed_functions:
            return []

        specs = get_endpoints(func)
        if not specs:
            if anonymous:
                return []
            specs = (EndpointSpec.of(func.__name__),)

        options = get_options(func)
        records = [spec.builder(self._table, func, options).build() for spec in specs]
        for record in records:
            self._table.insert(record, record.methods, record.domains)
        if not anonymous:
            self._installed_functions.add(identifier)

        logger.debug(
            "Installed function routes",
            extra={"function": identifier, "route_count": len(records)},
        )
        return records

    # Lookup and lifecycle

    def search(self, path: str, method: str = WILDCARD, domain: str = WILDCARD) -> RouteMatch | None:
        return self._table.search(path, method, domain)

    def freeze(self) -> None:
        self._table.freeze()

    def clear(self) -> None:
        """Reset the table and forget which classes and functions were installed."""
        self._table.clear()
        self._installed_classes.clear()
        self._installed_functions.clear()

"""Route groups: shared defaults for a set of actions.

A Controller collects one RouteBuilder per declared action, merging the
group's defaults into each, and installs them all on loading(). A
Resource adds the conventional REST actions on top.
"""

import logging
from types import MappingProxyType

from declarative_routing.core.builder import RouteBuilder
from declarative_routing.core.endpoint import EndpointSpec
from declarative_routing.core.options import RouteOptions, merge_options
from declarative_routing.core.route import NamedTarget, RouteRecord
from declarative_routing.core.table import RouteTable

logger = logging.getLogger(__name__)

# action -> (rule, methods)
RESTFUL_ACTIONS: MappingProxyType[str, tuple[str, tuple[str, ...]]] = MappingProxyType(
    {
        "index": ("", ("GET",)),
        "create": ("create", ("GET",)),
        "store": ("", ("POST",)),
        "show": ("{id}", ("GET",)),
        "edit": ("{id}/edit", ("GET",)),
        "update": ("{id}", ("PUT", "PATCH")),
        "destroy": ("{id}", ("DELETE",)),
    }
)

# Actions addressing a single resource by id
RESOURCE_ID_ACTIONS: frozenset[str] = frozenset({"show", "edit", "update", "destroy"})

# Positive integer without leading zeros
RESOURCE_ID_CONSTRAINT = r"[1-9]\d*"


def group_prefix(identifier: str, prefix: str | int = 1) -> str:
    """Compute a group's path prefix.

    Args:
        identifier: Dotted group identifier (usually "module.ClassName").
        prefix: Explicit prefix string, or the number of trailing
            identifier segments to use.

    Returns:
        The prefix without surrounding "/".

    Examples:
        ("app.controllers.Users", 1)     -> "users"
        ("app.admin.UserSettings", 2)    -> "admin/userSettings"
        ("app.admin.UserSettings", "s")  -> "s"
    """
    if isinstance(prefix, str):
        return prefix.strip("/")
    if prefix <= 0:
        return ""
    segments = identifier.split(".")[-prefix:]
    return "/".join(segment[:1].lower() + segment[1:] for segment in segments)


class Controller:
    """Group scope producing route builders for named actions.

    Usage::

        users = Controller(table, "app.Users", options=RouteOptions.create(suffix=".json"))
        users.action("edit", EndpointSpec.of("{id}/edit", ["GET"]))
        users.loading()
    """

    def __init__(
        self,
        table: RouteTable,
        identifier: str,
        prefix: str | int = 1,
        options: RouteOptions | None = None,
    ) -> None:
        self._table = table
        self._identifier = identifier
        self._prefix = group_prefix(identifier, prefix)
        self._options = options or RouteOptions()
        self._pending: dict[str, list[RouteBuilder]] = {}

    @property
    def identifier(self) -> str:
        return self._identifier

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def options(self) -> RouteOptions:
        return self._options

    @property
    def pending(self) -> int:
        """Number of builders waiting for loading()."""
        return sum(len(builders) for builders in self._pending.values())

    def target(self, action: str) -> NamedTarget:
        return NamedTarget(self._identifier, action)

    def action(
        self,
        name: str,
        endpoint: EndpointSpec,
        options: RouteOptions | None = None,
    ) -> RouteBuilder:
        """Queue a builder for one action with the group defaults merged in.

        The group prefix is always prepended; it cannot be overridden.
        """
        merged = merge_options(self._options, options or RouteOptions())
        builder = endpoint.builder(self._table, self.target(name), merged).prefix(self._prefix)
        self._pending.setdefault(name, []).append(builder)
        return builder

    def build(self) -> list[RouteRecord]:
        """Compile every queued builder without touching the table.

        Raises:
            RuleSyntaxError: If a rule is malformed.
            ConstraintError: If a constraint fragment is not a valid regex.
        """
        return [builder.build() for builders in self._pending.values() for builder in builders]

    def loading(self) -> list[RouteRecord]:
        """Install every queued builder and empty the queue.

        All builders are compiled before the first insert, so a malformed
        rule leaves the table untouched.
        """
        return self.commit(self.build())

    def commit(self, records: list[RouteRecord]) -> list[RouteRecord]:
        """Insert compiled records into the table and empty the queue."""
        for record in records:
            self._table.insert(record, record.methods, record.domains)
        self._pending = {}

        if records:
            logger.info(
                "Loaded route group",
                extra={
                    "group": self._identifier,
                    "prefix": self._prefix or "(none)",
                    "route_count": len(records),
                },
            )
        return records


class Resource(Controller):
    """Group scope mapping the conventional REST action names to routes.

    Action names outside RESTFUL_ACTIONS are ignored.
    """

    def register(self, name: str, options: RouteOptions | None = None) -> RouteBuilder | None:
        """Queue the REST route for an action name, if it is one."""
        if name not in RESTFUL_ACTIONS:
            logger.debug(
                "Ignoring non-resource action",
                extra={"group": self.identifier, "action": name},
            )
            return None

        rule, methods = RESTFUL_ACTIONS[name]
        builder = self.action(name, EndpointSpec(rule, methods), options)
        if name in RESOURCE_ID_ACTIONS:
            builder.where(id=RESOURCE_ID_CONSTRAINT)
        return builder

"""Route builder: accumulates one endpoint's configuration before install."""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from declarative_routing.core.options import RouteOptions, normalize_middleware, validate_cache
from declarative_routing.core.route import RouteRecord, Target
from declarative_routing.core.table import RouteTable

logger = logging.getLogger(__name__)

# Suffixes starting with this mark are file extensions, not path segments
EXTENSION_MARK = "."


class RouteBuilder:
    """Mutable accumulator for a single route.

    Configuration calls return the builder so they can be chained.
    install() compiles the route and inserts it into the table.

    Example:
        router.get("users/{id}", show_user).where(id=r"\\d+").cache(60).install()
    """

    def __init__(
        self,
        table: RouteTable,
        methods: Iterable[str],
        rule: str,
        target: Target,
    ) -> None:
        self._table = table
        self._methods = tuple(methods)
        self._rule = rule.strip("/")
        self._target = target
        self._constraints: dict[str, str] = {}
        self._prefixes: list[str] = []
        self._suffix = ""
        self._domains: list[str] = []
        self._middleware: dict[str, tuple[str, ...]] = {}
        self._cache = 0

    def where(self, constraints: Mapping[str, str] | None = None, **kwargs: str) -> "RouteBuilder":
        """Add placeholder constraints; later values replace earlier ones."""
        self._constraints.update(constraints or {})
        self._constraints.update(kwargs)
        return self

    def prefix(self, prefix: str) -> "RouteBuilder":
        """Append a path prefix segment. Empty prefixes are dropped at install."""
        self._prefixes.append(prefix.strip("/"))
        return self

    def suffix(self, suffix: str) -> "RouteBuilder":
        self._suffix = suffix
        return self

    def domains(self, *domains: str) -> "RouteBuilder":
        self._domains.extend(domains)
        return self

    def middleware(self, middleware: Any) -> "RouteBuilder":
        self._middleware.update(normalize_middleware(middleware, source=f"route '{self._rule}'"))
        return self

    def cache(self, duration: int) -> "RouteBuilder":
        self._cache = validate_cache(duration, source=f"route '{self._rule}'")
        return self

    def options(self, options: RouteOptions) -> "RouteBuilder":
        """Apply every set value of a RouteOptions."""
        if options.domains:
            self.domains(*options.domains)
        if options.middleware:
            self._middleware.update(options.middleware)
        if options.constraints:
            self.where(options.constraints)
        if options.has_suffix:
            self.suffix(options.suffix or "")
        if options.has_cache:
            self.cache(options.cache or 0)
        return self

    @property
    def methods(self) -> tuple[str, ...]:
        return self._methods

    @property
    def target(self) -> Target:
        return self._target

    @property
    def full_rule(self) -> str:
        """Non-empty prefixes, the rule and the suffix joined by "/".

        A suffix starting with "." is an extension and attaches without "/".
        """
        rule = "/".join(part for part in (*self._prefixes, self._rule) if part)
        suffix = self._suffix.strip("/")
        if suffix.startswith(EXTENSION_MARK):
            return rule + suffix
        return "/".join(part for part in (rule, suffix) if part)

    def build(self) -> RouteRecord:
        """Compile the accumulated configuration.

        Raises:
            RuleSyntaxError: If the rule is malformed.
            ConstraintError: If a constraint fragment is not a valid regex.
        """
        return RouteRecord.compile(
            self.full_rule,
            self._target,
            constraints=self._constraints,
            methods=tuple(method.upper() for method in self._methods),
            domains=tuple(self._domains),
            middleware=MappingProxyType(dict(self._middleware)),
            cache_hint=self._cache,
        )

    def install(self) -> RouteRecord:
        """Compile the route and insert it for every method and domain."""
        record = self.build()
        self._table.insert(record, self._methods, self._domains)
        logger.debug(
            "Installed route",
            extra={
                "rule": record.rule,
                "target": str(record.target),
                "middleware_count": len(record.middleware),
                "cache_hint": record.cache_hint,
            },
        )
        return record

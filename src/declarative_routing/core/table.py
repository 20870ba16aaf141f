"""Route table indexed by domain and method.

Routes are inserted during application bootstrap and looked up per
request afterwards. The table is not synchronized: finish installation
(and optionally call freeze()) before serving concurrent lookups.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from declarative_routing.core.route import WILDCARD, RouteMatch, RouteRecord
from declarative_routing.exceptions import RouteTableFrozenError, RouteValidationError

logger = logging.getLogger(__name__)


def _candidates(value: str) -> tuple[str, ...]:
    """Exact token first, wildcard as fallback."""
    return (WILDCARD,) if value == WILDCARD else (value, WILDCARD)


def _tokens(values: Iterable[str] | None, *, upper: bool = False) -> tuple[str, ...]:
    tokens = tuple(values or ())
    for token in tokens:
        if not isinstance(token, str) or not token:
            raise RouteValidationError(f"Route tokens must be non-empty strings, got {token!r}")
    if upper:
        tokens = tuple(token.upper() for token in tokens)
    return tokens or (WILDCARD,)


class RouteTable:
    """Registry of compiled routes keyed by (domain, method, rule).

    Re-inserting a record with the same rule in the same (domain, method)
    slot replaces the previous one. Lookups scan each slot in insertion
    order and return the first match.

    Usage::

        table = RouteTable()
        table.insert(RouteRecord.compile("users/{id}", show_user), ["GET"])
        match = table.search("/users/42", "GET")
    """

    __slots__ = ("_frozen", "_slots")

    def __init__(self) -> None:
        # domain -> method -> rule -> record
        self._slots: dict[str, dict[str, dict[str, RouteRecord]]] = {}
        self._frozen = False

    def insert(
        self,
        record: RouteRecord,
        methods: Iterable[str] | None = None,
        domains: Iterable[str] | None = None,
    ) -> None:
        """Store a record under every (domain, method) pair.

        Args:
            record: The compiled route.
            methods: HTTP methods; None or empty means any method.
            domains: Host names; None or empty means any host.

        Raises:
            RouteTableFrozenError: If the table has been frozen.
            RouteValidationError: If a method or domain token is empty.
        """
        if self._frozen:
            raise RouteTableFrozenError(
                f"Cannot insert route '{record.rule}': route table is frozen"
            )

        method_tokens = _tokens(methods, upper=True)
        domain_tokens = _tokens(domains)

        for domain in domain_tokens:
            by_method = self._slots.setdefault(domain, {})
            for method in method_tokens:
                by_rule = by_method.setdefault(method, {})
                if record.rule in by_rule:
                    # Keep the slot position of the replaced record
                    logger.debug(
                        "Replacing route",
                        extra={"domain": domain, "method": method, "rule": record.rule},
                    )
                by_rule[record.rule] = record

        logger.debug(
            "Inserted route",
            extra={
                "rule": record.rule,
                "target": str(record.target),
                "methods": method_tokens,
                "domains": domain_tokens,
            },
        )

    def search(self, path: str, method: str = WILDCARD, domain: str = WILDCARD) -> RouteMatch | None:
        """Resolve a request to the first matching route.

        Exact domain is tried before the wildcard domain, and within a
        domain the exact method before the wildcard method. Never raises.

        Args:
            path: Request path; leading and trailing "/" are ignored.
            method: HTTP method, or "*".
            domain: Request host, or "*".

        Returns:
            RouteMatch on success, None when no route matches.
        """
        path = path.strip("/")
        method = method.upper()

        for domain_key in _candidates(domain):
            by_method = self._slots.get(domain_key)
            if by_method is None:
                continue
            for method_key in _candidates(method):
                for record in by_method.get(method_key, {}).values():
                    params = record.match(path)
                    if params is not None:
                        return RouteMatch(target=record.target, params=params, route=record)

        logger.debug(
            "No route matched",
            extra={"path": path, "method": method, "domain": domain},
        )
        return None

    def snapshot(self) -> Mapping[str, Mapping[str, Mapping[str, RouteRecord]]]:
        """Return a read-only view of domain -> method -> rule -> record."""
        return MappingProxyType(
            {
                domain: MappingProxyType(
                    {method: MappingProxyType(dict(rules)) for method, rules in by_method.items()}
                )
                for domain, by_method in self._slots.items()
            }
        )

    @property
    def routes(self) -> list[RouteRecord]:
        """Return every unique record in insertion order."""
        seen: set[int] = set()
        result: list[RouteRecord] = []
        for by_method in self._slots.values():
            for rules in by_method.values():
                for record in rules.values():
                    if id(record) not in seen:
                        seen.add(id(record))
                        result.append(record)
        return result

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject further inserts. Lookups are unaffected."""
        self._frozen = True

    def clear(self) -> None:
        """Drop every record and unfreeze the table."""
        self._slots = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self.routes)

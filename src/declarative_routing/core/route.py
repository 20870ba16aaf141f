"""Compiled route records and lookup results."""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias

from declarative_routing.core.parser import compile_rule

# Domain or method token matching any request
WILDCARD = "*"


@dataclass(frozen=True)
class NamedTarget:
    """A dispatch target naming a group action instead of holding a callable.

    Attributes:
        classname: Dotted identifier of the group (usually module.Class).
        action: Name of the action (method) inside the group.
    """

    classname: str
    action: str

    def __str__(self) -> str:
        return f"{self.classname}::{self.action}"


Target: TypeAlias = NamedTarget | Callable[..., Any]


@dataclass(frozen=True)
class RouteRecord:
    """An immutable compiled route.

    Created by RouteBuilder.build() and stored in a RouteTable.

    Attributes:
        rule: Full literal rule (prefixes, base rule and suffix joined by "/").
        target: Dispatch handle returned on a successful lookup.
        methods: HTTP method tokens, or ("*",) for any method.
        domains: Host names, or ("*",) for any host.
        pattern: Anchored matcher compiled from the rule and constraints.
        prefixes: Placeholder name -> delimiter stripped from captured values.
        middleware: Ordered middleware name -> argument tuple.
        cache_hint: Cache duration hint in seconds (0 = no hint).
    """

    rule: str
    target: Target
    pattern: re.Pattern[str]
    methods: tuple[str, ...] = (WILDCARD,)
    domains: tuple[str, ...] = (WILDCARD,)
    prefixes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    middleware: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    cache_hint: int = 0

    @classmethod
    def compile(
        cls,
        rule: str,
        target: Target,
        *,
        constraints: Mapping[str, str] | None = None,
        methods: tuple[str, ...] = (WILDCARD,),
        domains: tuple[str, ...] = (WILDCARD,),
        middleware: Mapping[str, tuple[str, ...]] | None = None,
        cache_hint: int = 0,
    ) -> "RouteRecord":
        """Compile a rule and wrap it in a RouteRecord.

        Raises:
            RuleSyntaxError: If the rule is malformed.
            ConstraintError: If a constraint fragment is not a valid regex.
        """
        compiled = compile_rule(rule, constraints)
        return cls(
            rule=rule,
            target=target,
            pattern=compiled.pattern,
            methods=methods or (WILDCARD,),
            domains=domains or (WILDCARD,),
            prefixes=compiled.prefixes,
            middleware=MappingProxyType(dict(middleware or {})),
            cache_hint=cache_hint,
        )

    def match(self, path: str) -> dict[str, str] | None:
        """Match a normalized path and return its parameters.

        Values of delimiter-form placeholders lose one leading delimiter.
        Returns None when the path does not match.
        """
        found = self.pattern.match(path)
        if found is None:
            return None

        params: dict[str, str] = {}
        for name, value in found.groupdict(default="").items():
            delimiter = self.prefixes.get(name)
            if delimiter and value.startswith(delimiter):
                value = value[1:]
            params[name] = value
        return params

    def __str__(self) -> str:
        return self.rule


@dataclass(frozen=True)
class RouteMatch:
    """Result of a successful route lookup."""

    target: Target
    params: dict[str, str]
    route: RouteRecord

    @property
    def middleware(self) -> Mapping[str, tuple[str, ...]]:
        return self.route.middleware

    @property
    def cache_hint(self) -> int:
        return self.route.cache_hint

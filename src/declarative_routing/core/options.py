"""Route options and the group/action merge policy.

RouteOptions is the configuration value shared by groups, actions and
builders. Merging follows a fixed policy per field:

- domains:     a non-empty action list replaces the group list
- middleware:  group entries first, action entries added on top
- constraints: group entries first, action entries added on top
- suffix:      action value wins unless it is unset (None or "")
- cache:       action value wins unless it is unset (None or 0)
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from declarative_routing.exceptions import RouteValidationError


def normalize_middleware(
    middleware_attr: Any,
    *,
    source: str = "",
) -> dict[str, tuple[str, ...]]:
    """Normalize a middleware value to an ordered name -> arguments mapping.

    Accepts: None, a single name, a sequence of names, or a mapping of
    name -> arguments where arguments are a comma-separated string or a
    sequence of strings. Mixed sequences may contain single-entry mappings.

    Args:
        middleware_attr: The middleware value to normalize.
        source: Context for error messages (e.g., "class UserController").

    Raises:
        RouteValidationError: If middleware_attr is not a valid type.

    Examples:
        "auth"                          -> {"auth": ()}
        ["auth", "csrf"]                -> {"auth": (), "csrf": ()}
        {"throttle": "60,1"}            -> {"throttle": ("60", "1")}
        ["auth", {"role": ["admin"]}]   -> {"auth": (), "role": ("admin",)}
    """
    prefix = f"{source}: " if source else ""

    if middleware_attr is None:
        return {}
    if isinstance(middleware_attr, str):
        return {middleware_attr: ()}
    if isinstance(middleware_attr, Mapping):
        return {
            str(name): _middleware_arguments(arguments, prefix=prefix)
            for name, arguments in middleware_attr.items()
        }
    if isinstance(middleware_attr, Sequence):
        result: dict[str, tuple[str, ...]] = {}
        for entry in middleware_attr:
            if isinstance(entry, str):
                result[entry] = ()
            elif isinstance(entry, Mapping):
                result.update(normalize_middleware(entry, source=source))
            else:
                raise RouteValidationError(
                    f"{prefix}middleware entries must be names or mappings, "
                    f"got {type(entry).__name__}"
                )
        return result
    raise RouteValidationError(
        f"{prefix}middleware must be a str, sequence or mapping, "
        f"got {type(middleware_attr).__name__}"
    )


def _middleware_arguments(arguments: Any, *, prefix: str) -> tuple[str, ...]:
    if arguments is None:
        return ()
    if isinstance(arguments, str):
        return tuple(arguments.split(","))
    if isinstance(arguments, Sequence):
        return tuple(str(argument) for argument in arguments)
    raise RouteValidationError(
        f"{prefix}middleware arguments must be a str or sequence, "
        f"got {type(arguments).__name__}"
    )


def validate_cache(duration: Any, *, source: str = "") -> int:
    """Check that a cache hint is a non-negative integer."""
    prefix = f"{source}: " if source else ""
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise RouteValidationError(
            f"{prefix}cache duration must be an int, got {type(duration).__name__}"
        )
    if duration < 0:
        raise RouteValidationError(f"{prefix}cache duration must not be negative, got {duration}")
    return duration


@dataclass(frozen=True)
class RouteOptions:
    """Configuration shared by a group, an action or a single route.

    None for suffix and cache means "not set". For compatibility the
    merge also treats "" and 0 as not set, so an action cannot clear a
    suffix or cache hint declared by its group.

    Attributes:
        domains: Host names the route is restricted to (empty = any host).
        middleware: Ordered middleware name -> argument tuple.
        constraints: Placeholder name -> regex fragment.
        suffix: Path segment appended after the rule.
        cache: Cache duration hint in seconds.
    """

    domains: tuple[str, ...] = ()
    middleware: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    constraints: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    suffix: str | None = None
    cache: int | None = None

    @classmethod
    def create(
        cls,
        *,
        domains: Sequence[str] | str = (),
        middleware: Any = None,
        constraints: Mapping[str, str] | None = None,
        suffix: str | None = None,
        cache: int | None = None,
        source: str = "",
    ) -> "RouteOptions":
        """Build RouteOptions from loosely typed values, validating each."""
        if isinstance(domains, str):
            domains = (domains,)
        if cache is not None:
            validate_cache(cache, source=source)
        return cls(
            domains=tuple(domains),
            middleware=MappingProxyType(normalize_middleware(middleware, source=source)),
            constraints=MappingProxyType(dict(constraints or {})),
            suffix=suffix,
            cache=cache,
        )

    @property
    def has_suffix(self) -> bool:
        return bool(self.suffix)

    @property
    def has_cache(self) -> bool:
        return bool(self.cache)


def merge_options(group: RouteOptions, action: RouteOptions) -> RouteOptions:
    """Merge group defaults with action-level overrides.

    Args:
        group: Defaults declared on the group.
        action: Values declared on the action.

    Returns:
        A new RouteOptions with the merged values.

    Examples:
        group suffix ".json", action suffix ""   -> ".json"
        group cache 30, action cache 0            -> 30
        group cache 30, action cache 5            -> 5
        group domains ("a",), action domains ()   -> ("a",)
        group domains ("a",), action ("b",)       -> ("b",)
    """
    return RouteOptions(
        domains=action.domains or group.domains,
        middleware=MappingProxyType({**group.middleware, **action.middleware}),
        constraints=MappingProxyType({**group.constraints, **action.constraints}),
        suffix=action.suffix if action.has_suffix else group.suffix,
        cache=action.cache if action.has_cache else group.cache,
    )

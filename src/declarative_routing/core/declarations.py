"""Routing declarations attached to classes and functions.

Decorators only record metadata on the decorated object; nothing is
installed until the object is handed to Router.install_class() or
Router.install_function().

Example:
    @resource()
    @suffix(".json")
    @cache(30)
    class Users:
        def index(self): ...

        @middleware(["auth"])
        def show(self, id: str): ...

    @endpoint("health", ["GET"])
    def health(): ...
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal, TypeVar

from declarative_routing.core.endpoint import DEFAULT_METHODS, EndpointSpec
from declarative_routing.core.options import RouteOptions, normalize_middleware, validate_cache
from declarative_routing.exceptions import DeclarationError

T = TypeVar("T")

GroupKind = Literal["controller", "resource"]

_GROUPS_ATTR = "__routing_groups__"
_ENDPOINTS_ATTR = "__routing_endpoints__"
_OPTIONS_ATTR = "__routing_options__"


@dataclass(frozen=True)
class GroupDeclaration:
    """A group declared on a class.

    Attributes:
        kind: "controller" or "resource".
        prefix: Explicit prefix, or number of trailing identifier segments.
    """

    kind: GroupKind
    prefix: str | int = 1


def _own(obj: Any, attr: str, default: T) -> T:
    """Read a declaration stored on obj itself, ignoring base classes."""
    return vars(obj).get(attr, default) if hasattr(obj, "__dict__") else default


def _check_prefix(prefix: Any, decorator: str) -> None:
    if isinstance(prefix, bool) or not isinstance(prefix, (str, int)):
        raise DeclarationError(
            f"{decorator} prefix must be a str or int, got {type(prefix).__name__}. "
            f"Hint: write {decorator}() with parentheses."
        )


def _group(kind: GroupKind, prefix: str | int) -> Callable[[type], type]:
    _check_prefix(prefix, f"@{kind}")

    def decorator(cls: type) -> type:
        if not isinstance(cls, type):
            raise DeclarationError(
                f"@{kind} can only decorate classes, got {type(cls).__name__}"
            )
        groups = [g for g in _own(cls, _GROUPS_ATTR, ()) if g.kind != kind]
        setattr(cls, _GROUPS_ATTR, (*groups, GroupDeclaration(kind, prefix)))
        return cls

    return decorator


def controller(prefix: str | int = 1) -> Callable[[type], type]:
    """Declare a class as a controller group.

    Every public method becomes an action. Methods without @endpoint map
    to a rule equal to their name.
    """
    return _group("controller", prefix)


def resource(prefix: str | int = 1) -> Callable[[type], type]:
    """Declare a class as a REST resource group.

    Public methods named index, create, store, show, edit, update or
    destroy become routes; other methods are ignored.
    """
    return _group("resource", prefix)


def endpoint(
    rule: str,
    methods: Iterable[str] | str = DEFAULT_METHODS,
) -> Callable[[T], T]:
    """Declare a rule and method set for a function or method.

    May be stacked; endpoints keep top-to-bottom declaration order.
    """
    spec = EndpointSpec.of(rule, methods)

    def decorator(func: T) -> T:
        if not callable(func) or isinstance(func, type):
            raise DeclarationError(
                f"@endpoint can only decorate functions, got {type(func).__name__}"
            )
        # Decorators apply bottom-up
        setattr(func, _ENDPOINTS_ATTR, (spec, *_own(func, _ENDPOINTS_ATTR, ())))
        return func

    return decorator


def _component(name: str, update: Callable[[dict[str, Any]], None]) -> Callable[[T], T]:
    def decorator(obj: T) -> T:
        if not callable(obj):
            raise DeclarationError(
                f"@{name} can only decorate classes or functions, got {type(obj).__name__}"
            )
        options = dict(_own(obj, _OPTIONS_ATTR, {}))
        update(options)
        setattr(obj, _OPTIONS_ATTR, options)
        return obj

    return decorator


def domains(*hosts: str) -> Callable[[T], T]:
    """Restrict routes to the given host names."""

    def update(options: dict[str, Any]) -> None:
        options["domains"] = (*options.get("domains", ()), *hosts)

    return _component("domains", update)


def middleware(value: Any) -> Callable[[T], T]:
    """Tag routes with middleware names and arguments."""
    normalized = normalize_middleware(value, source="@middleware")

    def update(options: dict[str, Any]) -> None:
        options["middleware"] = {**options.get("middleware", {}), **normalized}

    return _component("middleware", update)


def where(constraints: Mapping[str, str] | None = None, **kwargs: str) -> Callable[[T], T]:
    """Constrain placeholders with regex fragments."""
    merged = {**(constraints or {}), **kwargs}

    def update(options: dict[str, Any]) -> None:
        options["constraints"] = {**options.get("constraints", {}), **merged}

    return _component("where", update)


def suffix(text: str) -> Callable[[T], T]:
    """Append a suffix (segment or ".ext") to route rules."""

    def update(options: dict[str, Any]) -> None:
        options["suffix"] = text

    return _component("suffix", update)


def cache(seconds: int) -> Callable[[T], T]:
    """Attach a cache duration hint in seconds."""
    validate_cache(seconds, source="@cache")

    def update(options: dict[str, Any]) -> None:
        options["cache"] = seconds

    return _component("cache", update)


def get_groups(cls: type) -> tuple[GroupDeclaration, ...]:
    return _own(cls, _GROUPS_ATTR, ())


def get_endpoints(obj: Any) -> tuple[EndpointSpec, ...]:
    return _own(obj, _ENDPOINTS_ATTR, ())


def get_options(obj: Any) -> RouteOptions:
    """Collect the component declarations of obj into RouteOptions."""
    return RouteOptions.create(**_own(obj, _OPTIONS_ATTR, {}))

"""FastAPI adapter for declarative routing.

Serves a RouteTable through a single catch-all FastAPI route: each
request is resolved with RouteTable.search() and dispatched to the
matched target with its path parameters as keyword arguments.
"""

import importlib
import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from declarative_routing.core.route import WILDCARD, NamedTarget, Target
from declarative_routing.core.table import RouteTable
from declarative_routing.exceptions import RouteValidationError

logger = logging.getLogger(__name__)

# HTTP methods forwarded to the route table
SUPPORTED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


def _import_attribute(dotted: str) -> Any:
    """Import the longest importable module prefix of dotted, then walk attributes."""
    parts = dotted.split(".")
    for split in range(len(parts) - 1, 0, -1):
        try:
            obj = importlib.import_module(".".join(parts[:split]))
        except ImportError:
            continue
        for attribute in parts[split:]:
            obj = getattr(obj, attribute)
        return obj
    raise ImportError(f"No importable module in '{dotted}'")


def resolve_target(target: Target) -> Callable[..., Any]:
    """Turn a route target into a callable.

    Callables are returned unchanged. A NamedTarget is resolved by
    importing its class, instantiating it without arguments and binding
    the action method.

    Raises:
        RouteValidationError: If a NamedTarget cannot be resolved.
    """
    if not isinstance(target, NamedTarget):
        return target

    try:
        cls = _import_attribute(target.classname)
        return getattr(cls(), target.action)
    except (ImportError, AttributeError, TypeError) as exc:
        raise RouteValidationError(f"Cannot resolve route target {target}: {exc}") from exc


async def _call(handler: Callable[..., Any], params: dict[str, str]) -> Any:
    if inspect.iscoroutinefunction(handler):
        return await handler(**params)
    return await run_in_threadpool(handler, **params)


def create_router_from_table(
    table: RouteTable,
    *,
    prefix: str = "",
    resolver: Callable[[Target], Callable[..., Any]] = resolve_target,
    methods: Sequence[str] = SUPPORTED_METHODS,
) -> APIRouter:
    """Create a FastAPI APIRouter that dispatches through a RouteTable.

    Paths are searched relative to prefix, with the request host as the
    domain. The RouteMatch is stored on request.state.route so that
    application middleware can read the route's middleware tags.
    Middleware tags are not executed here.

    Args:
        table: The populated route table.
        prefix: Optional URL prefix for the catch-all route.
        resolver: Maps a route target to a callable.
        methods: HTTP methods accepted by the catch-all route.

    Returns:
        A FastAPI APIRouter with one catch-all route.

    Example:
        from fastapi import FastAPI
        from declarative_routing import Router
        from declarative_routing.fastapi import create_router_from_table

        router = Router()
        router.get("users/{id}", show_user).where(id=r"\\d+").install()

        app = FastAPI()
        app.include_router(create_router_from_table(router.table))
    """
    router = APIRouter(prefix=prefix)

    async def dispatch(request: Request, path: str) -> Response:
        domain = request.url.hostname or WILDCARD
        match = table.search(path, request.method, domain)

        if match is None:
            raise HTTPException(
                status_code=404,
                detail=f"No route matches {request.method} /{path}",
            )

        request.state.route = match
        logger.debug(
            "Dispatching route",
            extra={
                "method": request.method,
                "path": path,
                "domain": domain,
                "rule": match.route.rule,
                "target": str(match.target),
            },
        )

        result = await _call(resolver(match.target), match.params)
        response = result if isinstance(result, Response) else JSONResponse(jsonable_encoder(result))

        if match.cache_hint > 0 and "cache-control" not in response.headers:
            response.headers["cache-control"] = f"max-age={match.cache_hint}"
        return response

    router.add_api_route(
        "/{path:path}",
        endpoint=dispatch,
        methods=list(methods),
        include_in_schema=False,
    )

    logger.info(
        "Created route table router",
        extra={"route_count": len(table), "prefix": prefix or "(none)"},
    )
    return router

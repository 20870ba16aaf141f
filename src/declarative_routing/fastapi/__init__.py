"""FastAPI adapter for declarative routing."""

from declarative_routing.fastapi.router import create_router_from_table, resolve_target

__all__ = ["create_router_from_table", "resolve_target"]

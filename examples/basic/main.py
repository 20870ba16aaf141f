"""Basic example demonstrating declarative-routing.

This minimal FastAPI application declares a resource, a controller and a
free-standing function, installs them into a Router and serves the
resulting route table through create_router_from_table().

Run with:
    uvicorn main:app --reload

Available endpoints:
    GET    /health                 - Health check
    GET    /users                  - List all users
    POST   /users                  - Create a new user
    GET    /users/{id}             - Get user by ID (positive integers only)
    DELETE /users/{id}             - Delete user
    GET    /reports/daily.csv      - Daily report, cache hint 300s
    GET    /reports/daily-{day?}   - Daily report for one day
"""

from fastapi import FastAPI

from declarative_routing import Router, cache, controller, endpoint, resource, suffix, where
from declarative_routing.fastapi import create_router_from_table

_USERS = {1: {"id": 1, "name": "Ada"}, 2: {"id": 2, "name": "Linus"}}


@resource("users")
class Users:
    def index(self) -> list[dict]:
        return list(_USERS.values())

    def store(self) -> dict:
        return {"created": True}

    def show(self, id: str) -> dict:
        return _USERS.get(int(id), {})

    def destroy(self, id: str) -> dict:
        return {"deleted": int(id)}


@controller("reports")
class Reports:
    @endpoint("daily", ["GET"])
    @suffix(".csv")
    @cache(300)
    def daily_csv(self) -> dict:
        return {"format": "csv"}

    @endpoint("daily-{day?}", ["GET"])
    @where(day=r"\d{4}\d{2}\d{2}")
    def daily(self, day: str) -> dict:
        return {"day": day or "today"}


@endpoint("health", ["GET"])
def health() -> dict:
    return {"status": "ok"}


router = Router()
router.install_class(Users)
router.install_class(Reports)
router.install_function(health)
router.freeze()

app = FastAPI(title="Basic Example")
app.include_router(create_router_from_table(router.table))

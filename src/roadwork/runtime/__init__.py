"""
Roadwork runtime.

Access scope resolution, the generic CRUD handler, the route generator and
the FastAPI adapter that mounts generated routes.
"""

from roadwork.runtime.access_scope import resolve_access_scope
from roadwork.runtime.api import RoadworkApi
from roadwork.runtime.auth import BearerAuthentication, UserCredentials
from roadwork.runtime.fastapi_adapter import (
    mount_routes,
    register_exception_handlers,
    reply_to_response,
)
from roadwork.runtime.route_generator import RouteGenerator

__all__ = [
    "BearerAuthentication",
    "RoadworkApi",
    "RouteGenerator",
    "UserCredentials",
    "mount_routes",
    "register_exception_handlers",
    "reply_to_response",
    "resolve_access_scope",
]

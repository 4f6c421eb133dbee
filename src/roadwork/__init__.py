"""
Roadwork - CRUD REST routes for data models, gated by roles.

Given a model and a small configuration, roadwork generates the find, create,
update, delete and count routes for it, wires each route to a pluggable
authentication layer, and dispatches requests to either the unscoped or the
owner-scoped model call depending on the caller's roles.
"""

from roadwork._version import get_version as _get_version

__version__ = _get_version()

from roadwork.core.errors import ConfigurationError, RecordNotFoundError, RoadworkError
from roadwork.runtime import (
    BearerAuthentication,
    RoadworkApi,
    RouteGenerator,
    UserCredentials,
    resolve_access_scope,
)
from roadwork.specs import AccessScope, GenerateOptions, RouteDescriptor

__all__ = [
    "AccessScope",
    "BearerAuthentication",
    "ConfigurationError",
    "GenerateOptions",
    "RecordNotFoundError",
    "RoadworkApi",
    "RoadworkError",
    "RouteDescriptor",
    "RouteGenerator",
    "UserCredentials",
    "resolve_access_scope",
]

"""
Roadwork specification types.

Framework-neutral types shared by the route generator and its adapters:
access scopes, auth contracts, the model contract, options and descriptors.
"""

from roadwork.specs.access import EVERYONE_ROLE, OWNER_ROLE, AccessScope
from roadwork.specs.auth import Authentication, AuthRequirement, Credentials
from roadwork.specs.model import CrudModel
from roadwork.specs.routes import (
    CrudOperation,
    GenerateOptions,
    GeneratorOptions,
    HttpMethod,
    Reply,
    RouteDescriptor,
    RouteHandler,
    RouteOptions,
    RouteRequest,
    RoutesOptions,
)

__all__ = [
    "AccessScope",
    "AuthRequirement",
    "Authentication",
    "Credentials",
    "CrudModel",
    "CrudOperation",
    "EVERYONE_ROLE",
    "GenerateOptions",
    "GeneratorOptions",
    "HttpMethod",
    "OWNER_ROLE",
    "Reply",
    "RouteDescriptor",
    "RouteHandler",
    "RouteOptions",
    "RouteRequest",
    "RoutesOptions",
]

"""
Generic route handler.

Every generated CRUD route shares one handler protocol; operations differ
only in the pair of model calls they dispatch to. ``create_operation_handler``
builds that handler from an ``OperationCalls`` descriptor:

1. take the caller's scope from the request credentials, but only when
   authentication is registered and the route restricts roles
2. resolve the access scope
3. dispatch to the unscoped call, the owner-scoped call, or reply unauthorized
4. await the model and turn the outcome, success or failure, into one Reply
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Collection, Mapping
from dataclasses import dataclass
from typing import Any

from roadwork.core.errors import RoadworkError
from roadwork.runtime.logging import log_with_context
from roadwork.specs.access import AccessScope
from roadwork.specs.auth import Authentication
from roadwork.specs.routes import CrudOperation, Reply, RouteHandler, RouteRequest

logger = logging.getLogger(__name__)

# Query parameters consumed by pagination and token auth, never used as filters.
RESERVED_QUERY_PARAMS = frozenset({"limit", "offset", "access_token"})

MAX_PAGE_SIZE = 20

AllAccessCall = Callable[[RouteRequest], Awaitable[Any]]
OwnerAccessCall = Callable[[RouteRequest, Any], Awaitable[Any]]
ScopeResolver = Callable[[Any, Collection[str] | None], Any]


class InvalidRequestError(RoadworkError):
    """Raised by an operation call when request parameters are unusable."""

    status_code = 400


@dataclass(frozen=True)
class OperationCalls:
    """The two model calls an operation dispatches to, and how to reply."""

    all_access: AllAccessCall
    owner_access: OwnerAccessCall
    respond: Callable[[Any], Reply] = Reply.ok


# =============================================================================
# Request helpers
# =============================================================================


def filter_query(query: Mapping[str, Any]) -> dict[str, Any]:
    """Query parameters to forward to the model as a filter."""
    return {k: v for k, v in query.items() if k not in RESERVED_QUERY_PARAMS}


def parse_pagination(request: RouteRequest) -> tuple[int, int]:
    """Read ``(offset, limit)`` from the path and query of a pagination request."""
    raw_offset = request.params.get("offset", 0)
    raw_limit = request.query.get("limit", MAX_PAGE_SIZE)
    try:
        offset = int(raw_offset)
        limit = int(raw_limit)
    except (TypeError, ValueError) as e:
        raise InvalidRequestError("offset and limit must be integers") from e
    if offset < 0:
        raise InvalidRequestError("offset must not be negative")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise InvalidRequestError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return offset, limit


# =============================================================================
# Handler Factory
# =============================================================================


def create_operation_handler(
    operation: CrudOperation,
    calls: OperationCalls,
    *,
    allowed_roles: Collection[str] | None,
    authentication: Authentication | None,
    resolve: ScopeResolver,
) -> RouteHandler:
    """
    Create the request handler for one generated route.

    Args:
        operation: Operation the route serves (for logging)
        calls: Unscoped and owner-scoped model calls
        allowed_roles: Roles the route allows, None for a public route
        authentication: Registered authentication plugin, if any
        resolve: Access scope resolver

    Returns:
        Coroutine function taking a RouteRequest and returning exactly one Reply
    """
    scope_checked = authentication is not None and bool(allowed_roles)

    async def handler(request: RouteRequest) -> Reply:
        credentials = request.credentials if scope_checked else None
        user_scope: Any = None
        access_scope: Any = None

        try:
            if credentials is not None:
                user_scope = credentials.scope()
            access_scope = resolve(user_scope, allowed_roles)

            match access_scope:
                case AccessScope.ALL_ACCESS:
                    result = await calls.all_access(request)
                case AccessScope.OWNER_ACCESS:
                    owner_id = credentials.identity() if credentials is not None else None
                    if owner_id is None:
                        return Reply.unauthorized("Owner access requires an identity")
                    result = await calls.owner_access(request, owner_id)
                case AccessScope.NO_ACCESS:
                    logger.debug("Denied %s for scope %r", operation.value, user_scope)
                    return Reply.unauthorized()
                case _:
                    # Not an AccessScope; only reachable through a broken resolver.
                    logger.warning(
                        "Unrecognised access scope %r on %s, using unscoped call",
                        access_scope,
                        operation.value,
                    )
                    result = await calls.all_access(request)
        except Exception as e:
            reply = Reply.failure(e)
            log_with_context(
                logger,
                logging.WARNING if reply.status_code >= 500 else logging.DEBUG,
                f"{operation.value} failed: {e}",
                exc_info=reply.status_code >= 500,
                operation=operation.value,
                access_scope=getattr(access_scope, "value", access_scope),
                status=reply.status_code,
            )
            return reply

        return calls.respond(result)

    handler.__name__ = f"{operation.value}_handler"
    return handler

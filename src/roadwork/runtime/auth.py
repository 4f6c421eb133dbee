"""
Bearer token authentication and the FastAPI scope dependency.

``BearerAuthentication`` is the stock authentication plugin: it reads a token
from the ``Authorization: Bearer`` header (or the ``access_token`` query
parameter) and hands it to an application-supplied ``validate`` callable.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request

from roadwork.core.errors import AuthorizationError
from roadwork.specs.auth import Authentication, AuthRequirement, Credentials

TokenValidator = Callable[[str], "Credentials | None | Awaitable[Credentials | None]"]


@dataclass(frozen=True)
class UserCredentials:
    """Credentials of an authenticated user."""

    user_id: Any
    roles: tuple[str, ...] = field(default_factory=tuple)

    def scope(self) -> tuple[str, ...]:
        return self.roles

    def identity(self) -> Any:
        return self.user_id


class BearerAuthentication:
    """
    Authenticate requests with a bearer token.

    Example:
        ```python
        async def validate(token: str) -> UserCredentials | None:
            user = await users.find_by_token(token)
            return UserCredentials(user.id, tuple(user.roles)) if user else None

        api.add_authentication(BearerAuthentication(validate))
        ```
    """

    def __init__(self, validate: TokenValidator, strategy_name: str = "bearer"):
        self.validate = validate
        self.strategy_name = strategy_name

    @staticmethod
    def extract_token(request: Request) -> str | None:
        """Token from the Authorization header, falling back to ``access_token``."""
        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
        return request.query_params.get("access_token") or None

    async def authenticate(self, request: Request) -> Credentials | None:
        token = self.extract_token(request)
        if token is None:
            return None
        result = self.validate(token)
        if inspect.isawaitable(result):
            result = await result
        return result


def create_scope_dependency(
    authentication: Authentication,
    requirement: AuthRequirement,
) -> Callable[[Request], Awaitable[Credentials]]:
    """
    Create a FastAPI dependency enforcing a route's auth block.

    The caller must authenticate and hold at least one of the required scope
    tokens. ``$owner`` counts as an ordinary token here; owner filtering
    happens later in the handler. The credentials are stored on
    ``request.state.credentials`` for the endpoint.

    Failures raise AuthorizationError; the handler installed by
    ``register_exception_handlers`` renders it like any other error reply.

    Args:
        authentication: Authentication plugin to run
        requirement: Auth block of the route

    Returns:
        Dependency function
    """

    async def require_scope(request: Request) -> Credentials:
        credentials = await authentication.authenticate(request)
        if credentials is None:
            raise AuthorizationError("Missing authentication", status_code=401)

        granted = credentials.scope()
        granted_roles = {granted} if isinstance(granted, str) else set(granted or ())
        if not granted_roles.intersection(requirement.scope):
            raise AuthorizationError("Insufficient scope", status_code=403)

        request.state.credentials = credentials
        return credentials

    return require_scope

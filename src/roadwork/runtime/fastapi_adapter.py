"""
FastAPI adapter - mounts route descriptors on a FastAPI router.

Each descriptor becomes one FastAPI route whose endpoint converts the
incoming request into a RouteRequest, awaits the descriptor's handler and
renders the Reply. Routes with an auth block get a dependency that
authenticates the caller and checks scope before the endpoint runs.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from roadwork.core.errors import AuthorizationError, ConfigurationError
from roadwork.runtime.auth import create_scope_dependency
from roadwork.specs.auth import Authentication
from roadwork.specs.routes import HttpMethod, Reply, RouteDescriptor, RouteRequest

_BODY_METHODS = (HttpMethod.POST, HttpMethod.PUT)


class _MalformedBody(Exception):
    pass


async def _parse_request_body(request: Request) -> Any:
    """Parse request body as JSON or form data.

    Returns None for an empty body.
    """
    content_type = (request.headers.get("content-type") or "").lower()
    if "application/x-www-form-urlencoded" in content_type or "multipart/form-data" in content_type:
        form = await request.form()
        return dict(form)
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise _MalformedBody(str(e)) from e


def reply_to_response(reply: Reply) -> Response:
    """Render a handler Reply as a FastAPI response."""
    if reply.status_code == 204:
        return Response(status_code=204)
    return JSONResponse(status_code=reply.status_code, content=jsonable_encoder(reply.body))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register roadwork exception handlers on a FastAPI application.

    Handles:
    - AuthorizationError: auth block failures from the scope dependency
      (401/403), rendered in the same body shape as handler replies

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError) -> Response:
        return reply_to_response(Reply.failure(exc))


def _create_endpoint(descriptor: RouteDescriptor) -> Callable[..., Any]:
    async def endpoint(request: Request) -> Response:
        payload = None
        if descriptor.method in _BODY_METHODS:
            try:
                payload = await _parse_request_body(request)
            except _MalformedBody:
                return reply_to_response(Reply.bad_request("Invalid request payload input"))

        route_request = RouteRequest(
            params=dict(request.path_params),
            query=dict(request.query_params),
            payload=payload,
            credentials=getattr(request.state, "credentials", None),
        )
        reply = await descriptor.handler(route_request)
        return reply_to_response(reply)

    endpoint.__name__ = f"{descriptor.operation.value}_{descriptor.path.strip('/').split('/')[0]}"
    return endpoint


def mount_routes(
    router: APIRouter,
    descriptors: Iterable[RouteDescriptor],
    authentication: Authentication | None = None,
    tags: list[str] | None = None,
) -> APIRouter:
    """
    Add one FastAPI route per descriptor.

    Routes without path parameters are added first so that e.g.
    ``GET /tasks/count`` is matched before ``GET /tasks/{id}``.

    Args:
        router: Router to add routes to
        descriptors: Generated route descriptors
        authentication: Plugin enforcing auth blocks
        tags: Optional OpenAPI tags

    Returns:
        The router, for chaining

    Routes with an auth block need the handlers from
    ``register_exception_handlers`` on the application.

    Raises:
        ConfigurationError: A descriptor has an auth block but no
            authentication plugin was given
    """
    ordered = sorted(descriptors, key=lambda d: "{" in d.path)

    for descriptor in ordered:
        dependencies: list[Any] = []
        if descriptor.auth is not None:
            if authentication is None:
                raise ConfigurationError(
                    "Route requires authentication", f"no plugin for {descriptor.full_path}"
                )
            dependencies.append(
                Depends(create_scope_dependency(authentication, descriptor.auth))
            )

        router.add_api_route(
            descriptor.path,
            _create_endpoint(descriptor),
            methods=[descriptor.method.value],
            dependencies=dependencies or None,
            tags=tags or [],
            summary=descriptor.full_path,
        )

    return router

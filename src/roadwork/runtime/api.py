"""
Roadwork Api - generate and mount CRUD routes on a FastAPI application.

Example:
    ```python
    app = FastAPI()
    api = RoadworkApi(app)
    api.add_authentication(BearerAuthentication(validate_token))
    api.generate(users, {"routes": {"delete": {"allowedRoles": ["admin"]}}})
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter

from roadwork.core.errors import ConfigurationError
from roadwork.runtime.fastapi_adapter import mount_routes, register_exception_handlers
from roadwork.runtime.route_generator import RouteGenerator, get_base_route
from roadwork.specs.access import EVERYONE_ROLE
from roadwork.specs.auth import Authentication
from roadwork.specs.routes import GenerateOptions, RouteDescriptor

logger = logging.getLogger(__name__)


class RoadworkApi:
    """Owns the server, the authentication plugin and the generated models."""

    def __init__(self, server: Any, base_path: str = ""):
        if server is None:
            raise ConfigurationError("No http engine given!")

        self.server = server
        register_exception_handlers(server)
        self.authentication: Authentication | None = None
        self.models: list[Any] = []
        self.route_generator = RouteGenerator(options={"base_path": base_path})

    def get_server(self) -> Any:
        return self.server

    def get_models(self) -> list[Any]:
        return self.models

    def get_route_generator(self) -> RouteGenerator:
        return self.route_generator

    def add_authentication(self, authentication: Authentication | None) -> None:
        """
        Register the authentication plugin for routes generated afterwards.

        Registering again replaces the previous plugin.

        Raises:
            ConfigurationError: No plugin given
        """
        if authentication is None:
            raise ConfigurationError("Incorrect authentication")

        self.authentication = authentication
        self.route_generator.add_authentication(authentication)
        logger.info("Using %s authentication", authentication.strategy_name)

    def generate(
        self,
        model: Any,
        options: GenerateOptions | Mapping[str, Any] | None = None,
    ) -> list[RouteDescriptor]:
        """
        Generate the CRUD routes of a model and mount them on the server.

        Raises:
            ConfigurationError: Missing model or malformed options; no routes
                are mounted in that case
        """
        if model is None:
            raise ConfigurationError("Invalid base model specified")

        generate_options = GenerateOptions.from_value(options)
        descriptors = self.route_generator.generate(model, generate_options)

        base_route = get_base_route(model)
        router = mount_routes(
            APIRouter(), descriptors, self.authentication, tags=[base_route]
        )
        self.server.include_router(router)
        self.models.append(model)

        logger.info("creating REST routes for %s:", getattr(model, "table_name", base_route))
        for descriptor in descriptors:
            roles = generate_options.routes.for_operation(descriptor.operation).allowed_roles
            logger.info(
                "--> created %s %s for: %s",
                descriptor.method.value,
                descriptor.path,
                ", ".join(roles) if roles else EVERYONE_ROLE,
            )

        return descriptors

"""
Route generator - generates CRUD route descriptors for a model.

For every enabled CRUD operation the generator builds one immutable
RouteDescriptor: method, path, a handler closure bound to the model, and an
auth block when role gating is active. Descriptors are framework neutral; see
``roadwork.runtime.fastapi_adapter`` for mounting them on FastAPI.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

from roadwork.core.errors import ConfigurationError
from roadwork.core.strings import to_api_plural
from roadwork.runtime.access_scope import resolve_access_scope
from roadwork.runtime.handlers import (
    OperationCalls,
    create_operation_handler,
    filter_query,
    parse_pagination,
)
from roadwork.specs.access import AccessScope
from roadwork.specs.auth import Authentication, AuthRequirement
from roadwork.specs.model import CrudModel
from roadwork.specs.routes import (
    CrudOperation,
    GenerateOptions,
    GeneratorOptions,
    HttpMethod,
    Reply,
    RouteDescriptor,
    RouteRequest,
)

# Model methods each operation dispatches to (unscoped, owner-scoped).
REQUIRED_MODEL_METHODS: dict[CrudOperation, tuple[str, ...]] = {
    CrudOperation.FIND_ALL: ("find_all", "find_all_by_user_id"),
    CrudOperation.FIND_ALL_PAGINATED: (
        "find_all_with_pagination",
        "find_all_by_user_id_with_pagination",
    ),
    CrudOperation.FIND_ONE: ("find_one_by_id", "find_one_by_id_and_user_id"),
    CrudOperation.CREATE: ("create_object",),
    CrudOperation.UPDATE: ("update_by_id", "update_by_id_and_user_id"),
    CrudOperation.DELETE: ("destroy_by_id", "destroy_by_id_and_user_id"),
    CrudOperation.COUNT: ("count", "count_by_user_id"),
}

# Generation order of a full ``generate`` call.
GENERATION_ORDER = (
    CrudOperation.FIND_ALL,
    CrudOperation.FIND_ONE,
    CrudOperation.CREATE,
    CrudOperation.UPDATE,
    CrudOperation.DELETE,
    CrudOperation.COUNT,
    CrudOperation.FIND_ALL_PAGINATED,
)


def get_base_route(model: Any) -> str:
    """Route segment a model is served under: ``base_route``, else its pluralized table name."""
    base_route = getattr(model, "base_route", None)
    if isinstance(base_route, str) and base_route:
        return base_route.strip("/")
    table_name = getattr(model, "table_name", None)
    if isinstance(table_name, str) and table_name:
        return to_api_plural(table_name)
    raise ConfigurationError(
        "Invalid base model specified", "model has neither base_route nor table_name"
    )


def _normalize_roles(allowed_roles: Collection[str] | str | None) -> tuple[str, ...] | None:
    if allowed_roles is None:
        return None
    if isinstance(allowed_roles, str):
        return (allowed_roles,)
    return tuple(allowed_roles)


class RouteGenerator:
    """
    Generates CRUD route descriptors from a model and generate options.

    The access scope of each request is resolved through ``get_access_scope``,
    looked up when a route is generated.
    """

    def __init__(
        self,
        authentication: Authentication | None = None,
        options: GeneratorOptions | Mapping[str, Any] | None = None,
    ):
        """
        Initialize the route generator.

        Args:
            authentication: Authentication plugin gating role-restricted routes
            options: Root options (``base_path``)
        """
        self.authentication = authentication
        if options is None or isinstance(options, GeneratorOptions):
            self.options = options or GeneratorOptions()
        else:
            try:
                self.options = GeneratorOptions.model_validate(dict(options))
            except ValueError as e:
                raise ConfigurationError("Invalid generator options", str(e)) from e

    def add_authentication(self, authentication: Authentication) -> None:
        """Register the authentication plugin used by routes generated from now on."""
        self.authentication = authentication

    def get_access_scope(
        self,
        user_scope: str | Collection[str] | None,
        allowed_roles: str | Collection[str] | None,
    ) -> AccessScope:
        """Resolve how much access a caller gets on a route."""
        return resolve_access_scope(user_scope, allowed_roles)

    def process_roles(
        self, allowed_roles: Collection[str] | str | None
    ) -> AuthRequirement | None:
        """Auth block for a route, present only when roles gate it and auth is registered."""
        roles = _normalize_roles(allowed_roles)
        if not roles or self.authentication is None:
            return None
        return AuthRequirement(strategy=self.authentication.strategy_name, scope=roles)

    # =========================================================================
    # Full generation
    # =========================================================================

    def generate(
        self,
        model: CrudModel | None,
        options: GenerateOptions | Mapping[str, Any] | None = None,
    ) -> list[RouteDescriptor]:
        """
        Generate descriptors for every enabled operation of a model.

        Nothing is generated if the model or options are invalid.

        Raises:
            ConfigurationError: Missing model, model lacking a required method,
                or malformed options
        """
        if model is None:
            raise ConfigurationError("Invalid base model specified")

        generate_options = GenerateOptions.from_value(options)
        enabled = [
            op for op in GENERATION_ORDER if generate_options.routes.for_operation(op).is_enabled
        ]

        get_base_route(model)
        missing = [
            name
            for op in enabled
            for name in REQUIRED_MODEL_METHODS[op]
            if not callable(getattr(model, name, None))
        ]
        if missing:
            raise ConfigurationError(
                "Invalid base model specified", f"missing methods: {', '.join(missing)}"
            )

        return [
            self.generate_operation(
                op, model, generate_options.routes.for_operation(op).allowed_roles
            )
            for op in enabled
        ]

    def generate_operation(
        self,
        operation: CrudOperation,
        model: CrudModel,
        allowed_roles: Collection[str] | str | None = None,
    ) -> RouteDescriptor:
        """Generate the descriptor for a single operation."""
        builders = {
            CrudOperation.FIND_ALL: self.generate_find_all,
            CrudOperation.FIND_ALL_PAGINATED: self.generate_find_all_with_pagination,
            CrudOperation.FIND_ONE: self.generate_find_one,
            CrudOperation.CREATE: self.generate_create,
            CrudOperation.UPDATE: self.generate_update,
            CrudOperation.DELETE: self.generate_delete,
            CrudOperation.COUNT: self.generate_count,
        }
        return builders[operation](model, allowed_roles)

    # =========================================================================
    # Per-operation generation
    # =========================================================================

    def generate_find_all(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            return await model.find_all(filter_query(request.query))

        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            return await model.find_all_by_user_id(owner_id, filter_query(request.query))

        return self._build(
            CrudOperation.FIND_ALL,
            HttpMethod.GET,
            self._path(model),
            OperationCalls(all_access, owner_access),
            allowed_roles,
        )

    def generate_find_all_with_pagination(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            offset, limit = parse_pagination(request)
            return await model.find_all_with_pagination(offset, limit)

        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            offset, limit = parse_pagination(request)
            return await model.find_all_by_user_id_with_pagination(owner_id, offset, limit)

        return self._build(
            CrudOperation.FIND_ALL_PAGINATED,
            HttpMethod.GET,
            self._path(model, "pagination/{offset}"),
            OperationCalls(all_access, owner_access),
            allowed_roles,
        )

    def generate_find_one(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            return await model.find_one_by_id(request.params["id"])

        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            return await model.find_one_by_id_and_user_id(request.params["id"], owner_id)

        return self._build(
            CrudOperation.FIND_ONE,
            HttpMethod.GET,
            self._path(model, "{id}"),
            OperationCalls(all_access, owner_access),
            allowed_roles,
        )

    def generate_create(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            return await model.create_object(request.payload)

        # Creating has no owner variant: the new record has no owner to check yet.
        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            return await model.create_object(request.payload)

        return self._build(
            CrudOperation.CREATE,
            HttpMethod.POST,
            self._path(model),
            OperationCalls(all_access, owner_access, lambda result: Reply.ok(result, 201)),
            allowed_roles,
        )

    def generate_update(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            return await model.update_by_id(request.params["id"], request.payload)

        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            return await model.update_by_id_and_user_id(
                request.params["id"], owner_id, request.payload
            )

        return self._build(
            CrudOperation.UPDATE,
            HttpMethod.PUT,
            self._path(model, "{id}"),
            OperationCalls(all_access, owner_access),
            allowed_roles,
        )

    def generate_delete(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            return await model.destroy_by_id(request.params["id"])

        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            return await model.destroy_by_id_and_user_id(request.params["id"], owner_id)

        return self._build(
            CrudOperation.DELETE,
            HttpMethod.DELETE,
            self._path(model, "{id}"),
            OperationCalls(all_access, owner_access, lambda _result: Reply.no_content()),
            allowed_roles,
        )

    def generate_count(
        self, model: CrudModel, allowed_roles: Collection[str] | str | None = None
    ) -> RouteDescriptor:
        async def all_access(request: RouteRequest) -> Any:
            return await model.count()

        async def owner_access(request: RouteRequest, owner_id: Any) -> Any:
            return await model.count_by_user_id(owner_id)

        return self._build(
            CrudOperation.COUNT,
            HttpMethod.GET,
            self._path(model, "count"),
            OperationCalls(all_access, owner_access),
            allowed_roles,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _path(self, model: CrudModel, suffix: str = "") -> str:
        path = f"{self.options.base_path}/{get_base_route(model)}"
        return f"{path}/{suffix}" if suffix else path

    def _build(
        self,
        operation: CrudOperation,
        method: HttpMethod,
        path: str,
        calls: OperationCalls,
        allowed_roles: Collection[str] | str | None,
    ) -> RouteDescriptor:
        roles = _normalize_roles(allowed_roles)
        handler = create_operation_handler(
            operation,
            calls,
            allowed_roles=roles,
            authentication=self.authentication,
            resolve=self.get_access_scope,
        )
        return RouteDescriptor(
            operation=operation,
            method=method,
            path=path,
            handler=handler,
            auth=self.process_roles(roles),
        )

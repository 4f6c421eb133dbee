"""
End-to-end tests of generated routes mounted on FastAPI.

Requests go through TestClient so the auth dependency, path matching,
body parsing and reply rendering are all exercised together.
"""

from __future__ import annotations

import pytest
from fakes import FakeModel
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient

from roadwork.core.errors import ConfigurationError
from roadwork.runtime.api import RoadworkApi
from roadwork.runtime.auth import BearerAuthentication
from roadwork.runtime.fastapi_adapter import mount_routes, reply_to_response
from roadwork.runtime.route_generator import RouteGenerator
from roadwork.specs.access import OWNER_ROLE
from roadwork.specs.routes import Reply

OWNER_OR_ADMIN = ["admin", OWNER_ROLE]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(model: FakeModel, authentication: BearerAuthentication) -> TestClient:
    app = FastAPI()
    api = RoadworkApi(app)
    api.add_authentication(authentication)
    api.generate(
        model,
        {
            "routes": {
                "findAll": {"allowedRoles": OWNER_OR_ADMIN},
                "findAllPaginated": {"allowedRoles": OWNER_OR_ADMIN},
                "update": {"allowedRoles": OWNER_OR_ADMIN},
                "delete": {"allowedRoles": ["admin"]},
            }
        },
    )
    return TestClient(app)


# =============================================================================
# Authentication
# =============================================================================


class TestAuthDependency:
    """Role-gated routes reject callers before the handler runs."""

    def test_missing_token_is_unauthorized(self, client: TestClient, model: FakeModel) -> None:
        response = client.get("/mocks")

        assert response.status_code == 401
        assert response.json() == {
            "statusCode": 401,
            "error": "Unauthorized",
            "message": "Missing authentication",
        }
        assert model.calls == []

    def test_unknown_token_is_unauthorized(self, client: TestClient) -> None:
        response = client.get("/mocks", headers=bearer("forged"))

        assert response.status_code == 401

    def test_insufficient_scope_is_forbidden(self, client: TestClient, model: FakeModel) -> None:
        response = client.get("/mocks", headers=bearer("guest-token"))

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"
        assert response.json()["message"] == "Insufficient scope"
        assert model.calls == []

    def test_dependency_and_handler_denials_share_body_shape(
        self, client: TestClient, model: FakeModel
    ) -> None:
        """A 401 looks the same whether the auth block or the handler denied it."""
        app = FastAPI()
        RoadworkApi(app).generate(model, {"routes": {"findAll": {"allowedRoles": ["admin"]}}})

        from_handler = TestClient(app).get("/mocks")
        from_dependency = client.get("/mocks")

        assert from_handler.status_code == from_dependency.status_code == 401
        assert from_handler.json().keys() == from_dependency.json().keys()
        assert from_handler.json()["error"] == from_dependency.json()["error"] == "Unauthorized"

    def test_owner_only_sees_own_records(self, client: TestClient) -> None:
        response = client.get("/mocks", headers=bearer("owner-token"))

        assert response.status_code == 200
        assert [r["name"] for r in response.json()] == ["alpha", "beta"]

    def test_admin_sees_all_records(self, client: TestClient) -> None:
        response = client.get("/mocks", headers=bearer("admin-token"))

        assert len(response.json()) == 3

    def test_token_from_query_parameter(self, client: TestClient, model: FakeModel) -> None:
        response = client.get("/mocks", params={"access_token": "owner-token", "name": "beta"})

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == ["2"]
        assert model.calls == [("find_all_by_user_id", (25, {"name": "beta"}))]

    def test_public_route_needs_no_token(self, client: TestClient) -> None:
        response = client.get("/mocks/3")

        assert response.status_code == 200
        assert response.json()["name"] == "gamma"

    def test_owner_cannot_update_foreign_record(self, client: TestClient) -> None:
        response = client.put("/mocks/3", json={"name": "mine"}, headers=bearer("owner-token"))

        assert response.status_code == 404
        assert response.json() == {
            "statusCode": 404,
            "error": "Not Found",
            "message": "Not found",
        }

    def test_owner_role_alone_does_not_open_admin_route(self, client: TestClient) -> None:
        response = client.delete("/mocks/1", headers=bearer("owner-token"))

        assert response.status_code == 403


# =============================================================================
# Routing and rendering
# =============================================================================


class TestRoutes:
    """Paths, status codes and bodies of mounted routes."""

    def test_count_is_not_shadowed_by_find_one(self, client: TestClient, model: FakeModel) -> None:
        response = client.get("/mocks/count")

        assert response.status_code == 200
        assert response.json() == 3
        assert model.called == ["count"]

    def test_find_one_missing_record(self, client: TestClient) -> None:
        response = client.get("/mocks/99")

        assert response.status_code == 404
        assert response.json()["statusCode"] == 404

    def test_create_json(self, client: TestClient, model: FakeModel) -> None:
        response = client.post("/mocks", json={"name": "delta", "user_id": 25})

        assert response.status_code == 201
        assert response.json() == {"name": "delta", "user_id": 25, "id": "4"}
        assert model.calls == [("create_object", ({"name": "delta", "user_id": 25},))]

    def test_create_form(self, client: TestClient, model: FakeModel) -> None:
        response = client.post("/mocks", data={"name": "delta"})

        assert response.status_code == 201
        assert model.calls == [("create_object", ({"name": "delta"},))]

    def test_create_malformed_json(self, client: TestClient, model: FakeModel) -> None:
        response = client.post(
            "/mocks", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request payload input"
        assert model.calls == []

    def test_update(self, client: TestClient) -> None:
        response = client.put("/mocks/1", json={"name": "renamed"}, headers=bearer("owner-token"))

        assert response.status_code == 200
        assert response.json()["name"] == "renamed"

    def test_delete_replies_no_content(self, client: TestClient, model: FakeModel) -> None:
        response = client.delete("/mocks/2", headers=bearer("admin-token"))

        assert response.status_code == 204
        assert response.content == b""
        assert "2" not in model.records

    def test_pagination(self, client: TestClient) -> None:
        response = client.get(
            "/mocks/pagination/1", params={"limit": 1}, headers=bearer("admin-token")
        )

        assert response.status_code == 200
        body = response.json()
        assert [r["id"] for r in body["results"]] == ["2"]
        assert body["pagination"] == {"offset": 1, "limit": 1, "rowCount": 3}

    def test_pagination_limit_too_large(self, client: TestClient) -> None:
        response = client.get(
            "/mocks/pagination/0", params={"limit": 50}, headers=bearer("admin-token")
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Bad Request"

    def test_model_failure_is_generic_500(self, client: TestClient) -> None:
        response = client.get("/mocks", params={"error": "1"}, headers=bearer("admin-token"))

        assert response.status_code == 500
        assert response.json() == {
            "statusCode": 500,
            "error": "Internal Server Error",
            "message": "An internal server error occurred",
        }


class TestMountRoutes:
    """mount_routes and reply_to_response on their own."""

    def test_auth_block_without_plugin_is_rejected(
        self, model: FakeModel, authentication: BearerAuthentication
    ) -> None:
        descriptors = [RouteGenerator(authentication).generate_count(model, ["admin"])]

        with pytest.raises(ConfigurationError, match="Route requires authentication"):
            mount_routes(APIRouter(), descriptors)

    def test_static_paths_are_mounted_first(self, model: FakeModel) -> None:
        descriptors = RouteGenerator().generate(model)

        router = mount_routes(APIRouter(), descriptors)

        paths = [route.path for route in router.routes]
        assert paths.index("/mocks/count") < paths.index("/mocks/{id}")

    def test_tags_and_summary(self, model: FakeModel) -> None:
        router = mount_routes(
            APIRouter(), [RouteGenerator().generate_count(model)], tags=["mocks"]
        )

        [route] = router.routes
        assert route.tags == ["mocks"]
        assert route.summary == "GET /mocks/count"

    def test_no_content_reply(self) -> None:
        response = reply_to_response(Reply.no_content())

        assert response.status_code == 204
        assert response.body == b""

    def test_json_reply(self) -> None:
        response = reply_to_response(Reply.ok({"id": "1"}, 201))

        assert response.status_code == 201
        assert response.body == b'{"id":"1"}'

"""Shared fixtures for roadwork unit tests: an in-memory model and credentials."""

from __future__ import annotations

import pytest
from fakes import OTHER_ID, OWNER_ID, FakeModel

from roadwork.runtime.auth import BearerAuthentication, UserCredentials


@pytest.fixture
def model() -> FakeModel:
    return FakeModel(
        [
            {"id": "1", "name": "alpha", "user_id": OWNER_ID},
            {"id": "2", "name": "beta", "user_id": OWNER_ID},
            {"id": "3", "name": "gamma", "user_id": OTHER_ID},
        ]
    )


@pytest.fixture
def owner_credentials() -> UserCredentials:
    """A plain user who may only touch their own records."""
    return UserCredentials(user_id=OWNER_ID, roles=("user", "$owner"))


@pytest.fixture
def admin_credentials() -> UserCredentials:
    return UserCredentials(user_id=1, roles=("admin",))


@pytest.fixture
def tokens(
    owner_credentials: UserCredentials, admin_credentials: UserCredentials
) -> dict[str, UserCredentials]:
    return {
        "owner-token": owner_credentials,
        "admin-token": admin_credentials,
        "guest-token": UserCredentials(user_id=99, roles=("guest",)),
    }


@pytest.fixture
def authentication(tokens: dict[str, UserCredentials]) -> BearerAuthentication:
    return BearerAuthentication(tokens.get)

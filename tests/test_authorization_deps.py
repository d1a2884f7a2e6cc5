from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from restopos.core.errors import NotFoundError
from restopos.deps import get_current_user, require_role
from restopos.services.auth import create_access_token


def _build_request(path: str = "/api/resource", method: str = "GET") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "path_params": {},
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


class _FakeUsers:
    def __init__(self, users):
        self._users = {user.id: user for user in users}

    def get_user(self, user_id):
        if user_id not in self._users:
            raise NotFoundError(f"User {user_id} not found")
        return self._users[user_id]


def test_require_role_denies_staff_on_owner_route():
    user = SimpleNamespace(id="u-2", role="staff")
    dependency = require_role(["owner"])

    with pytest.raises(HTTPException) as exc:
        dependency(request=_build_request(path="/api/users"), user=user)

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_require_role_normalizes_role_case():
    user = SimpleNamespace(id="u-1", role=" Owner ")
    dependency = require_role(["owner", "staff"])

    assert dependency(request=_build_request(), user=user) is user


def test_get_current_user_resolves_token_subject():
    user = SimpleNamespace(id="u-1", role="owner")
    services = SimpleNamespace(users=_FakeUsers([user]))
    request = _build_request()

    resolved = get_current_user(request=request, token=create_access_token("u-1"), services=services)

    assert resolved is user
    assert request.state.user is user


def test_get_current_user_rejects_unknown_subject_and_bad_token():
    services = SimpleNamespace(users=_FakeUsers([]))

    with pytest.raises(HTTPException) as unknown:
        get_current_user(request=_build_request(), token=create_access_token("ghost"), services=services)
    with pytest.raises(HTTPException) as invalid:
        get_current_user(request=_build_request(), token="garbage", services=services)

    assert unknown.value.status_code == 401
    assert unknown.value.detail == "User not found"
    assert invalid.value.status_code == 401

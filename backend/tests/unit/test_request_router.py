"""Unit tests for request routing, authorization and error rendering."""

import asyncio
import time

import pytest

from course_api.application.interfaces import PasswordHasher
from course_api.application.services import RequestRouter
from course_api.domain.entities import AuthContext, GatewayRequest

ADMIN = AuthContext(role="admin")

WEEK = {"week_id": "w1", "title": "Intro", "start_date": "2024-01-01", "description": "First"}


@pytest.fixture
def gateway(repositories, hasher) -> RequestRouter:
    return RequestRouter(repositories, hasher)


@pytest.mark.asyncio
async def test_options_short_circuits(gateway):
    response = await gateway.dispatch(GatewayRequest(method="OPTIONS", resource="nonsense"))
    assert response.status_code == 200
    assert response.payload is None


@pytest.mark.asyncio
@pytest.mark.parametrize("resource", [None, "", "lecturers"])
async def test_unknown_resource(gateway, resource):
    response = await gateway.dispatch(GatewayRequest(method="GET", resource=resource))
    assert response.status_code == 400
    assert response.payload["success"] is False


@pytest.mark.asyncio
async def test_students_require_admin_role(gateway):
    response = await gateway.dispatch(GatewayRequest(method="GET", resource="students"))
    assert response.status_code == 401

    response = await gateway.dispatch(
        GatewayRequest(method="GET", resource="students", auth=AuthContext(role="student"))
    )
    assert response.status_code == 401

    response = await gateway.dispatch(GatewayRequest(method="GET", resource="students", auth=ADMIN))
    assert response.status_code == 200
    assert response.payload == {"success": True, "data": []}


@pytest.mark.asyncio
async def test_resource_token_is_case_insensitive(gateway):
    response = await gateway.dispatch(GatewayRequest(method="GET", resource="Weeks"))
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unsupported_method(gateway):
    response = await gateway.dispatch(GatewayRequest(method="PATCH", resource="weeks"))
    assert response.status_code == 405
    assert response.payload == {"success": False, "message": "Method not allowed"}


@pytest.mark.asyncio
async def test_unknown_sub_resource(gateway):
    response = await gateway.dispatch(
        GatewayRequest(method="GET", resource="students", sub_resource="comments", auth=ADMIN)
    )
    assert response.status_code == 400

    response = await gateway.dispatch(
        GatewayRequest(method="POST", resource="weeks", sub_resource="credential")
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_credential_only_accepts_post(gateway):
    response = await gateway.dispatch(
        GatewayRequest(method="GET", resource="students", sub_resource="credential", auth=ADMIN)
    )
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_create_then_fetch_by_query_alias(gateway):
    created = await gateway.dispatch(GatewayRequest(method="POST", resource="weeks", body=WEEK))
    assert created.status_code == 201
    assert created.payload["message"] == "Week created"

    fetched = await gateway.dispatch(
        GatewayRequest(method="GET", resource="weeks", query={"week_id": "w1"})
    )
    assert fetched.status_code == 200
    assert fetched.payload["data"]["title"] == "Intro"


@pytest.mark.asyncio
async def test_missing_fields_are_listed(gateway):
    response = await gateway.dispatch(
        GatewayRequest(method="POST", resource="weeks", body={"week_id": "w1"})
    )
    assert response.status_code == 400
    assert response.payload["missing"] == ["title", "start_date", "description"]


@pytest.mark.asyncio
async def test_duplicate_natural_key_conflicts(gateway):
    await gateway.dispatch(GatewayRequest(method="POST", resource="weeks", body=WEEK))
    response = await gateway.dispatch(GatewayRequest(method="POST", resource="weeks", body=WEEK))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_key_from_body(gateway):
    await gateway.dispatch(GatewayRequest(method="POST", resource="weeks", body=WEEK))
    response = await gateway.dispatch(
        GatewayRequest(method="DELETE", resource="weeks", body={"week_id": "w1"})
    )
    assert response.status_code == 200
    assert response.payload == {"success": True, "message": "Week deleted"}


@pytest.mark.asyncio
async def test_legacy_change_password_action(gateway):
    student = {
        "student_id": "s1",
        "name": "Ada",
        "email": "ada@example.com",
        "password": "old-password",
    }
    await gateway.dispatch(GatewayRequest(method="POST", resource="students", body=student, auth=ADMIN))

    response = await gateway.dispatch(
        GatewayRequest(
            method="POST",
            resource="students",
            query={"action": "change_password"},
            body={"student_id": "s1", "current_password": "old-password", "new_password": "new-password"},
            auth=ADMIN,
        )
    )
    assert response.status_code == 200
    assert response.payload["message"] == "Password updated"


@pytest.mark.asyncio
async def test_comment_on_missing_parent(gateway):
    response = await gateway.dispatch(
        GatewayRequest(
            method="POST",
            resource="weeks",
            sub_resource="comments",
            body={"parent": "zzz", "author": "a", "text": "hi"},
        )
    )
    assert response.status_code == 404
    assert response.payload == {"success": False, "message": "Week not found"}


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500(hasher):
    class ExplodingFactory:
        def records(self, descriptor):
            raise RuntimeError("connection string with secrets")

    gateway = RequestRouter(ExplodingFactory(), hasher)
    response = await gateway.dispatch(GatewayRequest(method="GET", resource="weeks"))

    assert response.status_code == 500
    assert response.payload == {"success": False, "message": "Internal server error"}


@pytest.mark.asyncio
async def test_timeout_is_500(repositories, hasher):
    class SlowFactory:
        def records(self, descriptor):
            return SlowRepository()

    class SlowRepository:
        async def list(self, query):
            await asyncio.sleep(1)

    gateway = RequestRouter(SlowFactory(), hasher, timeout_seconds=0.01)
    response = await gateway.dispatch(GatewayRequest(method="GET", resource="weeks"))

    assert response.status_code == 500
    assert response.payload["message"] == "Request timed out"


class SlowHasher(PasswordHasher):
    """Blocks its calling thread the way a high bcrypt work factor does."""

    def hash(self, plain_password: str) -> str:
        time.sleep(0.3)
        return f"hashed:{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        time.sleep(0.3)
        return password_hash == f"hashed:{plain_password}"


STUDENT = {
    "student_id": "s1",
    "name": "Ada",
    "email": "ada@example.com",
    "password": "old-password",
}


@pytest.mark.asyncio
async def test_hashing_does_not_block_other_requests(repositories):
    gateway = RequestRouter(repositories, SlowHasher())
    gaps: list[float] = []
    done = asyncio.Event()

    async def ticker():
        last = time.monotonic()
        while not done.is_set():
            await asyncio.sleep(0.01)
            now = time.monotonic()
            gaps.append(now - last)
            last = now

    ticking = asyncio.create_task(ticker())
    response = await gateway.dispatch(
        GatewayRequest(method="POST", resource="students", body=STUDENT, auth=ADMIN)
    )
    done.set()
    await ticking

    assert response.status_code == 201
    assert len(gaps) > 5
    assert max(gaps) < 0.2


@pytest.mark.asyncio
async def test_timeout_bounds_slow_hashing(repositories):
    gateway = RequestRouter(repositories, SlowHasher(), timeout_seconds=0.05)
    started = time.monotonic()
    response = await gateway.dispatch(
        GatewayRequest(method="POST", resource="students", body=STUDENT, auth=ADMIN)
    )

    assert response.status_code == 500
    assert response.payload["message"] == "Request timed out"
    assert time.monotonic() - started < 0.25

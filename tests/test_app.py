import asyncio
import json

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.requests import Request

from main import app, integrity_exception_handler
from app.db.get_db import get_db
from app.db.seed import seed_admin
from app.models.enums import AppRole
from app.models.user import User


def test_health_reports_database_connected(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["database"] == "Connected"


def test_root_lists_endpoint_groups(client):
    body = client.get("/").json()

    assert body["success"] is True
    assert body["endpoints"]["stores"] == "/api/stores"


def test_unknown_route_returns_error_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found", "code": "NOT_FOUND"}


def test_wrong_method_returns_error_envelope(client):
    response = client.delete("/api/auth/login")

    assert response.status_code == 405
    assert response.json()["code"] == "METHOD_NOT_ALLOWED"


def test_malformed_path_id_is_a_validation_error(client, admin, auth_headers):
    response = client.get("/api/users/not-a-uuid", headers=auth_headers(admin))

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "user_id"


def test_seed_admin_creates_once(db):
    first = seed_admin(db, name="Bootstrap Administrator Acct", email="Root@Example.com", password="Bootstrap#1")
    second = seed_admin(db, name="Bootstrap Administrator Acct", email="root@example.com", password="Bootstrap#1")

    assert first.id == second.id
    assert first.role == AppRole.admin
    assert db.query(User).count() == 1


def test_seed_admin_skipped_without_credentials(db):
    assert seed_admin(db, email=None, password=None) is None
    assert db.query(User).count() == 0


class UnreachableSession:
    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_health_reports_database_disconnected(client):
    app.dependency_overrides[get_db] = lambda: UnreachableSession()

    response = client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "Error"
    assert body["database"] == "Disconnected"
    assert "connection refused" in body["error"]


def test_responses_carry_security_headers(client):
    response = client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


class PostgresError(Exception):
    def __init__(self, pgcode):
        super().__init__(f"pgcode {pgcode}")
        self.pgcode = pgcode


def handle_integrity_error(orig):
    request = Request({"type": "http", "method": "POST", "path": "/api/stores", "headers": []})
    response = asyncio.run(integrity_exception_handler(request, IntegrityError("INSERT", {}, orig)))
    return response.status_code, json.loads(response.body)


@pytest.mark.parametrize(
    "orig",
    [
        Exception("NOT NULL constraint failed: stores.address"),
        Exception("FOREIGN KEY constraint failed"),
        PostgresError("23503"),
        PostgresError("23502"),
    ],
)
def test_integrity_error_for_bad_reference_or_missing_field(orig):
    status, body = handle_integrity_error(orig)

    assert status == 400
    assert body["code"] == "VALIDATION_ERROR"


@pytest.mark.parametrize(
    "orig",
    [Exception("UNIQUE constraint failed: stores.email"), PostgresError("23505")],
)
def test_integrity_error_for_duplicate_is_conflict(orig):
    status, body = handle_integrity_error(orig)

    assert status == 409
    assert body == {
        "success": False,
        "error": "A record with this information already exists",
        "code": "CONFLICT",
    }

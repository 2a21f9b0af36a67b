"""
Tests for futsal/deps.py: bearer token identities, role checks and the
first-admin bootstrap. Real tokens go through the real dependencies here.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from futsal.roles import AdminRoleName
from futsal.security import TokenType, create_access_token

from .conftest import build_app
from .factories import (
    ADMIN_ID,
    CUSTOMER_ID,
    ROLE_ID,
    VENUE_ID,
    booking_detail,
    make_admin,
    page,
    role_response,
    venue_response,
)

BOOKINGS_CRUD = "futsal.routers.bookings.booking_crud"
VENUES_CRUD = "futsal.routers.admin_venues.venue_crud"
ROLES_CRUD = "futsal.routers.admin_roles.role_crud"
DEPS_ADMIN_CRUD = "futsal.deps.admin_crud"


def _customer_token() -> str:
    return create_access_token(
        str(CUSTOMER_ID),
        TokenType.CUSTOMER,
        {"email": "budi@example.com", "name": "Budi"},
    )


def _admin_token(role: str = AdminRoleName.ADMIN) -> str:
    return create_access_token(
        str(ADMIN_ID),
        TokenType.ADMIN,
        {
            "email": "admin@example.com",
            "name": "Admin",
            "role": role,
            "role_id": str(ROLE_ID),
            "venue_id": None,
        },
    )


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _admin_lookup(exists: bool) -> MagicMock:
    mock = MagicMock()
    mock.any_exists = AsyncMock(return_value=exists)
    return mock


class TestGetCurrentCustomer:
    def test_valid_token_authenticates(self, anon_client):
        with patch(BOOKINGS_CRUD) as mock_crud:
            mock_crud.list_my_bookings = AsyncMock(return_value=page([]))
            resp = anon_client.get(
                "/api/v1/bookings/my-bookings", headers=_bearer(_customer_token())
            )
        assert resp.status_code == 200
        assert mock_crud.list_my_bookings.call_args.args[0] == CUSTOMER_ID

    def test_missing_token_returns_401(self, anon_client):
        resp = anon_client.get("/api/v1/bookings/my-bookings")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authenticated"
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_admin_token_is_rejected(self, anon_client):
        resp = anon_client.get(
            "/api/v1/bookings/my-bookings", headers=_bearer(_admin_token())
        )
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token type"

    def test_non_uuid_subject_returns_401(self, anon_client):
        token = create_access_token("not-a-uuid", TokenType.CUSTOMER)
        resp = anon_client.get("/api/v1/bookings/my-bookings", headers=_bearer(token))
        assert resp.status_code == 401


class TestGetCurrentAdmin:
    def test_valid_token_authenticates(self, anon_client):
        with patch(VENUES_CRUD) as mock_crud:
            mock_crud.get_venue = AsyncMock(return_value=venue_response())
            resp = anon_client.get(
                f"/api/v1/admin/venues/{VENUE_ID}", headers=_bearer(_admin_token())
            )
        assert resp.status_code == 200

    def test_customer_token_is_rejected(self, anon_client):
        resp = anon_client.get(
            f"/api/v1/admin/venues/{VENUE_ID}", headers=_bearer(_customer_token())
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthorized"


class TestRequireRoles:
    def test_admin_cannot_manage_catalog(self, anon_client):
        with patch(VENUES_CRUD) as mock_crud:
            mock_crud.create_venue = AsyncMock()
            resp = anon_client.post(
                "/api/v1/admin/venues/",
                json={"name": "Arena", "address": "Jl. Merdeka"},
                headers=_bearer(_admin_token(AdminRoleName.ADMIN)),
            )
        assert resp.status_code == 403
        assert resp.json()["code"] == "forbidden"
        mock_crud.create_venue.assert_not_called()

    def test_administrator_can_manage_catalog(self, anon_client):
        with patch(VENUES_CRUD) as mock_crud:
            mock_crud.create_venue = AsyncMock(return_value=venue_response())
            resp = anon_client.post(
                "/api/v1/admin/venues/",
                json={"name": "Arena", "address": "Jl. Merdeka"},
                headers=_bearer(_admin_token(AdminRoleName.ADMINISTRATOR)),
            )
        assert resp.status_code == 201

    def test_unknown_role_is_not_an_admin(self, anon_client):
        resp = anon_client.get(
            f"/api/v1/admin/venues/{VENUE_ID}", headers=_bearer(_admin_token("Kasir"))
        )
        assert resp.status_code == 403


class TestSuperAdminOrBootstrap:
    def test_open_while_no_admin_exists(self, anon_client):
        with (
            patch(DEPS_ADMIN_CRUD, _admin_lookup(False)),
            patch(ROLES_CRUD) as mock_crud,
        ):
            mock_crud.create_role = AsyncMock(return_value=role_response(name="Super Admin"))
            resp = anon_client.post("/api/v1/admin/roles/", json={"name": "Super Admin"})
        assert resp.status_code == 201
        assert resp.json()["data"]["name"] == "Super Admin"

    def test_requires_token_once_an_admin_exists(self, anon_client):
        with (
            patch(DEPS_ADMIN_CRUD, _admin_lookup(True)),
            patch(ROLES_CRUD) as mock_crud,
        ):
            mock_crud.create_role = AsyncMock()
            resp = anon_client.post("/api/v1/admin/roles/", json={"name": "Kasir"})
        assert resp.status_code == 401
        mock_crud.create_role.assert_not_called()

    def test_plain_admin_is_forbidden(self, anon_client):
        with (
            patch(DEPS_ADMIN_CRUD, _admin_lookup(True)),
            patch(ROLES_CRUD) as mock_crud,
        ):
            mock_crud.create_role = AsyncMock()
            resp = anon_client.post(
                "/api/v1/admin/roles/",
                json={"name": "Kasir"},
                headers=_bearer(_admin_token(AdminRoleName.ADMINISTRATOR)),
            )
        assert resp.status_code == 403

    def test_super_admin_passes(self, anon_client):
        with (
            patch(DEPS_ADMIN_CRUD, _admin_lookup(True)),
            patch(ROLES_CRUD) as mock_crud,
        ):
            mock_crud.create_role = AsyncMock(return_value=role_response(name="Kasir"))
            resp = anon_client.post(
                "/api/v1/admin/roles/",
                json={"name": "Kasir"},
                headers=_bearer(_admin_token(AdminRoleName.SUPER_ADMIN)),
            )
        assert resp.status_code == 201


class TestOverriddenIdentity:
    """Overriding get_current_admin still runs the role checks on top of it."""

    def test_admin_hits_super_admin_route(self):
        client = TestClient(build_app(admin=make_admin()))
        with patch(ROLES_CRUD) as mock_crud:
            mock_crud.delete_role = AsyncMock()
            resp = client.delete(f"/api/v1/admin/roles/{ROLE_ID}")
        assert resp.status_code == 403
        mock_crud.delete_role.assert_not_called()

    def test_customer_booking_route_ignores_admin_override(self):
        client = TestClient(build_app(admin=make_admin()))
        with patch(BOOKINGS_CRUD) as mock_crud:
            mock_crud.get_booking = AsyncMock(return_value=booking_detail())
            resp = client.get(f"/api/v1/bookings/{booking_detail().id}")
        assert resp.status_code == 401

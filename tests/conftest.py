"""
Shared pytest fixtures available to every test file automatically.
No imports needed in test files: pytest discovers this by convention.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from tortoise import Tortoise, connections

from futsal.deps import get_current_admin, get_current_customer
from futsal.main import API_PREFIX, register_exception_handlers
from futsal.notifier import get_notifier
from futsal.routers import (
    admin_auth,
    admin_bookings,
    admin_fields,
    admin_roles,
    admin_venues,
    auth,
    bookings,
    mobile_fields,
)
from futsal.settings import tortoise_config
from futsal.storage import get_storage

from .factories import make_admin, make_customer, make_super_admin

ROUTERS = (
    auth,
    admin_auth,
    admin_roles,
    admin_venues,
    admin_fields,
    admin_bookings,
    bookings,
    mobile_fields,
)

# ---------------------------------------------------------------------------
# Default no-op collaborator mocks: prevent real SMTP / disk / Redis use
# ---------------------------------------------------------------------------


def _noop_notifier():
    mock = MagicMock()
    mock.booking_verified = AsyncMock(return_value=None)
    return mock


def _noop_storage():
    mock = MagicMock()
    mock.save_image = AsyncMock(
        return_value="http://localhost:4000/uploads/payment-proofs/proof.jpg"
    )
    return mock


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Slot cache always misses and never touches Redis."""
    monkeypatch.setattr(bookings, "read_occupied_slots", AsyncMock(return_value=None))
    monkeypatch.setattr(bookings, "write_occupied_slots", AsyncMock())
    for module in (bookings, admin_bookings, admin_fields):
        monkeypatch.setattr(module, "forget_occupied_slots", AsyncMock())


# ---------------------------------------------------------------------------
# App builder: used by all client fixtures
# ---------------------------------------------------------------------------


def build_app(customer=None, admin=None, notifier=None, storage=None) -> FastAPI:
    """
    Fresh FastAPI app with the identity dependencies overridden.

    `customer` / `admin` replace token decoding; role checks still run on
    top of the injected admin, so an Admin hitting a Super Admin route gets 403.
    Leave them None to exercise the real bearer-token path.
    """
    app = FastAPI()
    register_exception_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router, prefix=API_PREFIX)

    if customer is not None:
        app.dependency_overrides[get_current_customer] = lambda: customer
    if admin is not None:
        app.dependency_overrides[get_current_admin] = lambda: admin

    n = notifier if notifier is not None else _noop_notifier()
    s = storage if storage is not None else _noop_storage()
    app.dependency_overrides[get_notifier] = lambda: n
    app.dependency_overrides[get_storage] = lambda: s
    return app


# ---------------------------------------------------------------------------
# Reusable client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer_client():
    return TestClient(build_app(customer=make_customer()), raise_server_exceptions=True)


@pytest.fixture()
def admin_client():
    return TestClient(build_app(admin=make_admin()), raise_server_exceptions=True)


@pytest.fixture()
def super_admin_client():
    return TestClient(build_app(admin=make_super_admin()), raise_server_exceptions=True)


@pytest.fixture()
def anon_client():
    """No identity overrides: real token decoding runs, so 401s are observable."""
    return TestClient(build_app(), raise_server_exceptions=True)


@pytest.fixture()
def client_factory():
    def _make(customer=None, admin=None, notifier=None, storage=None) -> TestClient:
        return TestClient(
            build_app(customer=customer, admin=admin, notifier=notifier, storage=storage),
            raise_server_exceptions=True,
        )

    return _make


# ---------------------------------------------------------------------------
# Database: in-memory SQLite for CRUD tests
# ---------------------------------------------------------------------------


@pytest.fixture()
async def db():
    await Tortoise.init(config=tortoise_config("sqlite://:memory:"))
    await Tortoise.generate_schemas()
    yield
    await connections.close_all(discard=True)

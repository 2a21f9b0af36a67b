from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from futsal.crud.accounts import admin_crud
from futsal.errors import Forbidden, Unauthorized
from futsal.roles import ALL_ADMIN_ROLES, CATALOG_MANAGERS, AdminRoleName
from futsal.security import TokenType, decode_access_token

# Tokens come from the JSON login endpoints; the scheme only extracts the header.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


@dataclass
class CurrentCustomer:
    id: UUID
    email: str
    name: str


@dataclass
class CurrentAdmin:
    id: UUID
    email: str
    name: str
    role: str
    role_id: UUID | None = None
    venue_id: UUID | None = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRoleName.SUPER_ADMIN


def _uuid_or_none(value: str | None) -> UUID | None:
    return UUID(value) if value else None


def get_current_customer(token: str | None = Depends(oauth2_scheme)) -> CurrentCustomer:
    if not token:
        raise Unauthorized("Not authenticated")
    payload = decode_access_token(token, TokenType.CUSTOMER)
    try:
        customer_id = UUID(payload["sub"])
    except (ValueError, TypeError):
        raise Unauthorized() from None
    return CurrentCustomer(
        id=customer_id,
        email=payload.get("email", ""),
        name=payload.get("name", ""),
    )


def get_current_admin(token: str | None = Depends(oauth2_scheme)) -> CurrentAdmin:
    if not token:
        raise Unauthorized("Not authenticated")
    payload = decode_access_token(token, TokenType.ADMIN)
    try:
        return CurrentAdmin(
            id=UUID(payload["sub"]),
            email=payload.get("email", ""),
            name=payload.get("name", ""),
            role=payload.get("role", ""),
            role_id=_uuid_or_none(payload.get("role_id")),
            venue_id=_uuid_or_none(payload.get("venue_id")),
        )
    except (ValueError, TypeError):
        raise Unauthorized() from None


def require_roles(*allowed: str):
    """
    Factory that returns a dependency admitting admins holding one of `allowed`.

    Usage:
        @router.get("/protected")
        async def route(admin = Depends(require_roles("Super Admin"))):
            ...
    """

    async def _dep(admin: CurrentAdmin = Depends(get_current_admin)) -> CurrentAdmin:
        if admin.role not in allowed:
            raise Forbidden(f"Requires one of the roles: {', '.join(allowed)}")
        return admin

    return _dep


# ---------------------------------------------------------------------------
# Pre-built role dependencies
# ---------------------------------------------------------------------------

any_admin = require_roles(*ALL_ADMIN_ROLES)
can_manage_catalog = require_roles(*CATALOG_MANAGERS)
require_super_admin = require_roles(AdminRoleName.SUPER_ADMIN)


async def super_admin_or_bootstrap(
    token: str | None = Depends(oauth2_scheme),
) -> CurrentAdmin | None:
    """
    Open while no admin account exists so the first roles and the first admin
    can be created; a Super Admin is required afterwards.
    """
    if not await admin_crud.any_exists():
        return None
    admin = get_current_admin(token)
    if not admin.is_super_admin:
        raise Forbidden(f"Requires one of the roles: {AdminRoleName.SUPER_ADMIN}")
    return admin

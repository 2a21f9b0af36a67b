from __future__ import annotations

import asyncio
from uuid import UUID

from futsal import settings
from futsal.crud.base import CRUD
from futsal.errors import Conflict, NotFound, Unauthorized
from futsal.models import Admin, AdminRole, Customer, Venue
from futsal.schemas import (
    AdminAuthResponse,
    AdminProfile,
    AdminRegister,
    CustomerAuthResponse,
    CustomerRegister,
    CustomerResponse,
    NamedRef,
    TokenResponse,
)
from futsal.security import TokenType, create_access_token, hash_password, verify_password

_INVALID_CREDENTIALS = "Invalid credentials"


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def _password_matches(plain: str, hashed: str) -> bool:
    # bcrypt is CPU bound; keep it off the event loop
    return await asyncio.to_thread(verify_password, plain, hashed)


class CustomerCRUD(CRUD[Customer]):
    not_found_detail = "Customer not found"

    @staticmethod
    def _token(customer: Customer) -> TokenResponse:
        token = create_access_token(
            str(customer.id),
            TokenType.CUSTOMER,
            claims={"email": customer.email, "name": customer.name},
        )
        return TokenResponse(
            access_token=token, expires_in=settings.JWT_EXPIRE_MINUTES * 60
        )

    def _auth_response(self, customer: Customer) -> CustomerAuthResponse:
        return CustomerAuthResponse(
            customer=CustomerResponse.model_validate(customer),
            token=self._token(customer),
        )

    async def register(self, payload: CustomerRegister) -> CustomerAuthResponse:
        email = _normalize_email(payload.email)
        if await Customer.exists(email=email):
            raise Conflict("Email already registered")

        customer = await Customer.create(
            name=payload.name,
            email=email,
            password=await asyncio.to_thread(hash_password, payload.password),
            phone=payload.phone,
        )
        self.log.info("Customer registered: {}", email)
        return self._auth_response(customer)

    async def login(self, email: str, password: str) -> CustomerAuthResponse:
        email = _normalize_email(email)
        customer = await Customer.get_or_none(email=email)
        if customer is None or not await _password_matches(password, customer.password):
            self.log.warning("Failed customer login for {}", email)
            raise Unauthorized(_INVALID_CREDENTIALS)

        self.log.info("Customer logged in: {}", email)
        return self._auth_response(customer)

    async def profile(self, customer_id: UUID) -> CustomerResponse:
        return CustomerResponse.model_validate(await self.get_or_404(customer_id))


class AdminCRUD(CRUD[Admin]):
    not_found_detail = "Admin not found"

    @staticmethod
    def _auth_response(admin: Admin) -> AdminAuthResponse:
        """`admin.role` must be fetched."""
        token = create_access_token(
            str(admin.id),
            TokenType.ADMIN,
            claims={
                "email": admin.email,
                "name": admin.name,
                "role": admin.role.name,
                "role_id": str(admin.role_id),
                "venue_id": str(admin.venue_id) if admin.venue_id else None,
            },
        )
        return AdminAuthResponse(
            id=admin.id, name=admin.name, role=admin.role.name, access_token=token
        )

    async def any_exists(self) -> bool:
        return await Admin.exists()

    async def register(self, payload: AdminRegister) -> AdminAuthResponse:
        email = _normalize_email(payload.email)
        if await Admin.exists(email=email):
            raise Conflict("Email already registered")
        if not await AdminRole.exists(id=payload.role_id):
            raise NotFound("Role not found")
        if payload.venue_id is not None and not await Venue.exists(id=payload.venue_id):
            raise NotFound("Venue not found")

        admin = await Admin.create(
            name=payload.name,
            email=email,
            password=await asyncio.to_thread(hash_password, payload.password),
            role_id=payload.role_id,
            venue_id=payload.venue_id,
        )
        await admin.fetch_related("role")
        self.log.info("Admin registered: {} ({})", email, admin.role.name)
        return self._auth_response(admin)

    async def login(self, email: str, password: str) -> AdminAuthResponse:
        email = _normalize_email(email)
        admin = await Admin.get_or_none(email=email).prefetch_related("role")
        if admin is None or not await _password_matches(password, admin.password):
            self.log.warning("Failed admin login for {}", email)
            raise Unauthorized(_INVALID_CREDENTIALS)

        self.log.info("Admin logged in: {}", email)
        return self._auth_response(admin)

    async def profile(self, admin_id: UUID) -> AdminProfile:
        admin = await self.get_or_404(admin_id, "role", "venue")
        return AdminProfile(
            id=admin.id,
            name=admin.name,
            email=admin.email,
            role=NamedRef.model_validate(admin.role),
            venue=NamedRef.model_validate(admin.venue) if admin.venue else None,
            created_at=admin.created_at,
            updated_at=admin.updated_at,
        )


customer_crud = CustomerCRUD(Customer)
admin_crud = AdminCRUD(Admin)

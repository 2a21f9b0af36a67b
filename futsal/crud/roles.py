from __future__ import annotations

from uuid import UUID

from futsal.crud.base import CRUD
from futsal.errors import BadRequest, Conflict
from futsal.models import Admin, AdminRole
from futsal.schemas import RoleCreate, RoleResponse, RoleUpdate


class RoleCRUD(CRUD[AdminRole]):
    not_found_detail = "Role not found"

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        qs = AdminRole.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict(f'A role named "{name}" already exists')

    async def _response(self, role: AdminRole) -> RoleResponse:
        return RoleResponse(
            id=role.id,
            name=role.name,
            description=role.description,
            admin_count=await Admin.filter(role_id=role.id).count(),
            created_at=role.created_at,
            updated_at=role.updated_at,
        )

    async def create_role(self, payload: RoleCreate) -> RoleResponse:
        await self._ensure_unique_name(payload.name)
        role = await AdminRole.create(**payload.model_dump())
        self.log.info("Role created: {}", role.name)
        return await self._response(role)

    async def list_roles(self) -> list[RoleResponse]:
        return [await self._response(r) for r in await AdminRole.all()]

    async def get_role(self, role_id: UUID) -> RoleResponse:
        return await self._response(await self.get_or_404(role_id))

    async def update_role(self, role_id: UUID, payload: RoleUpdate) -> RoleResponse:
        role = await self.get_or_404(role_id)
        if payload.name is not None and payload.name != role.name:
            await self._ensure_unique_name(payload.name, exclude_id=role_id)

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)
        if changes:
            role.update_from_dict(changes)
            await role.save()
            self.log.info("Role updated: {}", role.name)
        return await self._response(role)

    async def delete_role(self, role_id: UUID) -> UUID:
        role = await self.get_or_404(role_id)
        admins = await Admin.filter(role_id=role_id).count()
        if admins:
            raise BadRequest(
                f"Role cannot be deleted while {admins} admin(s) still hold it"
            )
        await role.delete()
        self.log.info("Role deleted: {}", role.name)
        return role_id


role_crud = RoleCRUD(AdminRole)

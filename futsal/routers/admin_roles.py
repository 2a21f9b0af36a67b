from uuid import UUID

from fastapi import APIRouter, Depends, status

from futsal.crud.roles import role_crud
from futsal.deps import any_admin, require_super_admin, super_admin_or_bootstrap
from futsal.schemas import ApiResponse, DeletedResponse, RoleCreate, RoleResponse, RoleUpdate

router = APIRouter(prefix="/admin/roles", tags=["admin-roles"])


@router.post(
    "/",
    response_model=ApiResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(super_admin_or_bootstrap)],
)
async def create_role(payload: RoleCreate) -> ApiResponse[RoleResponse]:
    return ApiResponse(message="Role created", data=await role_crud.create_role(payload))


@router.get(
    "/",
    response_model=ApiResponse[list[RoleResponse]],
    dependencies=[Depends(any_admin)],
)
async def list_roles() -> ApiResponse[list[RoleResponse]]:
    return ApiResponse(message="Roles retrieved", data=await role_crud.list_roles())


@router.get(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(any_admin)],
)
async def get_role(role_id: UUID) -> ApiResponse[RoleResponse]:
    return ApiResponse(message="Role retrieved", data=await role_crud.get_role(role_id))


@router.patch(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(require_super_admin)],
)
async def update_role(role_id: UUID, payload: RoleUpdate) -> ApiResponse[RoleResponse]:
    role = await role_crud.update_role(role_id, payload)
    return ApiResponse(message="Role updated", data=role)


@router.delete(
    "/{role_id}",
    response_model=ApiResponse[DeletedResponse],
    dependencies=[Depends(require_super_admin)],
)
async def delete_role(role_id: UUID) -> ApiResponse[DeletedResponse]:
    deleted = await role_crud.delete_role(role_id)
    return ApiResponse(message="Role deleted", data=DeletedResponse(id=deleted))

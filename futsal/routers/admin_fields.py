from uuid import UUID

from fastapi import APIRouter, Depends, status

from futsal.cache import forget_occupied_slots
from futsal.crud.fields import field_crud
from futsal.deps import any_admin, can_manage_catalog
from futsal.schemas import (
    ApiResponse,
    DeletedResponse,
    FieldCreate,
    FieldFilters,
    FieldPriceCreate,
    FieldPriceResponse,
    FieldPriceUpdate,
    FieldResponse,
    FieldUpdate,
    Pagination,
)

router = APIRouter(prefix="/admin/fields", tags=["admin-fields"])


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=ApiResponse[FieldResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(can_manage_catalog)],
)
async def create_field(payload: FieldCreate) -> ApiResponse[FieldResponse]:
    field = await field_crud.create_field(payload)
    return ApiResponse(message="Field created", data=field)


@router.get(
    "/",
    response_model=ApiResponse[list[FieldResponse]],
    dependencies=[Depends(any_admin)],
)
async def list_fields(
    filters: FieldFilters = Depends(),
    pagination: Pagination = Depends(),
) -> ApiResponse[list[FieldResponse]]:
    page = await field_crud.list_fields(filters, pagination)
    return ApiResponse(message="Fields retrieved", data=page.items, meta=page.meta)


@router.get(
    "/{field_id}",
    response_model=ApiResponse[FieldResponse],
    dependencies=[Depends(any_admin)],
)
async def get_field(field_id: UUID) -> ApiResponse[FieldResponse]:
    return ApiResponse(message="Field retrieved", data=await field_crud.get_field(field_id))


@router.patch(
    "/{field_id}",
    response_model=ApiResponse[FieldResponse],
    dependencies=[Depends(can_manage_catalog)],
)
async def update_field(field_id: UUID, payload: FieldUpdate) -> ApiResponse[FieldResponse]:
    field = await field_crud.update_field(field_id, payload)
    return ApiResponse(message="Field updated", data=field)


@router.delete(
    "/{field_id}",
    response_model=ApiResponse[DeletedResponse],
    dependencies=[Depends(can_manage_catalog)],
)
async def delete_field(field_id: UUID) -> ApiResponse[DeletedResponse]:
    deleted = await field_crud.delete_field(field_id)
    await forget_occupied_slots(field_id)
    return ApiResponse(message="Field deleted", data=DeletedResponse(id=deleted))


# ---------------------------------------------------------------------------
# Price tiers
# ---------------------------------------------------------------------------


@router.post(
    "/{field_id}/prices",
    response_model=ApiResponse[FieldPriceResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(can_manage_catalog)],
)
async def add_price(
    field_id: UUID, payload: FieldPriceCreate
) -> ApiResponse[FieldPriceResponse]:
    price = await field_crud.add_price(field_id, payload)
    return ApiResponse(message="Price added", data=price)


@router.get(
    "/{field_id}/prices",
    response_model=ApiResponse[list[FieldPriceResponse]],
    dependencies=[Depends(any_admin)],
)
async def list_prices(field_id: UUID) -> ApiResponse[list[FieldPriceResponse]]:
    return ApiResponse(message="Prices retrieved", data=await field_crud.list_prices(field_id))


@router.patch(
    "/{field_id}/prices/{price_id}",
    response_model=ApiResponse[FieldPriceResponse],
    dependencies=[Depends(can_manage_catalog)],
)
async def update_price(
    field_id: UUID, price_id: UUID, payload: FieldPriceUpdate
) -> ApiResponse[FieldPriceResponse]:
    price = await field_crud.update_price(field_id, price_id, payload)
    return ApiResponse(message="Price updated", data=price)


@router.delete(
    "/{field_id}/prices/{price_id}",
    response_model=ApiResponse[DeletedResponse],
    dependencies=[Depends(can_manage_catalog)],
)
async def delete_price(field_id: UUID, price_id: UUID) -> ApiResponse[DeletedResponse]:
    deleted = await field_crud.delete_price(field_id, price_id)
    return ApiResponse(message="Price deleted", data=DeletedResponse(id=deleted))

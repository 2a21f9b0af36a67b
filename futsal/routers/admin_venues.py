from uuid import UUID

from fastapi import APIRouter, Depends, status

from futsal.crud.venues import venue_crud
from futsal.deps import any_admin, can_manage_catalog
from futsal.schemas import (
    ApiResponse,
    DeletedResponse,
    Pagination,
    VenueCreate,
    VenueResponse,
    VenueUpdate,
)

router = APIRouter(prefix="/admin/venues", tags=["admin-venues"])


@router.post(
    "/",
    response_model=ApiResponse[VenueResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(can_manage_catalog)],
)
async def create_venue(payload: VenueCreate) -> ApiResponse[VenueResponse]:
    venue = await venue_crud.create_venue(payload)
    return ApiResponse(message="Venue created", data=venue)


@router.get(
    "/",
    response_model=ApiResponse[list[VenueResponse]],
    dependencies=[Depends(any_admin)],
)
async def list_venues(
    search: str | None = None,
    pagination: Pagination = Depends(),
) -> ApiResponse[list[VenueResponse]]:
    page = await venue_crud.list_venues(pagination, search=search)
    return ApiResponse(message="Venues retrieved", data=page.items, meta=page.meta)


@router.get(
    "/{venue_id}",
    response_model=ApiResponse[VenueResponse],
    dependencies=[Depends(any_admin)],
)
async def get_venue(venue_id: UUID) -> ApiResponse[VenueResponse]:
    return ApiResponse(message="Venue retrieved", data=await venue_crud.get_venue(venue_id))


@router.patch(
    "/{venue_id}",
    response_model=ApiResponse[VenueResponse],
    dependencies=[Depends(can_manage_catalog)],
)
async def update_venue(venue_id: UUID, payload: VenueUpdate) -> ApiResponse[VenueResponse]:
    venue = await venue_crud.update_venue(venue_id, payload)
    return ApiResponse(message="Venue updated", data=venue)


@router.delete(
    "/{venue_id}",
    response_model=ApiResponse[DeletedResponse],
    dependencies=[Depends(can_manage_catalog)],
)
async def delete_venue(venue_id: UUID) -> ApiResponse[DeletedResponse]:
    deleted = await venue_crud.delete_venue(venue_id)
    return ApiResponse(message="Venue deleted", data=DeletedResponse(id=deleted))

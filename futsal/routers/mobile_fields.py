from uuid import UUID

from fastapi import APIRouter, Depends

from futsal.crud.fields import field_crud
from futsal.schemas import (
    MobileFieldDetailResponse,
    MobileFieldQuery,
    MobileFieldsResponse,
    Pagination,
    SlotWindow,
)
from futsal.slots import Slot, resolve_slot

router = APIRouter(prefix="/mobile/fields", tags=["mobile"])


def _resolve(query: MobileFieldQuery) -> Slot:
    return resolve_slot(
        start_time=query.start_time,
        end_time=query.end_time,
        date_str=query.date,
        start_hour=query.start_hour,
        duration_hours=query.duration_hours,
    )


@router.get("/", response_model=MobileFieldsResponse)
async def list_mobile_fields(query: MobileFieldQuery = Depends()) -> MobileFieldsResponse:
    slot = _resolve(query)
    items, meta = await field_crud.list_mobile_fields(
        slot,
        Pagination(page=query.page, limit=query.limit),
        search=query.search,
        venue_id=query.venue_id,
        only_available=query.only_available,
    )
    return MobileFieldsResponse(
        message="Fields retrieved",
        slot=SlotWindow(start_time=slot.start, end_time=slot.end),
        data=items,
        meta=meta,
    )


@router.get("/{field_id}", response_model=MobileFieldDetailResponse)
async def get_mobile_field(
    field_id: UUID, query: MobileFieldQuery = Depends()
) -> MobileFieldDetailResponse:
    slot = _resolve(query)
    detail = await field_crud.mobile_field_detail(field_id, slot)
    return MobileFieldDetailResponse(
        message="Field retrieved" if detail else "Field not found",
        slot=SlotWindow(start_time=slot.start, end_time=slot.end),
        data=detail,
    )

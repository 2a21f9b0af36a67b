from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from loguru import logger

from futsal.cache import forget_occupied_slots, read_occupied_slots, write_occupied_slots
from futsal.crud.bookings import booking_crud
from futsal.deps import CurrentCustomer, get_current_customer
from futsal.models import BookingStatus
from futsal.schemas import (
    ApiResponse,
    BookingCancel,
    BookingCreate,
    BookingDetail,
    BookingListItem,
    BookingSlot,
    Pagination,
    PaymentProofUpload,
)
from futsal.slots import resolve_booking_slot
from futsal.storage import LocalImageStorage, get_storage

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/slots/{field_id}", response_model=ApiResponse[list[BookingSlot]])
async def get_field_slots(field_id: UUID) -> ApiResponse[list[BookingSlot]]:
    """
    Upcoming occupied windows of a field.
    Public; the response contains NO customer identity.
    """
    slots = await read_occupied_slots(field_id)
    if slots is None:
        logger.debug("Cache miss for slots: field_id={}", field_id)
        slots = await booking_crud.list_occupied_slots(field_id)
        await write_occupied_slots(field_id, slots)
    return ApiResponse(message="Occupied slots retrieved", data=slots)


@router.post(
    "/",
    response_model=ApiResponse[BookingDetail],
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    payload: BookingCreate,
    customer: CurrentCustomer = Depends(get_current_customer),
) -> ApiResponse[BookingDetail]:
    slot = resolve_booking_slot(
        start_time=payload.start_time,
        end_time=payload.end_time,
        order_date=payload.order_date,
        start_hour=payload.start_hour,
        duration_hours=payload.duration_hours,
    )
    booking = await booking_crud.create_booking(
        customer_id=customer.id,
        field_id=payload.field_id,
        start_time=slot.start,
        end_time=slot.end,
        proof_url=payload.proof_url,
    )
    await forget_occupied_slots(payload.field_id)
    return ApiResponse(message="Booking created", data=booking)


@router.get("/my-bookings", response_model=ApiResponse[list[BookingListItem]])
async def list_my_bookings(
    status: BookingStatus | None = None,
    pagination: Pagination = Depends(),
    customer: CurrentCustomer = Depends(get_current_customer),
) -> ApiResponse[list[BookingListItem]]:
    page = await booking_crud.list_my_bookings(customer.id, pagination, status=status)
    return ApiResponse(message="Bookings retrieved", data=page.items, meta=page.meta)


@router.get("/{booking_id}", response_model=ApiResponse[BookingDetail])
async def get_booking(
    booking_id: UUID,
    customer: CurrentCustomer = Depends(get_current_customer),
) -> ApiResponse[BookingDetail]:
    booking = await booking_crud.get_booking(booking_id, customer_id=customer.id)
    return ApiResponse(message="Booking retrieved", data=booking)


@router.post("/{booking_id}/upload-payment", response_model=ApiResponse[BookingDetail])
async def upload_payment_file(
    booking_id: UUID,
    file: UploadFile = File(...),
    customer: CurrentCustomer = Depends(get_current_customer),
    storage: LocalImageStorage = Depends(get_storage),
) -> ApiResponse[BookingDetail]:
    proof_url = await storage.save_image(file)
    booking = await booking_crud.upload_payment_proof(booking_id, customer.id, proof_url)
    await forget_occupied_slots(booking.field_id)
    return ApiResponse(
        message="Payment proof uploaded, waiting for verification", data=booking
    )


@router.patch("/{booking_id}/payment-proof", response_model=ApiResponse[BookingDetail])
async def attach_payment_proof(
    booking_id: UUID,
    payload: PaymentProofUpload,
    customer: CurrentCustomer = Depends(get_current_customer),
) -> ApiResponse[BookingDetail]:
    """Attach a proof that was already uploaded elsewhere, by URL."""
    booking = await booking_crud.upload_payment_proof(
        booking_id, customer.id, payload.proof_url
    )
    await forget_occupied_slots(booking.field_id)
    return ApiResponse(
        message="Payment proof uploaded, waiting for verification", data=booking
    )


@router.patch("/{booking_id}/cancel", response_model=ApiResponse[BookingDetail])
async def cancel_booking(
    booking_id: UUID,
    payload: BookingCancel,
    customer: CurrentCustomer = Depends(get_current_customer),
) -> ApiResponse[BookingDetail]:
    booking = await booking_crud.cancel_booking(booking_id, customer.id, payload.reason)
    await forget_occupied_slots(booking.field_id)
    return ApiResponse(message="Booking cancelled", data=booking)

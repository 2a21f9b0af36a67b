from uuid import UUID

from fastapi import APIRouter, Depends

from futsal.cache import forget_occupied_slots
from futsal.crud.bookings import booking_crud
from futsal.deps import CurrentAdmin, any_admin
from futsal.notifier import Notifier, get_notifier
from futsal.schemas import (
    AdminBookingFilters,
    ApiResponse,
    BookingDetail,
    BookingVerification,
    DashboardStats,
    Pagination,
    VerifyPayment,
)

router = APIRouter(
    prefix="/admin/bookings",
    tags=["admin-bookings"],
    dependencies=[Depends(any_admin)],
)


@router.get("/", response_model=ApiResponse[list[BookingDetail]])
async def list_bookings(
    filters: AdminBookingFilters = Depends(),
    pagination: Pagination = Depends(),
) -> ApiResponse[list[BookingDetail]]:
    page = await booking_crud.list_bookings(filters, pagination)
    return ApiResponse(message="Bookings retrieved", data=page.items, meta=page.meta)


@router.get("/stats", response_model=ApiResponse[DashboardStats])
async def dashboard_stats(
    venue_id: UUID | None = None,
    admin: CurrentAdmin = Depends(any_admin),
) -> ApiResponse[DashboardStats]:
    # An explicit venue_id wins; otherwise the admin's own venue, if any
    stats = await booking_crud.stats(venue_id=venue_id or admin.venue_id)
    return ApiResponse(message="Dashboard statistics retrieved", data=stats)


@router.get("/pending-verification", response_model=ApiResponse[list[BookingDetail]])
async def pending_verification(
    venue_id: UUID | None = None,
    pagination: Pagination = Depends(),
) -> ApiResponse[list[BookingDetail]]:
    page = await booking_crud.pending_verification(pagination, venue_id=venue_id)
    return ApiResponse(
        message="Bookings waiting for verification retrieved",
        data=page.items,
        meta=page.meta,
    )


@router.get("/{booking_id}", response_model=ApiResponse[BookingDetail])
async def get_booking(booking_id: UUID) -> ApiResponse[BookingDetail]:
    booking = await booking_crud.get_booking(booking_id)
    return ApiResponse(message="Booking retrieved", data=booking)


@router.patch("/verify-payment/{booking_id}", response_model=ApiResponse[BookingVerification])
async def verify_payment(
    booking_id: UUID,
    payload: VerifyPayment,
    admin: CurrentAdmin = Depends(any_admin),
    notifier: Notifier = Depends(get_notifier),
) -> ApiResponse[BookingVerification]:
    result = await booking_crud.verify_payment(
        booking_id,
        approved=payload.approved,
        admin_id=admin.id,
        note=payload.note,
        notifier=notifier,
    )
    await forget_occupied_slots(result.booking.field_id)
    return ApiResponse(
        message="Payment approved" if payload.approved else "Payment rejected",
        data=result,
    )

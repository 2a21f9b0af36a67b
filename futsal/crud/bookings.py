from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta, timezone
from uuid import UUID
from zoneinfo import ZoneInfo

from tortoise.expressions import Q
from tortoise.queryset import QuerySet
from tortoise.transactions import in_transaction

from futsal import lifecycle
from futsal.availability import BLOCKING_STATUSES
from futsal.crud.base import CRUD
from futsal.errors import BadRequest, NotFound, SlotConflict
from futsal.models import (
    Booking,
    BookingStatus,
    Customer,
    Field,
    FieldPrice,
    Payment,
    PaymentStatus,
)
from futsal.notifier import Notifier, VerifiedBookingMail
from futsal.pricing import calculate_price
from futsal.schemas import (
    AdminBookingFilters,
    AdminSummary,
    BookingDetail,
    BookingFieldSummary,
    BookingListItem,
    BookingResponse,
    BookingSlot,
    BookingVerification,
    CustomerSummary,
    DashboardStats,
    DisplayStatus,
    NamedRef,
    Page,
    Pagination,
    PaymentResponse,
)
from futsal.slots import local_tz, to_utc

_DETAIL_PREFETCH = ("field__venue", "field__images", "customer")
_ACTIVE_STATUSES = [BookingStatus.PAID, BookingStatus.WAITING_PAYMENT]


def _local_day_bounds(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    day = now.astimezone(tz).date()
    start = datetime.combine(day, time(0), tzinfo=tz)
    return to_utc(start), to_utc(start + timedelta(days=1))


def _local_month_bounds(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    local = now.astimezone(tz)
    first = datetime(local.year, local.month, 1, tzinfo=tz)
    if local.month == 12:
        following = datetime(local.year + 1, 1, 1, tzinfo=tz)
    else:
        following = datetime(local.year, local.month + 1, 1, tzinfo=tz)
    return to_utc(first), to_utc(following)


def _primary_image(field: Field) -> str | None:
    images = sorted(
        field.images, key=lambda i: (not i.is_primary, i.order, i.created_at)
    )
    return images[0].image_url if images else None


def _payment_response(payment: Payment | None) -> PaymentResponse | None:
    if payment is None:
        return None
    verifier = payment.verified_by if payment.verified_by_id else None
    return PaymentResponse(
        id=payment.id,
        proof_url=payment.proof_url,
        status=payment.status,
        verified_by=AdminSummary.model_validate(verifier) if verifier else None,
        verified_at=payment.verified_at,
        note=payment.note,
        created_at=payment.created_at,
    )


def booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        booking_number=lifecycle.booking_number(booking.created_at),
        customer_id=booking.customer_id,
        field_id=booking.field_id,
        start_time=booking.start_time,
        end_time=booking.end_time,
        duration_hours=(booking.end_time - booking.start_time).total_seconds() / 3600,
        total_price=booking.total_price,
        status=booking.status,
        display_status=DisplayStatus(**lifecycle.display_status(booking.status)),
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


def booking_detail(booking: Booking, payment: Payment | None) -> BookingDetail:
    """Requires field (with venue and images) and customer to be fetched."""
    field = booking.field
    return BookingDetail(
        **booking_response(booking).model_dump(),
        field_name=field.name,
        primary_image=_primary_image(field),
        field=BookingFieldSummary(
            id=field.id,
            name=field.name,
            type=field.type,
            length_meter=field.length_meter,
            width_meter=field.width_meter,
            venue=NamedRef.model_validate(field.venue),
        ),
        customer=CustomerSummary.model_validate(booking.customer),
        payment=_payment_response(payment),
    )


class BookingCRUD(CRUD[Booking]):
    not_found_detail = "Booking not found"

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    async def _payments_for(self, booking_ids: list[UUID]) -> dict[UUID, Payment]:
        if not booking_ids:
            return {}
        payments = await Payment.filter(booking_id__in=booking_ids).prefetch_related(
            "verified_by"
        )
        return {p.booking_id: p for p in payments}

    async def _details(self, bookings: list[Booking]) -> list[BookingDetail]:
        payments = await self._payments_for([b.id for b in bookings])
        return [booking_detail(b, payments.get(b.id)) for b in bookings]

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    async def find_conflict(
        self,
        field_id: UUID,
        start: datetime,
        end: datetime,
        exclude_id: UUID | None = None,
    ) -> Booking | None:
        """First blocking booking on the field overlapping [start, end)."""
        qs = Booking.filter(
            field_id=field_id,
            status__in=list(BLOCKING_STATUSES),
            start_time__lt=to_utc(end),
            end_time__gt=to_utc(start),
        )
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return await qs.first()

    async def list_occupied_slots(
        self, field_id: UUID, now: datetime | None = None
    ) -> list[BookingSlot]:
        """Upcoming blocked windows of a field; no customer identity exposed."""
        now = to_utc(now or datetime.now(timezone.utc))
        bookings = (
            await Booking.filter(
                field_id=field_id,
                status__in=list(BLOCKING_STATUSES),
                end_time__gt=now,
            )
            .order_by("start_time")
            .only("start_time", "end_time")
        )
        return [BookingSlot.model_validate(b) for b in bookings]

    # ------------------------------------------------------------------
    # Customer operations
    # ------------------------------------------------------------------

    async def create_booking(
        self,
        customer_id: UUID,
        field_id: UUID,
        start_time: datetime,
        end_time: datetime,
        proof_url: str | None = None,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> BookingDetail:
        """
        Persist a new booking after validating:
          - customer and active field exist
          - the slot is well-formed and not in the past
          - no blocking booking overlaps it (atomic, field row locked)
          - every hour of it is priced
        """
        start = to_utc(start_time)
        end = to_utc(end_time)
        now = to_utc(now or datetime.now(timezone.utc))

        if not await Customer.exists(id=customer_id):
            raise NotFound("Customer not found")
        if end <= start:
            raise BadRequest("end_time must be after start_time")
        if start < now:
            raise BadRequest("Cannot book a time that has already passed")

        async with in_transaction():
            # Locking the field serialises concurrent creates for it
            field = await Field.filter(id=field_id).select_for_update().first()
            if field is None:
                raise NotFound("Field not found")
            if not field.is_active:
                raise BadRequest("Field is not active")

            conflict = await self.find_conflict(field_id, start, end)
            if conflict is not None:
                raise SlotConflict(
                    "The selected time is already booked. Please choose another slot."
                )

            tiers = await FieldPrice.filter(field_id=field_id)
            total_price = calculate_price(tiers, start, end, tz)

            inst = await Booking.create(
                customer_id=customer_id,
                field_id=field_id,
                start_time=start,
                end_time=end,
                total_price=total_price,
                status=lifecycle.initial_status(bool(proof_url)),
            )
            if proof_url:
                await Payment.create(booking_id=inst.id, proof_url=proof_url)

        self.log.info(
            "Booking created: {} by customer {} on field {} ({} - {}, total {})",
            inst.id,
            customer_id,
            field_id,
            start.isoformat(),
            end.isoformat(),
            total_price,
        )
        return await self.get_booking(inst.id)

    async def get_booking(
        self, booking_id: UUID, customer_id: UUID | None = None
    ) -> BookingDetail:
        booking = await self.get_or_404(booking_id, *_DETAIL_PREFETCH)
        if customer_id is not None:
            lifecycle.assert_owner(booking.customer_id, customer_id)
        return (await self._details([booking]))[0]

    async def list_my_bookings(
        self,
        customer_id: UUID,
        pagination: Pagination,
        status: BookingStatus | None = None,
    ) -> Page[BookingListItem]:
        qs = Booking.filter(customer_id=customer_id)
        if status is not None:
            qs = qs.filter(status=status)
        rows, meta = await self.paginate(
            qs.order_by("-created_at").prefetch_related("field"), pagination
        )
        items = [
            BookingListItem(
                id=b.id,
                booking_number=lifecycle.booking_number(b.created_at),
                field_name=b.field.name,
                status=DisplayStatus(**lifecycle.display_status(b.status)),
                booking_date=b.start_time.astimezone(local_tz()).date(),
                start_time=b.start_time,
                duration_hours=(b.end_time - b.start_time).total_seconds() / 3600,
            )
            for b in rows
        ]
        return Page[BookingListItem](items=items, meta=meta)

    async def upload_payment_proof(
        self, booking_id: UUID, customer_id: UUID, proof_url: str
    ) -> BookingDetail:
        async with in_transaction():
            booking = await Booking.filter(id=booking_id).select_for_update().first()
            if booking is None:
                raise NotFound(self.not_found_detail)
            lifecycle.assert_owner(booking.customer_id, customer_id)
            lifecycle.assert_can_upload_proof(booking.status)

            payment = await Payment.get_or_none(booking_id=booking_id)
            if payment is None:
                await Payment.create(booking_id=booking_id, proof_url=proof_url)
            else:
                # A re-upload restarts verification
                payment.proof_url = proof_url
                payment.status = PaymentStatus.WAITING_VERIFICATION
                payment.verified_by_id = None
                payment.verified_at = None
                payment.note = None
                await payment.save()

            booking.status = BookingStatus.WAITING_PAYMENT
            await booking.save(update_fields=["status", "updated_at"])

        self.log.info("Payment proof uploaded for booking {}", booking_id)
        return await self.get_booking(booking_id)

    async def cancel_booking(
        self, booking_id: UUID, customer_id: UUID, reason: str
    ) -> BookingDetail:
        async with in_transaction():
            booking = await Booking.filter(id=booking_id).select_for_update().first()
            if booking is None:
                raise NotFound(self.not_found_detail)
            lifecycle.assert_owner(booking.customer_id, customer_id)
            lifecycle.assert_can_cancel(booking.status)

            booking.status = BookingStatus.CANCELLED
            await booking.save(update_fields=["status", "updated_at"])

        self.log.info("Booking cancelled: {}, reason: {}", booking_id, reason)
        return await self.get_booking(booking_id)

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------

    async def verify_payment(
        self,
        booking_id: UUID,
        approved: bool,
        admin_id: UUID,
        note: str | None = None,
        notifier: Notifier | None = None,
        now: datetime | None = None,
    ) -> BookingVerification:
        """
        Approve or reject the uploaded proof. Payment and booking are updated
        in one transaction; the customer email goes out afterwards.
        """
        async with in_transaction():
            booking = await Booking.filter(id=booking_id).select_for_update().first()
            if booking is None:
                raise NotFound(self.not_found_detail)
            payment = await Payment.filter(booking_id=booking_id).select_for_update().first()
            if payment is None:
                raise NotFound("This booking has no payment yet")

            lifecycle.assert_can_verify(payment.status, booking.status)
            payment_status, booking_status = lifecycle.verification_outcome(approved)

            payment.status = payment_status
            payment.verified_by_id = admin_id
            payment.verified_at = to_utc(now or datetime.now(timezone.utc))
            payment.note = note
            await payment.save()

            booking.status = booking_status
            await booking.save(update_fields=["status", "updated_at"])

        self.log.info(
            "Payment {} for booking {} by admin {}",
            payment_status,
            booking_id,
            admin_id,
        )

        detail = await self.get_booking(booking_id)
        if notifier is not None:
            await notifier.booking_verified(
                VerifiedBookingMail(
                    customer_email=detail.customer.email,
                    customer_name=detail.customer.name,
                    booking_number=detail.booking_number,
                    venue_name=detail.field.venue.name if detail.field.venue else "",
                    field_name=detail.field_name,
                    start_time=detail.start_time,
                    end_time=detail.end_time,
                    total_price=detail.total_price,
                    approved=approved,
                    note=note,
                )
            )
        return BookingVerification(booking=detail, payment=detail.payment)  # type: ignore[arg-type]

    def _admin_query(
        self,
        filters: AdminBookingFilters,
        now: datetime,
        tz: ZoneInfo,
    ) -> QuerySet[Booking]:
        qs = Booking.all()
        if filters.field_id is not None:
            qs = qs.filter(field_id=filters.field_id)
        if filters.status is not None:
            qs = qs.filter(status=filters.status)
        if filters.venue_id is not None:
            qs = qs.filter(field__venue__id=filters.venue_id)

        start_date, end_date = filters.start_date, filters.end_date
        if filters.today:
            start_date, end_date = _local_day_bounds(now, tz)
        if start_date is not None:
            qs = qs.filter(start_time__gte=to_utc(start_date))
        if end_date is not None:
            qs = qs.filter(start_time__lte=to_utc(end_date))

        if filters.search:
            term = filters.search.strip()
            cond = (
                Q(customer__name__icontains=term)
                | Q(customer__email__icontains=term)
                | Q(field__name__icontains=term)
                | Q(field__venue__name__icontains=term)
            )
            try:
                cond |= Q(id=UUID(term))
            except ValueError:
                pass
            qs = qs.filter(cond)
        return qs

    async def list_bookings(
        self,
        filters: AdminBookingFilters,
        pagination: Pagination,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> Page[BookingDetail]:
        now = to_utc(now or datetime.now(timezone.utc))
        qs = self._admin_query(filters, now, tz or local_tz())
        rows, meta = await self.paginate(
            qs.order_by("-created_at").prefetch_related(*_DETAIL_PREFETCH), pagination
        )
        return Page[BookingDetail](items=await self._details(rows), meta=meta)

    async def pending_verification(
        self, pagination: Pagination, venue_id: UUID | None = None
    ) -> Page[BookingDetail]:
        """Bookings whose payment proof waits for an admin, oldest first."""
        waiting = Payment.filter(status=PaymentStatus.WAITING_VERIFICATION)
        booking_ids = await waiting.values_list("booking_id", flat=True)

        qs = Booking.filter(id__in=list(booking_ids))
        if venue_id is not None:
            qs = qs.filter(field__venue__id=venue_id)
        rows, meta = await self.paginate(
            qs.order_by("created_at").prefetch_related(*_DETAIL_PREFETCH), pagination
        )
        return Page[BookingDetail](items=await self._details(rows), meta=meta)

    async def stats(
        self,
        venue_id: UUID | None = None,
        now: datetime | None = None,
        tz: ZoneInfo | None = None,
    ) -> DashboardStats:
        now = to_utc(now or datetime.now(timezone.utc))
        tz = tz or local_tz()
        day_start, day_end = _local_day_bounds(now, tz)
        month_start, month_end = _local_month_bounds(now, tz)

        bookings = Booking.all()
        payments = Payment.filter(status=PaymentStatus.WAITING_VERIFICATION)
        if venue_id is not None:
            bookings = bookings.filter(field__venue__id=venue_id)
            payments = payments.filter(booking__field__venue__id=venue_id)

        today, active, paid_totals, pending = await asyncio.gather(
            bookings.filter(start_time__gte=day_start, start_time__lt=day_end).count(),
            bookings.filter(status__in=_ACTIVE_STATUSES).count(),
            bookings.filter(
                status=BookingStatus.PAID,
                created_at__gte=month_start,
                created_at__lt=month_end,
            ).values_list("total_price", flat=True),
            payments.count(),
        )
        return DashboardStats(
            today_bookings=today,
            active_bookings=active,
            monthly_revenue=sum(paid_totals),
            pending_verification=pending,
        )


booking_crud = BookingCRUD(Booking)

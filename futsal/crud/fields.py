from __future__ import annotations

import asyncio
from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from tortoise.expressions import Q
from tortoise.transactions import in_transaction

from futsal.availability import BLOCKING_STATUSES
from futsal.crud.base import CRUD
from futsal.errors import BadRequest, Conflict, NotFound
from futsal.models import Booking, Field, FieldImage, FieldPrice, Venue
from futsal.pricing import (
    ensure_no_overlap_in_payload,
    price_per_hour_for_slot,
    validate_price_range,
)
from futsal.schemas import (
    FieldCreate,
    FieldFilters,
    FieldImageResponse,
    FieldPriceCreate,
    FieldPriceResponse,
    FieldPriceUpdate,
    FieldResponse,
    FieldSize,
    FieldUpdate,
    MobileField,
    MobileFieldDetail,
    NamedRef,
    Page,
    PageMeta,
    Pagination,
)
from futsal.slots import Slot, to_utc

_FIELD_PREFETCH = ("venue", "prices", "images")


def _sorted_images(field: Field) -> list[FieldImage]:
    return sorted(field.images, key=lambda i: (not i.is_primary, i.order, i.created_at))


def _sorted_prices(field: Field) -> list[FieldPrice]:
    return sorted(field.prices, key=lambda p: (p.day_type, p.start_hour))


def field_response(field: Field, booking_count: int = 0) -> FieldResponse:
    return FieldResponse(
        id=field.id,
        venue=NamedRef.model_validate(field.venue),
        name=field.name,
        type=field.type,
        is_active=field.is_active,
        length_meter=field.length_meter,
        width_meter=field.width_meter,
        prices=[FieldPriceResponse.model_validate(p) for p in _sorted_prices(field)],
        images=[FieldImageResponse.model_validate(i) for i in _sorted_images(field)],
        booking_count=booking_count,
        created_at=field.created_at,
        updated_at=field.updated_at,
    )


def mobile_field(field: Field, slot: Slot, is_available: bool, tz: ZoneInfo | None = None) -> MobileField:
    images = _sorted_images(field)
    return MobileField(
        id=field.id,
        name=field.name,
        type=field.type,
        venue=NamedRef.model_validate(field.venue),
        image_url=images[0].image_url if images else None,
        size=FieldSize(length_meter=field.length_meter, width_meter=field.width_meter),
        price_per_hour=price_per_hour_for_slot(list(field.prices), slot.start, tz),
        is_available=is_available,
    )


class FieldCRUD(CRUD[Field]):
    not_found_detail = "Field not found"

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        qs = Field.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict(f'A field named "{name}" already exists')

    async def _ensure_venue(self, venue_id: UUID) -> None:
        if not await Venue.exists(id=venue_id):
            raise NotFound("Venue not found")

    async def _ensure_no_stored_overlap(
        self,
        field_id: UUID,
        day_type: str,
        start_hour: int,
        end_hour: int,
        exclude_id: UUID | None = None,
    ) -> None:
        qs = FieldPrice.filter(
            field_id=field_id,
            day_type=day_type,
            start_hour__lt=end_hour,
            end_hour__gt=start_hour,
        )
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        overlap = await qs.first()
        if overlap is not None:
            raise Conflict(
                f"Price overlaps the existing range "
                f"({overlap.start_hour}-{overlap.end_hour}) for {day_type}"
            )

    @staticmethod
    async def _replace_images(field_id: UUID, urls: list[str]) -> None:
        await FieldImage.filter(field_id=field_id).delete()
        for idx, url in enumerate(urls):
            await FieldImage.create(
                field_id=field_id, image_url=url.strip(), is_primary=idx == 0, order=idx
            )

    @staticmethod
    async def _replace_prices(field_id: UUID, prices: list[FieldPriceCreate]) -> None:
        await FieldPrice.filter(field_id=field_id).delete()
        for p in prices:
            await FieldPrice.create(field_id=field_id, **p.model_dump())

    async def _response(self, field_id: UUID) -> FieldResponse:
        field = await self.get_or_404(field_id, *_FIELD_PREFETCH)
        count = await Booking.filter(field_id=field_id).count()
        return field_response(field, count)

    # ------------------------------------------------------------------
    # Admin catalogue
    # ------------------------------------------------------------------

    async def create_field(self, payload: FieldCreate) -> FieldResponse:
        await self._ensure_venue(payload.venue_id)
        await self._ensure_unique_name(payload.name)
        if payload.prices:
            ensure_no_overlap_in_payload(payload.prices)

        async with in_transaction():
            field = await Field.create(
                **payload.model_dump(exclude={"image_urls", "prices"})
            )
            if payload.image_urls:
                await self._replace_images(field.id, payload.image_urls)
            if payload.prices:
                await self._replace_prices(field.id, payload.prices)

        self.log.info("Field created: {} ({})", field.name, field.id)
        return await self._response(field.id)

    async def list_fields(
        self, filters: FieldFilters, pagination: Pagination
    ) -> Page[FieldResponse]:
        qs = Field.all()
        if filters.search:
            qs = qs.filter(
                Q(name__icontains=filters.search)
                | Q(venue__name__icontains=filters.search)
            )
        if filters.venue_id is not None:
            qs = qs.filter(venue_id=filters.venue_id)
        if filters.type is not None:
            qs = qs.filter(type=filters.type)
        if filters.is_active is not None:
            qs = qs.filter(is_active=filters.is_active)

        rows, meta = await self.paginate(
            qs.order_by("-created_at").prefetch_related(*_FIELD_PREFETCH), pagination
        )
        counts = await asyncio.gather(
            *(Booking.filter(field_id=f.id).count() for f in rows)
        )
        items = [field_response(f, c) for f, c in zip(rows, counts)]
        return Page[FieldResponse](items=items, meta=meta)

    async def get_field(self, field_id: UUID) -> FieldResponse:
        return await self._response(field_id)

    async def update_field(self, field_id: UUID, payload: FieldUpdate) -> FieldResponse:
        field = await self.get_or_404(field_id)
        if payload.venue_id is not None:
            await self._ensure_venue(payload.venue_id)
        if payload.name is not None and payload.name != field.name:
            await self._ensure_unique_name(payload.name, exclude_id=field_id)
        if payload.prices:
            ensure_no_overlap_in_payload(payload.prices)

        changes = payload.model_dump(
            exclude={"image_urls", "prices"}, exclude_none=True
        )
        async with in_transaction():
            if changes:
                field.update_from_dict(changes)
                await field.save()
            if payload.image_urls is not None:
                await self._replace_images(field_id, payload.image_urls)
            if payload.prices is not None:
                await self._replace_prices(field_id, payload.prices)

        self.log.info("Field updated: {}", field_id)
        return await self._response(field_id)

    async def delete_field(self, field_id: UUID) -> UUID:
        field = await self.get_or_404(field_id)
        bookings = await Booking.filter(field_id=field_id).count()
        if bookings:
            raise BadRequest(
                f"Field cannot be deleted while it still has {bookings} booking(s)"
            )
        async with in_transaction():
            await FieldPrice.filter(field_id=field_id).delete()
            await FieldImage.filter(field_id=field_id).delete()
            await field.delete()

        self.log.info("Field deleted: {}", field.name)
        return field_id

    # ------------------------------------------------------------------
    # Price tiers
    # ------------------------------------------------------------------

    async def add_price(self, field_id: UUID, payload: FieldPriceCreate) -> FieldPriceResponse:
        await self.get_or_404(field_id)
        validate_price_range(payload.start_hour, payload.end_hour, payload.price)
        await self._ensure_no_stored_overlap(
            field_id, payload.day_type, payload.start_hour, payload.end_hour
        )
        price = await FieldPrice.create(field_id=field_id, **payload.model_dump())
        self.log.info("Price added to field {}: {}", field_id, price.id)
        return FieldPriceResponse.model_validate(price)

    async def list_prices(self, field_id: UUID) -> list[FieldPriceResponse]:
        await self.get_or_404(field_id)
        prices = await FieldPrice.filter(field_id=field_id).order_by("day_type", "start_hour")
        return [FieldPriceResponse.model_validate(p) for p in prices]

    async def _get_price(self, field_id: UUID, price_id: UUID) -> FieldPrice:
        price = await FieldPrice.get_or_none(id=price_id, field_id=field_id)
        if price is None:
            raise NotFound("Price not found for this field")
        return price

    async def update_price(
        self, field_id: UUID, price_id: UUID, payload: FieldPriceUpdate
    ) -> FieldPriceResponse:
        price = await self._get_price(field_id, price_id)
        merged = {
            "day_type": price.day_type,
            "start_hour": price.start_hour,
            "end_hour": price.end_hour,
            "price": price.price,
            **payload.model_dump(exclude_none=True),
        }
        validate_price_range(merged["start_hour"], merged["end_hour"], merged["price"])
        await self._ensure_no_stored_overlap(
            field_id,
            merged["day_type"],
            merged["start_hour"],
            merged["end_hour"],
            exclude_id=price_id,
        )
        price.update_from_dict(merged)
        await price.save()
        return FieldPriceResponse.model_validate(price)

    async def delete_price(self, field_id: UUID, price_id: UUID) -> UUID:
        price = await self._get_price(field_id, price_id)
        await price.delete()
        self.log.info("Price {} removed from field {}", price_id, field_id)
        return price_id

    # ------------------------------------------------------------------
    # Mobile availability
    # ------------------------------------------------------------------

    @staticmethod
    async def _busy_field_ids(field_ids: list[UUID], start: datetime, end: datetime) -> set[UUID]:
        if not field_ids:
            return set()
        busy = await Booking.filter(
            field_id__in=field_ids,
            status__in=list(BLOCKING_STATUSES),
            start_time__lt=to_utc(end),
            end_time__gt=to_utc(start),
        ).values_list("field_id", flat=True)
        return set(busy)

    async def list_mobile_fields(
        self,
        slot: Slot,
        pagination: Pagination,
        search: str | None = None,
        venue_id: UUID | None = None,
        only_available: bool = False,
        tz: ZoneInfo | None = None,
    ) -> tuple[list[MobileField], PageMeta]:
        qs = Field.filter(is_active=True)
        if venue_id is not None:
            qs = qs.filter(venue_id=venue_id)
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(venue__name__icontains=search))

        rows, meta = await self.paginate(
            qs.order_by("-created_at").prefetch_related(*_FIELD_PREFETCH), pagination
        )
        busy = await self._busy_field_ids([f.id for f in rows], slot.start, slot.end)

        items = [mobile_field(f, slot, f.id not in busy, tz) for f in rows]
        if only_available:
            items = [i for i in items if i.is_available]
        items.sort(key=lambda i: (not i.is_available, i.venue.name, i.name))
        return items, meta

    async def mobile_field_detail(
        self, field_id: UUID, slot: Slot, tz: ZoneInfo | None = None
    ) -> MobileFieldDetail | None:
        """None when the field is missing or inactive."""
        field = await Field.get_or_none(id=field_id).prefetch_related(*_FIELD_PREFETCH)
        if field is None or not field.is_active:
            return None
        busy = await self._busy_field_ids([field.id], slot.start, slot.end)
        return MobileFieldDetail(
            **mobile_field(field, slot, field.id not in busy, tz).model_dump(),
            images=[FieldImageResponse.model_validate(i) for i in _sorted_images(field)],
        )


field_crud = FieldCRUD(Field)

from __future__ import annotations

import asyncio
from uuid import UUID

from tortoise.expressions import Q

from futsal.crud.base import CRUD
from futsal.errors import BadRequest, Conflict
from futsal.models import Admin, Field, Venue
from futsal.schemas import Page, Pagination, VenueCreate, VenueResponse, VenueUpdate

_REQUIRED = {"name", "address"}


class VenueCRUD(CRUD[Venue]):
    not_found_detail = "Venue not found"

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        qs = Venue.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict(f'A venue named "{name}" already exists')

    @staticmethod
    async def _counts(venue_id: UUID) -> tuple[int, int]:
        fields, admins = await asyncio.gather(
            Field.filter(venue_id=venue_id).count(),
            Admin.filter(venue_id=venue_id).count(),
        )
        return fields, admins

    async def _response(self, venue: Venue) -> VenueResponse:
        fields, admins = await self._counts(venue.id)
        return VenueResponse(
            id=venue.id,
            name=venue.name,
            address=venue.address,
            description=venue.description,
            latitude=venue.latitude,
            longitude=venue.longitude,
            field_count=fields,
            admin_count=admins,
            created_at=venue.created_at,
            updated_at=venue.updated_at,
        )

    async def create_venue(self, payload: VenueCreate) -> VenueResponse:
        await self._ensure_unique_name(payload.name)
        venue = await Venue.create(**payload.model_dump())
        self.log.info("Venue created: {}", venue.name)
        return await self._response(venue)

    async def list_venues(
        self, pagination: Pagination, search: str | None = None
    ) -> Page[VenueResponse]:
        qs = Venue.all()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(address__icontains=search))
        rows, meta = await self.paginate(qs.order_by("-created_at"), pagination)
        items = await asyncio.gather(*(self._response(v) for v in rows))
        return Page[VenueResponse](items=list(items), meta=meta)

    async def get_venue(self, venue_id: UUID) -> VenueResponse:
        return await self._response(await self.get_or_404(venue_id))

    async def update_venue(self, venue_id: UUID, payload: VenueUpdate) -> VenueResponse:
        venue = await self.get_or_404(venue_id)
        if payload.name is not None and payload.name != venue.name:
            await self._ensure_unique_name(payload.name, exclude_id=venue_id)

        changes = payload.model_dump(exclude_unset=True)
        # name and address are required columns; null there means "keep"
        changes = {k: v for k, v in changes.items() if v is not None or k not in _REQUIRED}
        if changes:
            venue.update_from_dict(changes)
            await venue.save()
            self.log.info("Venue updated: {}", venue.name)
        return await self._response(venue)

    async def delete_venue(self, venue_id: UUID) -> UUID:
        venue = await self.get_or_404(venue_id)
        fields, admins = await self._counts(venue_id)
        if fields:
            raise BadRequest(
                f"Venue cannot be deleted while it still has {fields} field(s)"
            )
        if admins:
            raise BadRequest(
                f"Venue cannot be deleted while {admins} admin(s) are assigned to it"
            )
        await venue.delete()
        self.log.info("Venue deleted: {}", venue.name)
        return venue_id


venue_crud = VenueCRUD(Venue)

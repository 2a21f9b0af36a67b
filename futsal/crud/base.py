from __future__ import annotations

import asyncio
from typing import Any, Generic, TypeVar
from uuid import UUID

from loguru import logger
from tortoise.models import Model
from tortoise.queryset import QuerySet

from futsal.errors import NotFound
from futsal.schemas import PageMeta, Pagination

ModelT = TypeVar("ModelT", bound=Model)


class CRUD(Generic[ModelT]):
    """Shared lookups and pagination for the model-specific CRUD classes."""

    not_found_detail = "Not found"

    def __init__(self, model: type[ModelT], log: Any = None) -> None:
        self.model = model
        self.log = log or logger.bind(context=type(self).__name__)

    async def get_or_404(self, obj_id: UUID, *prefetch: str) -> ModelT:
        qs = self.model.get_or_none(id=obj_id)
        if prefetch:
            qs = qs.prefetch_related(*prefetch)
        inst = await qs
        if inst is None:
            raise NotFound(self.not_found_detail)
        return inst

    async def exists_by(self, **filters: Any) -> bool:
        return await self.model.filter(**filters).exists()

    async def delete_by(self, **filters: Any) -> bool:
        return await self.model.filter(**filters).delete() > 0

    async def paginate(
        self, qs: QuerySet[ModelT], pagination: Pagination
    ) -> tuple[list[ModelT], PageMeta]:
        """Run the page query and the total count concurrently."""
        total, rows = await asyncio.gather(
            qs.count(),
            qs.offset(pagination.offset).limit(pagination.limit),
        )
        return list(rows), PageMeta.build(total, pagination.page, pagination.limit)

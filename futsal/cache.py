import json
from uuid import UUID

from loguru import logger
from redis.asyncio import Redis

from futsal.schemas import BookingSlot
from futsal.settings import REDIS_URL

_redis: Redis | None = None
SLOTS_TTL = 60  # 1 minute
_KEY_PREFIX = "futsal:occupied-slots"


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(REDIS_URL, decode_responses=True)
    return _redis


def occupied_slots_key(field_id: UUID) -> str:
    return f"{_KEY_PREFIX}:{field_id}"


async def read_occupied_slots(field_id: UUID) -> list[BookingSlot] | None:
    """Cached slots of a field, or None on a miss or when Redis is down."""
    try:
        raw = await get_redis().get(occupied_slots_key(field_id))
    except Exception:
        logger.opt(exception=True).warning(
            "Redis read failed for field {}, treating as miss", field_id
        )
        return None
    if not raw:
        return None
    return [BookingSlot(**s) for s in json.loads(raw)]


async def write_occupied_slots(field_id: UUID, slots: list[BookingSlot]) -> None:
    payload = json.dumps([s.model_dump(mode="json") for s in slots])
    try:
        await get_redis().setex(occupied_slots_key(field_id), SLOTS_TTL, payload)
    except Exception:
        logger.opt(exception=True).warning("Redis write failed for field {}", field_id)


async def forget_occupied_slots(*field_ids: UUID) -> None:
    """Drop cached slots; called after every booking state change."""
    if not field_ids:
        return
    try:
        await get_redis().delete(*(occupied_slots_key(f) for f in field_ids))
    except Exception:
        logger.opt(exception=True).warning("Redis delete failed for fields {}", field_ids)

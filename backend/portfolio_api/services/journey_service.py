"""Journey (timeline) business logic."""
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.middleware.error_handler import NotFound, ValidationFailed
from portfolio_api.models.journey import JourneyItem, JourneyType
from portfolio_api.schemas.journey import JourneyCreate, JourneyUpdate

logger = logging.getLogger(__name__)


async def list_items(
    db: AsyncSession, item_type: JourneyType | None, page: int, per_page: int,
) -> tuple[list[JourneyItem], int]:
    query = select(JourneyItem)
    if item_type is not None:
        query = query.where(JourneyItem.type == item_type)

    count_q = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_q)).scalar() or 0

    offset = (page - 1) * per_page
    query = query.order_by(JourneyItem.start_date.desc()).offset(offset).limit(per_page)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_item(db: AsyncSession, item_id: uuid.UUID) -> JourneyItem:
    item = await db.get(JourneyItem, item_id)
    if item is None:
        raise NotFound("Journey item not found")
    return item


async def create_item(db: AsyncSession, data: JourneyCreate) -> JourneyItem:
    item = JourneyItem(**data.model_dump())
    db.add(item)
    await db.flush()
    await db.refresh(item)
    logger.info("Journey item created: %s", item.id)
    return item


async def update_item(db: AsyncSession, item: JourneyItem, data: JourneyUpdate) -> JourneyItem:
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationFailed("No fields to update")
    for name in ("title", "company", "start_date", "type"):
        if name in changes and changes[name] is None:
            raise ValidationFailed(f"{name} cannot be null")

    start = changes.get("start_date", item.start_date)
    end = changes.get("end_date", item.end_date)
    if end is not None and end < start:
        raise ValidationFailed("end_date must not be before start_date")

    for key, value in changes.items():
        setattr(item, key, value)
    await db.flush()
    await db.refresh(item)
    return item


async def delete_item(db: AsyncSession, item: JourneyItem) -> None:
    await db.delete(item)
    await db.flush()
    logger.info("Journey item deleted: %s", item.id)

"""Contact form persistence."""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.models.contact import ContactMessage
from portfolio_api.schemas.contact import ContactCreate

logger = logging.getLogger(__name__)


async def save_message(db: AsyncSession, data: ContactCreate) -> ContactMessage:
    """Persist and commit; notifications go out only once the row is durable."""
    message = ContactMessage(**data.model_dump())
    db.add(message)
    await db.commit()
    await db.refresh(message)
    logger.info("Contact message %s stored from %s", message.id, message.email)
    return message


async def list_messages(db: AsyncSession, page: int, per_page: int) -> tuple[list[ContactMessage], int]:
    total = (await db.execute(select(func.count(ContactMessage.id)))).scalar() or 0
    offset = (page - 1) * per_page
    result = await db.execute(
        select(ContactMessage).order_by(ContactMessage.created_at.desc()).offset(offset).limit(per_page)
    )
    return list(result.scalars().all()), total

"""Visitor analytics: tracking and dashboard aggregation."""
import logging
from datetime import timedelta

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.models.analytics import VisitorEvent
from portfolio_api.schemas.analytics import VisitorCreate
from portfolio_api.services.chat_service import new_session_id
from portfolio_api.utils.helpers import utc_now

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
ACTIVE_WINDOW = timedelta(minutes=5)
TREND_DAYS = 7


async def track_visitor(
    db: AsyncSession,
    data: VisitorCreate,
    ip_address: str,
    user_agent: str | None,
    referrer_header: str | None,
) -> VisitorEvent:
    event = VisitorEvent(
        ip_address=ip_address,
        user_agent=user_agent,
        page_url=data.page_url or "/",
        referrer=data.referrer or referrer_header,
        country=data.country or UNKNOWN,
        city=data.city or UNKNOWN,
        device_type=data.device_type or UNKNOWN,
        browser=data.browser or UNKNOWN,
        session_id=data.session_id or new_session_id(),
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)
    return event


async def _grouped(db: AsyncSession, column, limit: int | None = None, skip_unknown: bool = True) -> list[tuple]:
    count_col = func.count(VisitorEvent.id).label("count")
    query = select(column, count_col).where(column.is_not(None))
    if skip_unknown:
        query = query.where(column != UNKNOWN)
    query = query.group_by(column).order_by(count_col.desc())
    if limit:
        query = query.limit(limit)
    return list((await db.execute(query)).all())


async def dashboard(db: AsyncSession) -> dict:
    today = utc_now().date()
    total = (await db.execute(select(func.count(VisitorEvent.id)))).scalar() or 0
    today_count = (await db.execute(
        select(func.count(VisitorEvent.id)).where(func.date(VisitorEvent.created_at) == today)
    )).scalar() or 0
    unique = (await db.execute(select(func.count(distinct(VisitorEvent.ip_address))))).scalar() or 0

    pages = await _grouped(db, VisitorEvent.page_url, limit=5, skip_unknown=False)
    countries = await _grouped(db, VisitorEvent.country, limit=10)
    devices = await _grouped(db, VisitorEvent.device_type)
    browsers = await _grouped(db, VisitorEvent.browser, limit=5)

    recent = (await db.execute(
        select(VisitorEvent).order_by(VisitorEvent.created_at.desc()).limit(10)
    )).scalars().all()

    day_col = func.date(VisitorEvent.created_at).label("day")
    trend = (await db.execute(
        select(day_col, func.count(VisitorEvent.id))
        .where(VisitorEvent.created_at >= utc_now() - timedelta(days=TREND_DAYS))
        .group_by(day_col)
        .order_by(day_col.asc())
    )).all()

    return {
        "overview": {
            "total_visitors": total,
            "today_visitors": today_count,
            "unique_visitors": unique,
            "total_page_views": total,
        },
        "top_pages": [{"page": p, "visits": n} for p, n in pages],
        "top_countries": [{"country": c, "visits": n} for c, n in countries],
        "device_stats": [{"device_type": d, "count": n} for d, n in devices],
        "browser_stats": [{"browser": b, "count": n} for b, n in browsers],
        "recent_visitors": [
            {
                "ip_address": v.ip_address,
                "country": v.country,
                "city": v.city,
                "page_url": v.page_url,
                "created_at": v.created_at,
            }
            for v in recent
        ],
        "visitor_trend": [{"date": str(day), "visits": n} for day, n in trend],
    }


async def realtime(db: AsyncSession, connected_listeners: int) -> dict:
    since = utc_now() - ACTIVE_WINDOW
    active = (await db.execute(
        select(func.count(distinct(VisitorEvent.session_id))).where(VisitorEvent.created_at >= since)
    )).scalar() or 0
    recent = (await db.execute(
        select(VisitorEvent).order_by(VisitorEvent.created_at.desc()).limit(10)
    )).scalars().all()
    return {
        "active_visitors": max(active, connected_listeners),
        "connected_clients": connected_listeners,
        "recent_activity": [
            {"page_url": v.page_url, "country": v.country, "created_at": v.created_at}
            for v in recent
        ],
        "timestamp": utc_now(),
    }

"""Async SQLAlchemy engine, session factory and request-scoped sessions."""
import logging
import time
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from portfolio_api.config import settings

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD_MS = 500


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Engine for ``url``; pool sizing only applies to server databases."""
    options: dict = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        options.update(pool_size=10, max_overflow=10)
    return create_async_engine(url, **options)


def log_slow_queries(target: AsyncEngine, threshold_ms: float = SLOW_QUERY_THRESHOLD_MS) -> None:
    """Warn about every statement that takes at least ``threshold_ms``."""
    sync_engine = target.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_started", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _stop_timer(conn, cursor, statement, parameters, context, executemany):
        started = conn.info.get("query_started")
        if not started:
            return
        elapsed_ms = (time.perf_counter() - started.pop()) * 1000
        if elapsed_ms >= threshold_ms:
            logger.warning("Slow query (%.1fms): %s", elapsed_ms, statement[:200])


engine = build_engine(settings.DATABASE_URL, echo=settings.APP_ENV == "development")
log_slow_queries(engine)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, committed when the handler returns cleanly."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_models() -> None:
    """Create any missing tables (development convenience; production uses alembic)."""
    from portfolio_api.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


def upsert(db: AsyncSession, model, index_elements: list[str], values: dict, set_: dict):
    """INSERT ... ON CONFLICT DO UPDATE for the session's dialect.

    Concurrent writers for the same key never collide; the last one wins.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise NotImplementedError(f"No upsert support for dialect {dialect!r}")
    return insert(model).values(**values).on_conflict_do_update(index_elements=index_elements, set_=set_)

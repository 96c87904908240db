"""Portfolio API - FastAPI entry point."""
import logging
import os
import sys

# asyncpg is incompatible with Windows ProactorEventLoop (default on Windows).
# Must be set before any asyncio usage.
if sys.platform == "win32":
    import asyncio
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from portfolio_api.config import Settings, settings
from portfolio_api.database import async_session_factory, engine, init_models
from portfolio_api.integrations.github.client import GitHubClient, GitHubConfig
from portfolio_api.integrations.media import MediaConfig, build_media_store
from portfolio_api.middleware.cors import UPLOADS_PATH, setup_cors, setup_uploads_headers
from portfolio_api.middleware.error_handler import setup_error_handlers
from portfolio_api.middleware.logging_middleware import LoggingMiddleware
from portfolio_api.middleware.rate_limiter import RateLimitMiddleware
from portfolio_api.services.auth_service import ensure_admin_user
from portfolio_api.services.mail_service import MailConfig, Mailer
from portfolio_api.api.v1 import analytics as analytics_router
from portfolio_api.api.v1 import auth as auth_router
from portfolio_api.api.v1 import blog as blog_router
from portfolio_api.api.v1 import chatbot as chatbot_router
from portfolio_api.api.v1 import contact as contact_router
from portfolio_api.api.v1 import journey as journey_router
from portfolio_api.api.v1 import projects as projects_router
from portfolio_api.api.v1 import skills as skills_router
from portfolio_api.api.v1 import stats as stats_router
from portfolio_api.api import websocket as ws_router

logger = structlog.get_logger()


# ── Adapter configuration, derived once from Settings ──

def media_config_from(cfg: Settings) -> MediaConfig:
    return MediaConfig(
        backend=cfg.MEDIA_BACKEND,
        upload_dir=cfg.UPLOAD_DIR,
        public_prefix=UPLOADS_PATH.strip("/"),
        max_bytes=cfg.MAX_UPLOAD_BYTES,
        cloud_name=cfg.CLOUDINARY_CLOUD_NAME,
        api_key=cfg.CLOUDINARY_API_KEY,
        api_secret=cfg.CLOUDINARY_API_SECRET,
    )


def mail_config_from(cfg: Settings) -> MailConfig:
    return MailConfig(
        host=cfg.SMTP_HOST,
        port=cfg.SMTP_PORT,
        username=cfg.SMTP_USERNAME,
        password=cfg.SMTP_PASSWORD,
        use_tls=cfg.SMTP_USE_TLS,
        from_name=cfg.MAIL_FROM_NAME,
        owner_email=cfg.ADMIN_EMAIL,
    )


def github_config_from(cfg: Settings) -> GitHubConfig:
    return GitHubConfig(
        base_url=cfg.GITHUB_API_BASE,
        token=cfg.GITHUB_TOKEN,
        timeout=cfg.GITHUB_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info("startup", env=settings.APP_ENV, media_backend=settings.MEDIA_BACKEND)
    # Sentry init
    if settings.SENTRY_DSN:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration

        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[FastApiIntegration()],
            traces_sample_rate=0.1 if settings.APP_ENV == "production" else 1.0,
            environment=settings.APP_ENV,
        )
    if settings.APP_ENV == "development":
        await init_models()
    async with async_session_factory() as session:
        await ensure_admin_user(session)
        await session.commit()

    # Start Redis Pub/Sub listener for WebSocket cross-instance support
    from portfolio_api.api.websocket import manager as ws_manager
    await ws_manager.start_redis_listener()

    yield

    # Shutdown: stop Redis listener, close adapters and Redis, dispose DB engine
    await ws_manager.stop_redis_listener()
    await app.state.github_client.close()
    await app.state.media_store.close()
    from portfolio_api.utils.redis_client import close_redis
    await close_redis()
    await engine.dispose()
    logger.info("shutdown")


def create_app() -> FastAPI:
    application = FastAPI(
        title="Portfolio API",
        description="Personal portfolio backend: projects, skills, blog, journey, chatbot, analytics",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Adapters (overridable in tests through dependency_overrides)
    application.state.media_store = build_media_store(media_config_from(settings))
    application.state.mailer = Mailer(mail_config_from(settings))
    application.state.github_client = GitHubClient(github_config_from(settings))

    # Middleware (order matters: last added = first executed)
    setup_cors(application)
    setup_uploads_headers(application)
    setup_error_handlers(application)
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(RateLimitMiddleware)

    # API Routers
    application.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
    application.include_router(projects_router.router, prefix="/api/projects", tags=["Projects"])
    application.include_router(skills_router.router, prefix="/api/skills", tags=["Skills"])
    application.include_router(blog_router.router, prefix="/api/blog", tags=["Blog"])
    application.include_router(journey_router.router, prefix="/api/journey", tags=["Journey"])
    application.include_router(contact_router.router, prefix="/api/contact", tags=["Contact"])
    application.include_router(chatbot_router.router, prefix="/api/chatbot", tags=["Chatbot"])
    application.include_router(analytics_router.router, prefix="/api/analytics", tags=["Analytics"])
    application.include_router(stats_router.router, prefix="/api/stats", tags=["Stats"])
    application.include_router(ws_router.router, tags=["WebSocket"])

    # Locally stored media
    if settings.MEDIA_BACKEND == "local":
        os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    application.mount(
        UPLOADS_PATH,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    # Health check
    @application.get("/api/health", tags=["health"])
    async def health_check() -> dict:
        return {
            "status": "ok",
            "environment": settings.APP_ENV,
            "connected_clients": ws_router.manager.listener_count,
        }

    return application


app = create_app()

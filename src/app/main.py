from functools import partial
import logging

from fastapi import FastAPI
from contextlib import asynccontextmanager

from src.app.config import settings
from src.app.exceptions import register_exception_handlers
from src.app.logging_config import setup_logging
from src.app.middleware import register_middleware
from src.api.v1.router import api_router
from src.core.allowlist import AllowlistCache, AllowlistSubscription, RedisAllowlistSource
from src.core.auth import Authenticator
from src.core.rate_limiter import RateLimiter
from src.core.security import build_identity_verifier
from src.db.base import SessionLocal
from src.repositories.allowlist_repo import load_subject_ids

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    subscription = AllowlistSubscription(
        app.state.allowlist_cache,
        RedisAllowlistSource(
            partial(load_subject_ids, SessionLocal),
            redis_url=settings.REDIS_URL,
            channel=settings.ALLOWLIST_CHANNEL,
            resync_interval=settings.ALLOWLIST_RESYNC_SECONDS,
        ),
        max_backoff=settings.ALLOWLIST_MAX_BACKOFF_SECONDS,
    )
    subscription.start()
    app.state.allowlist_subscription = subscription

    if settings.RATE_LIMIT_ENABLED:
        app.state.rate_limiter = RateLimiter(settings.REDIS_URL, settings.RATE_LIMIT_PER_MINUTE)

    yield

    # Shutdown
    logger.info("Shutting down...")
    await subscription.stop()
    limiter = getattr(app.state, "rate_limiter", None)
    if limiter is not None:
        await limiter.close()
        app.state.rate_limiter = None


def create_application() -> FastAPI:
    setup_logging()

    application = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version="0.1.0",
        lifespan=lifespan,
    )

    cache = AllowlistCache(settings.ALLOWLIST_EMPTY_POLICY)
    application.state.allowlist_cache = cache
    application.state.authenticator = Authenticator(build_identity_verifier(), cache)
    application.state.rate_limiter = None

    register_exception_handlers(application)
    register_middleware(application)

    # Routers
    application.include_router(api_router)

    @application.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "allowlist_loaded": cache.loaded,
            "allowlist_size": len(cache),
        }

    @application.get("/")
    async def root():
        return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

    return application


app = create_application()

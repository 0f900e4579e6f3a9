"""
MyStar Backend API
FastAPI application for the MyStar video-greeting marketplace.

Features:
- PayPal wallet top-ups (create order, capture, connection test)
- Transactional email through Resend (templates, order and creator notices, contact form)
- Video request booking paid from the fan's wallet
- Admin, fan and creator state stores
- Site configuration and categories kept current by Supabase realtime
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import ROUTERS
from .config import Settings, get_settings
from .errors import register_error_handlers
from .logging_config import setup_logging
from .site_config import SiteConfigCache
from .stores import EarningsRegistry
from .supabase_client import create_realtime_client, subscribe_table_changes

logger = logging.getLogger(__name__)


async def start_realtime(app: FastAPI, settings: Settings):
    """Subscribe the in-memory caches to their Supabase tables"""
    async_client = await create_realtime_client(settings)
    await subscribe_table_changes(
        async_client,
        "platform_config_changes",
        "platform_config",
        "UPDATE",
        app.state.site_config.handle_change,
        filter="key=eq.site_config",
    )
    await subscribe_table_changes(
        async_client,
        "earnings_changes",
        "earnings",
        "*",
        app.state.earnings.handle_change,
    )
    return async_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.realtime = None

    if settings.REALTIME_ENABLED:
        try:
            app.state.realtime = await start_realtime(app, settings)
        except Exception as e:
            logger.error(f"Realtime subscriptions unavailable, caches will not refresh: {e}")

    logger.info(f"MyStar API started ({settings.ENVIRONMENT})")
    yield

    if app.state.realtime is not None:
        await app.state.realtime.remove_all_channels()
    logger.info("MyStar API stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="MyStar API",
        description="Personalized video greetings from creators",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.site_config = SiteConfigCache()
    app.state.earnings = EarningsRegistry()
    app.state.realtime = None

    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/")
    async def root():
        return {"message": "MyStar API", "version": __version__, "docs": "/docs"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("mystar.main:app", host="0.0.0.0", port=8000, reload=not get_settings().is_production)

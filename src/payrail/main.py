"""FastAPI application factory and lifespan management."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payrail import __version__
from payrail.config import settings
from payrail.db.engine import create_db_engine, create_session_factory
from payrail.integrations.custody import CustodyClient
from payrail.integrations.push import ExpoPushSender
from payrail.logging_config import configure_logging
from payrail.services.asset_resolver import AssetCatalogCache

# Configure logging at import time
_json_logs = os.environ.get("PAYRAIL_LOCAL", "0") != "1"
configure_logging(log_level=settings.log_level, json_output=_json_logs)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev, no Alembic migrations)
    if "sqlite" in db_url:
        from payrail.db.base import Base
        import payrail.db.models  # noqa: F401  register all ORM models

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)

    app.state.custody_client = CustodyClient(
        base_url=settings.custody_api_url,
        api_key=settings.custody_api_key,
        wallet_id=settings.custody_wallet_id,
        timeout=settings.custody_timeout_seconds,
    )
    app.state.push_sender = ExpoPushSender(settings.push_api_url, max_attempts=settings.push_max_attempts)
    app.state.catalog_cache = (
        AssetCatalogCache(settings.asset_catalog_ttl_seconds) if settings.asset_catalog_ttl_seconds > 0 else None
    )

    logger.info("payrail API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    # Shutdown
    await app.state.custody_client.aclose()
    await app.state.push_sender.aclose()
    await engine.dispose()
    logger.info("payrail API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="payrail API",
        version=__version__,
        description="Deposit settlement and automatic payout webhooks for freelancer payments.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from payrail.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    # Register error handlers
    from payrail.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    # Import and mount routers
    from payrail.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()

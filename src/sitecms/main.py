# src/sitecms/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from src.sitecms.core.config import Settings, configure_logging, get_settings
from src.sitecms.core.db import Database
from src.sitecms.core.email import EmailService
from src.sitecms.core.initial_data import init_super_admin
from src.sitecms.core.redis_cache import init_async_redis
from src.sitecms.errors import register_error_handlers
from src.sitecms.middleware import BodySizeLimitMiddleware

from src.sitecms.api.auth import router as auth_router
from src.sitecms.api.admin import router as admin_router
from src.sitecms.api.content import router as content_router
from src.sitecms.api.contact import router as contact_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    owns_database = app.state.database is None
    owns_redis = False
    try:
        logger.info("Starting %s (%s)", settings.PROJECT_NAME, settings.MODE)

        # Load Vault secrets (async)
        if settings.VAULT_URL and settings.VAULT_TOKEN:
            logger.info("Loading secrets from Vault...")
            await settings.load_secrets_from_vault_async()
            logger.info("Vault secrets loaded")

        #  Initialize DB
        if owns_database:
            app.state.database = Database.from_settings(settings)
        await app.state.database.ping()
        await app.state.database.create_all()
        async with app.state.database.session_factory() as session:
            await init_super_admin(session, settings)
        logger.info("DB initialized")

        # Initialize Redis
        if app.state.redis is None and settings.redis_enabled:
            app.state.redis = await init_async_redis(settings)
            owns_redis = True

        yield

    finally:
        # Shutdown logic
        if owns_redis and app.state.redis is not None:
            await app.state.redis.aclose()
            app.state.redis = None
        if owns_database and app.state.database is not None:
            await app.state.database.dispose()
            app.state.database = None
        logger.info("Shutting down server...")


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    email_service: Optional[EmailService] = None,
    redis_client: Optional[Redis] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.email_service = email_service or EmailService(settings)
    app.state.redis = redis_client

    app.add_middleware(BodySizeLimitMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app)

    # Health check route
    @app.get("/health")
    async def health_check():
        redis_status = "not configured"
        if app.state.redis is not None:
            try:
                pong = await app.state.redis.ping()
                redis_status = "alive" if pong else "dead"
            except Exception:
                redis_status = "error"

        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "redis": redis_status,
        }

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(content_router)
    app.include_router(contact_router)
    return app


app = create_app()

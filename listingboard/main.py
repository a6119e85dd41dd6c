"""
Listing Board - Main Application

FastAPI backend with:
- PostgreSQL (SQLAlchemy pool) for users and listings
- JWT authentication, admin-only listing management
- Client session lifecycle helpers in listingboard.session

Run: uvicorn listingboard.main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from listingboard import __version__
from listingboard.api.routes import api_router
from listingboard.core.config import Settings, get_settings
from listingboard.core.errors import register_exception_handlers
from listingboard.core.logging_config import configure_logging, get_logger
from listingboard.db.postgres import Database

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    The database handle is created on startup (unless one is passed in)
    and disposed on shutdown; handlers receive it through get_database.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_settings = settings or get_settings()
        configure_logging(app_settings.log_level)
        app.state.settings = app_settings
        owned = database is None
        app.state.database = database or Database.from_settings(app_settings)
        logger.info("Database pool ready")
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
                logger.info("Database pool disposed")

    app = FastAPI(
        title="Listing Board",
        description="""
        Internship and project listings.

        ## Features
        - **Authentication**: signup/login with JWT bearer tokens
        - **Listings**: public browsing, admin-only create/update/delete
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware (allow all for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routes are served both at the root and under /api
    app.include_router(api_router)
    app.include_router(api_router, prefix="/api", include_in_schema=False)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Database connectivity and which settings are present (never their values)."""
        app_settings: Settings = request.app.state.settings
        connected = request.app.state.database.ping()
        return {
            "status": "healthy" if connected else "degraded",
            "environment": app_settings.environment,
            "database": "connected" if connected else "disconnected",
            "env_vars": {
                "DATABASE_URL": "set" if app_settings.database_url else "not set",
                "FALLBACK_DATABASE_URL": "set" if app_settings.fallback_database_url else "not set",
                "ADMIN_EMAIL": "set" if app_settings.admin_email else "not set",
                "ADMIN_PASSWORD": "set" if app_settings.admin_password else "not set",
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()

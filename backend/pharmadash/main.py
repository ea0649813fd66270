"""
Pharmacy Dashboard Backend.

ARCHITECTURE:
- Front end: renders tabs, tables, forms and stats tiles from this API
- FastAPI backend: connection lifecycle, record views, stats, tab selection
- Hosted data API (PostgREST/Supabase): source of truth for all pharmacy rows
- Local SQLite: client-local storage for the credential pair only

Nothing is queried until a credential pair has been validated by a probe.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmadash.api.routes import analytics, connection, dashboard, records
from pharmadash.core.config import settings
from pharmadash.db.init_db import init_db
from pharmadash.gateway.client import DataGateway
from pharmadash.services.connection_manager import ConnectionManager, GatewayFactory
from pharmadash.services.credential_store import CredentialStore
from pharmadash.services.dashboard import Dashboard

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = None) -> None:
    logging.basicConfig(level=level or settings.LOG_LEVEL, format=LOG_FORMAT)


def create_app(
    store: Optional[CredentialStore] = None,
    gateway_factory: GatewayFactory = DataGateway,
) -> FastAPI:
    """
    Build the API around one connection manager and one dashboard.

    Passing a store skips local table creation (the caller owns that storage).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
        1. Create local storage tables
        2. Restore the stored connection (silent probe)

        Shutdown:
        1. Retire the gateway handle
        """
        if store is None:
            logger.info("Initializing local storage...")
            init_db()
        try:
            manager.restore()
        except Exception as e:
            # Start-up must not die because the data API is unreachable
            logger.error(f"Connection restore failed: {e}", exc_info=True)

        yield

        manager.close()
        logger.info("Gateway handle released")

    manager = ConnectionManager(store or CredentialStore(), gateway_factory=gateway_factory)
    board = Dashboard(manager)

    app = FastAPI(
        title="Pharmacy Dashboard API",
        description="Inventory, low stock, restocking and employee records over a hosted data API.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.connection_manager = manager
    app.state.dashboard = board

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin"],
        max_age=600,
    )

    @app.middleware("http")
    async def add_security_headers(request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    app.include_router(connection.router, prefix="/connection", tags=["connection"])
    app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(records.router, prefix="/records", tags=["records"])
    app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])

    @app.get("/health")
    def health():
        return {"status": "ok", "connection": manager.state.value}

    return app


configure_logging()
app = create_app()

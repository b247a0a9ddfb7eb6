"""
Main entrypoint for the EventHub API.

This module assembles the FastAPI application: it sets up logging,
builds the entity store and the services from a ``Settings`` instance,
and mounts the versioned routers under ``/api``.  The module-level
``app`` uses the environment-derived settings, so the API can be run
with::

    uvicorn eventhub_api.app.main:app --reload

Tests call ``create_app`` with their own ``Settings`` instead.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import EntityStore
from .core.errors import StoreError
from .core.logging_config import setup_logging
from .services.cancellation_service import CancellationService
from .services.event_service import EventService
from .services.ranking_service import RankingService
from .services.registration_service import RegistrationService
from .services.user_service import UserService


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to build the application from.  Defaults to the
        module-level settings read from the environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the services
    # below can safely log messages.
    setup_logging(settings.log_level, settings.log_file or None)
    logger = logging.getLogger(__name__)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    store = EntityStore(settings.database_url, timeout=settings.db_timeout_seconds)
    app.state.settings = settings
    app.state.store = store
    app.state.user_service = UserService(
        store, settings.secret_key, settings.access_token_expire_minutes * 60
    )
    app.state.event_service = EventService(store)
    app.state.registration_service = RegistrationService(store)
    app.state.cancellation_service = CancellationService(
        store,
        lead_days=settings.cancellation_lead_days,
        require_creator=settings.cancel_requires_creator,
    )
    app.state.ranking_service = RankingService(store, top_limit=settings.top_events_limit)

    app.include_router(v1_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def home() -> dict:
        return {"message": f"{settings.project_name} is running"}

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.exception("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # Apply migrations at startup.  This creates the database file if it
    # does not exist and brings the schema up to date.
    @app.on_event("startup")
    async def startup_event() -> None:
        store.init_db()
        logger.info("Database ready at %s", store.database_path)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()

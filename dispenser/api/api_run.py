from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text

from typing import Optional
import logging

from dispenser.api.services import Services
from dispenser.events.Event_Bus import EventBus
from dispenser.infra.database import Database
from dispenser.logic.clock.resolver import ClockResolver
from dispenser.utilities.config import DAILY_RESET_ENABLED, DAILY_RESET_HOUR, DEBUG, DISPENSE_TIMEOUT_SECONDS

# Routers
from dispenser.api.routes import alerts, dispenser as dispenser_routes

# Logging
logger = logging.getLogger("dispenser_app")


def create_app(database: Optional[Database] = None, clock: Optional[ClockResolver] = None,
               event_bus: Optional[EventBus] = None, start_scheduler: bool = DAILY_RESET_ENABLED,
               dispense_timeout: float = DISPENSE_TIMEOUT_SECONDS) -> FastAPI:
    """Build the API around one database.

    Tables are created eagerly so the first device request never races the
    schema. The daily reset thread only runs between startup and shutdown.
    """
    database = database or Database()
    database.create_all()
    services = Services(database, clock=clock, event_bus=event_bus,
                        dispense_timeout=dispense_timeout, reset_hour=DAILY_RESET_HOUR)

    # Initialize FastAPI app
    app = FastAPI(title="Household Medication Dispenser API", debug=DEBUG)
    app.state.services = services

    # Include routers
    app.include_router(dispenser_routes.router)
    app.include_router(alerts.router)

    @app.on_event("startup")
    def _startup_background():
        if start_scheduler:
            services.reset_scheduler.start()
        else:
            logger.info("Daily reset scheduler disabled")

    @app.on_event("shutdown")
    def _shutdown_background():
        services.shutdown()

    @app.get("/health")
    def health():
        try:
            with database.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ok"}

    return app

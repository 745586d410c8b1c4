# The module provides a FastAPI application that serves the advisor chat widget.
# Date: 2026-10-19
# Version: 0.2.0

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from compass.api.v1.api import api_router
from compass.core.config import get_settings
from compass.core.container import CompassServices, build_services
from compass.services.session_manager import SessionManager
from compass.utils.logger import console


def create_app(services: Optional[CompassServices] = None,
               session_manager: Optional[SessionManager] = None) -> FastAPI:
    """
    Builds the application. Services are constructed once here, or injected
    (tests pass their own).
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_services = services or build_services(get_settings())
        app.state.services = app_services
        app.state.session_manager = session_manager or SessionManager(app_services)
        yield
        if app_services.narrator is not None:
            await app_services.narrator.drain()
        await app.state.session_manager.close()

    app = FastAPI(
        title="Course Compass",
        version="0.2.0",
        description="A conversational academic advisor with study plan generation and PDF export.",
        lifespan=lifespan,
    )

    @app.get("/", summary="Health Check", tags=["Status"])
    def read_root():
        """Root endpoint to check if the service is alive."""
        console.info("Health check endpoint was hit.")
        return {"message": "Course Compass is alive and running!"}

    # Include the v1 router with a global '/v1' prefix
    app.include_router(api_router, prefix="/v1")
    return app


app = create_app()

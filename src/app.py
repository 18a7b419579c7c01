"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
State is hydrated from the durable store before the first request is served
and pending write-backs are flushed on shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import assignments, auth, stats, student, users
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from core.logging_config import setup_logging
from utils.tracker_context import TrackerContext

APP_TITLE = "Mustang Stride API"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Assignment efficiency study platform: local state service."


def create_app(context: Optional[TrackerContext] = None) -> FastAPI:
    """Build the application.

    Args:
        context: Prebuilt TrackerContext. A default one backed by
            STATE_DB_PATH is created at startup when omitted.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tracker = context or TrackerContext()
        app.state.tracker = tracker
        await tracker.start()
        try:
            yield
        finally:
            await tracker.stop()

    app = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        lifespan=lifespan,
    )

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register route handlers
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(stats.router)
    app.include_router(assignments.router)
    app.include_router(student.router)

    @app.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """API root, returns API information and documentation links."""
        return {
            "name": APP_TITLE,
            "version": APP_VERSION,
            "description": APP_DESCRIPTION,
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc",
            },
            "health": "/api/health",
        }

    @app.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        """Health check endpoint; reports whether state has been loaded."""
        tracker = getattr(app.state, "tracker", None)
        hydrated = bool(tracker and tracker.hydration.is_hydrated)
        return {"status": "ok", "hydrated": hydrated}

    return app


setup_logging()

app = create_app()


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)

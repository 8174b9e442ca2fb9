"""
FastAPI App Factory - Creates and configures the app
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .routes import (
    connection_router,
    movement_router,
    device_router,
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title="EAT Tilt Controller API",
        description="REST API for the ASG electronic tilt (EAT) device",
        version="1.0.0",
    )

    # Invalid tokens / values from the command layer
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    # Register routers with /api prefix
    app.include_router(connection_router, prefix="/api")
    app.include_router(movement_router, prefix="/api")
    app.include_router(device_router, prefix="/api")

    return app

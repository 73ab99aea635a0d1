"""
FastAPI Application Factory

Assembles the REST API:
- Routes (pins, groups, scenarios, presets, diagnostics, system)
- CORS middleware
- Exception handlers for the simulator error taxonomy

The factory is shared by main_asyncio.py and the tests. Services are not
passed in; endpoints reach them through the service container dependency.
"""
import sys
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import pins, groups, scenarios, presets, diagnostics, system
from api.middleware.error_handler import register_exception_handlers
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)


def create_app(
    title: str = "GPIO Simulator",
    description: str = "REST API for the simulated GPIO pin bank and scenario engine",
    version: str = "1.0.0",
    docs_enabled: bool = True,
    cors_origins: list[str] = None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        title: API title (shown in docs)
        description: API description
        version: API version
        docs_enabled: Enable /docs and /redoc
        cors_origins: CORS allowed origins (default: local dev servers)

    Returns:
        Configured FastAPI application ready to run
    """

    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None
    )

    log.info(f"Creating FastAPI app: {title} v{version}")

    # =========================================================================
    # CORS Configuration
    # =========================================================================

    if cors_origins is None:
        cors_origins = [
            "http://localhost:3000",      # React dev server (default)
            "http://localhost:5173",      # Vite dev server
            "http://localhost",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    log.debug(f"CORS enabled for origins: {cors_origins}")

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    register_exception_handlers(app)

    log.debug("Exception handlers registered")

    # =========================================================================
    # Routes
    # =========================================================================

    for router in (pins.router, groups.router, scenarios.router, presets.router,
                   diagnostics.router, system.router):
        app.include_router(router, prefix="/api/v1")

    log.debug("Routes registered under /api/v1: pins, groups, scenarios, presets, history, log, system")

    # =========================================================================
    # Health Check Endpoint
    # =========================================================================

    @app.get(
        "/api/health",
        tags=["System"],
        summary="Health check",
        description="Check if API is running and responding"
    )
    async def health_check():
        """Simple health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "service": "gpio-simulator-api",
            "version": version
        }

    @app.get("/", include_in_schema=False)
    async def root():
        return JSONResponse(
            {
                "message": "GPIO Simulator API",
                "docs": "/docs",
                "health": "/api/health"
            }
        )

    log.info(f"FastAPI app created successfully: {title}")

    return app

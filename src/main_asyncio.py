"""
main_asyncio.py — Application entry point for the GPIO simulator
------------------------------------------------------------------

Responsible for:
- loading configuration and configuring the console logger
- building the services (Dependency Injection via ServiceContainer)
- initializing the default board
- serving the REST API with uvicorn on the asyncio loop
- stopping the scenario engine and background tasks on exit
"""

import sys

# ---------------------------------------------------------------------------
# UTF-8 ENCODING FIX
# ---------------------------------------------------------------------------

if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

import asyncio

import uvicorn
from fastapi import FastAPI

from api.dependencies import set_service_container
from api.main import create_app
from managers import ConfigManager
from models.enums import LogCategory
from services.service_container import ServiceContainer
from services.middleware import log_middleware
from utils.logger import get_logger, configure_logger

log = get_logger().for_category(LogCategory.SYSTEM)


# ---------------------------------------------------------------------------
# API SERVER RUNNER
# ---------------------------------------------------------------------------

async def run_api_server(app: FastAPI, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run FastAPI/Uvicorn server in the current asyncio event loop until it exits"""
    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        loop="asyncio",
        log_level="info",
        access_log=False,
    )

    server = uvicorn.Server(config)

    try:
        log.debug(f"Starting API server on {host}:{port}")
        await server.serve()
    except asyncio.CancelledError:
        log.debug("API server cancelled")
        raise


# ---------------------------------------------------------------------------
# Application Entry
# ---------------------------------------------------------------------------

async def main():
    """Main async entry point (dependency injection and event loop startup)."""

    # === Configuration ===
    config_manager = ConfigManager()
    config_manager.load()
    settings = config_manager.settings

    configure_logger(settings.log_level, settings.log_use_colors)
    log.info("Configuration loaded", board=settings.default_board, boards=len(config_manager.boards))

    # === Services ===
    services = ServiceContainer.build(config_manager)
    services.event_bus.bind_loop(asyncio.get_running_loop())
    services.event_bus.add_middleware(log_middleware)

    services.simulator.initialize(settings.default_board)

    if settings.auto_refresh_enabled:
        services.simulator.start_auto_refresh(settings.auto_refresh_interval_ms)

    # === API ===
    set_service_container(services)
    app = create_app()

    log.info("Application initialized. Serving API...")
    try:
        await run_api_server(app, settings.api_host, settings.api_port)
    finally:
        services.simulator.stop_auto_refresh()
        services.simulator.stop()
        set_service_container(None)
        log.info("GPIO simulator shut down cleanly.")


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")

"""
Diagnostics endpoints - pin history and the user-facing event log
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies import get_service_container
from api.schemas.diagnostics import HistoryResponse, LogResponse, RecordingToggleRequest
from services.service_container import ServiceContainer

router = APIRouter(tags=["Diagnostics"])


@router.get("/history", response_model=HistoryResponse, summary="Export pin history")
async def get_history(
    newest_first: bool = False,
    services: ServiceContainer = Depends(get_service_container)
) -> HistoryResponse:
    entries = services.simulator.export_history(newest_first=newest_first)
    return HistoryResponse(entries=entries, count=len(entries), enabled=services.history.enabled)


@router.delete("/history", summary="Clear pin history")
async def clear_history(services: ServiceContainer = Depends(get_service_container)) -> dict:
    services.simulator.clear_history()
    return {"cleared": True}


@router.put("/history/enabled", summary="Enable or pause history recording")
async def set_history_enabled(
    request: RecordingToggleRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> dict:
    services.simulator.set_history_enabled(request.enabled)
    return {"enabled": services.history.enabled}


@router.get("/log", response_model=LogResponse, summary="Export event log")
async def get_log(
    newest_first: bool = False,
    services: ServiceContainer = Depends(get_service_container)
) -> LogResponse:
    entries = services.simulator.export_log(newest_first=newest_first)
    return LogResponse(entries=entries, count=len(entries), enabled=services.event_log.enabled)


@router.get("/log/text", response_class=PlainTextResponse, summary="Export event log as text")
async def get_log_text(services: ServiceContainer = Depends(get_service_container)) -> str:
    """`[timestamp] [SEVERITY] message` lines, newest first"""
    return services.simulator.export_log_text()


@router.delete("/log", summary="Clear event log")
async def clear_log(services: ServiceContainer = Depends(get_service_container)) -> dict:
    services.simulator.clear_log()
    return {"cleared": True}


@router.put("/log/enabled", summary="Enable or pause event log recording")
async def set_log_enabled(
    request: RecordingToggleRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> dict:
    services.simulator.set_log_enabled(request.enabled)
    return {"enabled": services.event_log.enabled}

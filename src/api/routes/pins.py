"""
Pin Endpoints - HTTP routes for pin control

Every route delegates to SimulatorService; errors raised there are turned
into ErrorResponse bodies by the exception handlers.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from api.dependencies import get_service_container
from api.schemas.pin import (
    PinConfigRequest, PinDutyCycleRequest, PinListResponse, PinModeRequest,
    PinResponse, PinStateRequest
)
from models.enums import LogCategory
from services.service_container import ServiceContainer
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.API)

router = APIRouter(
    prefix="/pins",
    tags=["Pins"],
)


def _pin_list(pins) -> PinListResponse:
    return PinListResponse(pins=[PinResponse(**pin) for pin in pins], count=len(pins))


# ============================================================================
# GET ENDPOINTS - Retrieve pin data (read-only, safe)
# ============================================================================

@router.get(
    "",
    response_model=PinListResponse,
    summary="List all pins",
)
async def list_pins(services: ServiceContainer = Depends(get_service_container)) -> PinListResponse:
    """Current snapshot of every pin in board order"""
    return _pin_list(services.simulator.snapshot_pins())


@router.get(
    "/export",
    summary="Export pin records",
    description="Ordered pin records in the format accepted by POST /pins/import"
)
async def export_pins(services: ServiceContainer = Depends(get_service_container)) -> list:
    return services.simulator.export_pins()


@router.get(
    "/{pin_id}",
    response_model=PinResponse,
    summary="Get pin details",
)
async def get_pin(pin_id: int, services: ServiceContainer = Depends(get_service_container)) -> PinResponse:
    """
    **Errors:**
    - 404: Pin not found
    """
    return PinResponse(**services.simulator.get_pin(pin_id))


# ============================================================================
# WRITE ENDPOINTS
# ============================================================================

@router.post("/{pin_id}/toggle", response_model=PinResponse, summary="Toggle pin level")
async def toggle_pin(pin_id: int, services: ServiceContainer = Depends(get_service_container)) -> PinResponse:
    return PinResponse(**services.simulator.toggle(pin_id))


@router.put("/{pin_id}/state", response_model=PinResponse, summary="Set pin level")
async def set_pin_state(
    pin_id: int,
    request: PinStateRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> PinResponse:
    return PinResponse(**services.simulator.set_state(pin_id, request.state))


@router.put("/{pin_id}/mode", response_model=PinResponse, summary="Set pin mode")
async def set_pin_mode(
    pin_id: int,
    request: PinModeRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> PinResponse:
    """
    **Errors:**
    - 404: Pin not found
    - 422: Unknown mode
    """
    return PinResponse(**services.simulator.set_mode(pin_id, request.mode))


@router.put("/{pin_id}/duty-cycle", response_model=PinResponse, summary="Set PWM duty cycle")
async def set_pin_duty_cycle(
    pin_id: int,
    request: PinDutyCycleRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> PinResponse:
    """Values outside 0-100 are rejected with 422, never clamped"""
    return PinResponse(**services.simulator.set_duty_cycle(pin_id, request.duty_cycle))


@router.patch("/{pin_id}/config", response_model=PinResponse, summary="Update pin configuration")
async def update_pin_config(
    pin_id: int,
    request: PinConfigRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> PinResponse:
    """Only the supplied fields change; enabling one pull resistor clears the other"""
    fields = request.model_dump(exclude_none=True)
    return PinResponse(**services.simulator.apply_config(pin_id, fields))


# ============================================================================
# BATCH ENDPOINTS
# ============================================================================

@router.post("/refresh", response_model=PinListResponse, summary="Simulate input changes")
async def refresh_pins(services: ServiceContainer = Depends(get_service_container)) -> PinListResponse:
    """Randomly flips input pins; returns the pins that changed"""
    return _pin_list(services.simulator.refresh_pin_states())


@router.post("/reconcile", response_model=PinListResponse, summary="Merge external pin snapshot")
async def reconcile_pins(
    payload: Any = Body(..., description="List of partial pin records or {\"pins\": [...]}"),
    services: ServiceContainer = Depends(get_service_container)
) -> PinListResponse:
    """
    Inbound hook for an authoritative remote system.

    **Errors:**
    - 400: Malformed payload (pins unchanged)
    """
    updated = services.simulator.reconcile(payload)
    log.debug("Reconcile request handled", updated=len(updated))
    return _pin_list(updated)


@router.post("/import", response_model=PinListResponse, summary="Replace all pins")
async def import_pins(
    payload: Any = Body(..., description="Pin records as produced by GET /pins/export"),
    services: ServiceContainer = Depends(get_service_container)
) -> PinListResponse:
    """
    **Errors:**
    - 400: Malformed payload (pins unchanged)
    """
    return _pin_list(services.simulator.import_pins(payload))

"""Preset endpoints"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_service_container
from api.schemas.preset import PresetListResponse, PresetResponse, PresetSaveRequest
from services.service_container import ServiceContainer
from utils.serialization import Serializer

router = APIRouter(prefix="/presets", tags=["Presets"])


@router.get("", response_model=PresetListResponse, summary="List presets")
async def list_presets(services: ServiceContainer = Depends(get_service_container)) -> PresetListResponse:
    presets = [PresetResponse(**Serializer.preset_to_dict(p)) for p in services.simulator.list_presets()]
    return PresetListResponse(presets=presets, count=len(presets))


@router.post(
    "",
    response_model=PresetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save current pins as preset",
)
async def save_preset(
    request: PresetSaveRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> PresetResponse:
    preset = services.simulator.save_preset(request.name, request.description)
    return PresetResponse(**Serializer.preset_to_dict(preset))


@router.post("/{preset_id}/load", response_model=PresetResponse, summary="Load preset")
async def load_preset(preset_id: str, services: ServiceContainer = Depends(get_service_container)) -> PresetResponse:
    """Replaces every pin with the preset's snapshot"""
    preset = services.simulator.load_preset(preset_id)
    return PresetResponse(**Serializer.preset_to_dict(preset))


@router.delete("/{preset_id}", summary="Delete preset")
async def delete_preset(preset_id: str, services: ServiceContainer = Depends(get_service_container)) -> dict:
    return {"deleted": services.simulator.delete_preset(preset_id)}

"""Group endpoints"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_service_container
from api.schemas.group import GroupCreateRequest, GroupListResponse, GroupResponse
from services.service_container import ServiceContainer
from utils.serialization import Serializer

router = APIRouter(prefix="/groups", tags=["Groups"])


@router.get("", response_model=GroupListResponse, summary="List pin groups")
async def list_groups(services: ServiceContainer = Depends(get_service_container)) -> GroupListResponse:
    groups = [GroupResponse(**Serializer.group_to_dict(g)) for g in services.simulator.list_groups()]
    return GroupListResponse(groups=groups, count=len(groups))


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create pin group",
)
async def create_group(
    request: GroupCreateRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> GroupResponse:
    """
    **Errors:**
    - 422: Empty name or no known pin selected
    """
    group = services.simulator.create_group(request.name, request.color, request.pin_ids)
    return GroupResponse(**Serializer.group_to_dict(group))


@router.delete("/{group_id}", summary="Delete pin group")
async def delete_group(group_id: str, services: ServiceContainer = Depends(get_service_container)) -> dict:
    """Deleting an unknown group is not an error"""
    return {"deleted": services.simulator.delete_group(group_id)}

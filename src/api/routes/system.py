"""
System endpoints - board catalogue and initialization
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_service_container
from api.schemas.diagnostics import BoardInitializeRequest, BoardListResponse, BoardResponse
from api.schemas.pin import PinListResponse, PinResponse
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/boards", response_model=BoardListResponse, summary="List supported boards")
async def list_boards(services: ServiceContainer = Depends(get_service_container)) -> BoardListResponse:
    boards = [
        BoardResponse(model=b.model, valid_gpios=list(b.valid_gpios))
        for b in services.simulator.list_boards()
    ]
    return BoardListResponse(boards=boards, default_board=services.config_manager.settings.default_board)


@router.post("/initialize", response_model=PinListResponse, summary="Initialize pins for a board")
async def initialize_board(
    request: BoardInitializeRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> PinListResponse:
    """
    Replaces every pin and stops any running scenario.

    **Errors:**
    - 404: Unknown board model
    """
    pins = services.simulator.initialize(request.model)
    log.info("Board initialized via API", board=request.model, pins=len(pins))
    return PinListResponse(pins=[PinResponse(**p) for p in pins], count=len(pins))

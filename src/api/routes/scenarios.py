"""
Scenario Endpoints - authoring and running scenarios

run/stop are coroutine routes so that the engine schedules its task on the
server's event loop.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_service_container
from api.schemas.scenario import (
    EngineStatusResponse, ScenarioCreateRequest, ScenarioListResponse,
    ScenarioResponse, ScenarioRunResponse
)
from models.enums import LogCategory
from services.service_container import ServiceContainer
from utils.logger import get_logger
from utils.serialization import Serializer

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/scenarios", tags=["Scenarios"])


@router.get("", response_model=ScenarioListResponse, summary="List scenarios")
async def list_scenarios(services: ServiceContainer = Depends(get_service_container)) -> ScenarioListResponse:
    scenarios = [ScenarioResponse(**Serializer.scenario_to_dict(s)) for s in services.simulator.list_scenarios()]
    return ScenarioListResponse(scenarios=scenarios, count=len(scenarios))


@router.get("/status", response_model=EngineStatusResponse, summary="Scenario engine status")
async def engine_status(services: ServiceContainer = Depends(get_service_container)) -> EngineStatusResponse:
    return EngineStatusResponse(**services.simulator.status())


@router.post("/stop", summary="Stop the running scenario")
async def stop_scenario(services: ServiceContainer = Depends(get_service_container)) -> dict:
    """Idempotent: `stopped` is False when nothing was running"""
    return {"stopped": services.simulator.stop()}


@router.get("/{scenario_id}", response_model=ScenarioResponse, summary="Get scenario")
async def get_scenario(scenario_id: str, services: ServiceContainer = Depends(get_service_container)) -> ScenarioResponse:
    return ScenarioResponse(**Serializer.scenario_to_dict(services.simulator.get_scenario(scenario_id)))


@router.post(
    "",
    response_model=ScenarioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create scenario",
)
async def create_scenario(
    request: ScenarioCreateRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> ScenarioResponse:
    """
    **Errors:**
    - 422: Empty name, no steps, step without pins, negative delay or bad pwm value
    """
    scenario = services.simulator.create_scenario(
        request.name,
        [step.model_dump() for step in request.steps],
        loop=request.loop,
        description=request.description,
    )
    return ScenarioResponse(**Serializer.scenario_to_dict(scenario))


@router.delete("/{scenario_id}", summary="Delete scenario")
async def delete_scenario(scenario_id: str, services: ServiceContainer = Depends(get_service_container)) -> dict:
    """Stops the scenario first when it is running"""
    return {"deleted": services.simulator.delete_scenario(scenario_id)}


@router.post("/{scenario_id}/run", response_model=ScenarioRunResponse, summary="Run scenario")
async def run_scenario(scenario_id: str, services: ServiceContainer = Depends(get_service_container)) -> ScenarioRunResponse:
    """Replaces any scenario that is already running"""
    epoch = services.simulator.run(scenario_id)
    log.debug("Scenario run requested", scenario_id=scenario_id, epoch=epoch)
    return ScenarioRunResponse(scenario_id=scenario_id, epoch=epoch)

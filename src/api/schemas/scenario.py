"""
Scenario schemas - Pydantic models for scenario requests/responses

Step actions are passed through as text: the service rejects malformed
steps, and an unrecognised action is kept as a no-op step.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class ScenarioStepModel(BaseModel):
    """One timed step"""
    pin_ids: List[int] = Field(description="Target pins (non-empty)")
    action: str = Field(description="on, off, toggle or pwm")
    delay_ms: int = Field(0, description="Hold time before the next step, in milliseconds")
    value: Optional[int] = Field(None, description="Duty cycle 0-100, pwm steps only")


class ScenarioCreateRequest(BaseModel):
    name: str
    description: str = ""
    loop: bool = False
    steps: List[ScenarioStepModel]


class ScenarioResponse(BaseModel):
    id: str
    name: str
    description: str
    loop: bool
    steps: List[ScenarioStepModel]


class ScenarioListResponse(BaseModel):
    scenarios: List[ScenarioResponse]
    count: int


class ScenarioRunResponse(BaseModel):
    scenario_id: str
    epoch: int = Field(description="Run generation; changes on every run/stop")


class EngineStatusResponse(BaseModel):
    """Scenario engine state"""
    state: str = Field(description="IDLE or RUNNING")
    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    step_index: Optional[int] = None
    iteration: Optional[int] = None
    epoch: int

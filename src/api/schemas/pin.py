"""
Pin schemas - Pydantic models for pin requests/responses
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from models.enums import PinMode


class PinResponse(BaseModel):
    """Complete pin record"""
    id: int = Field(description="GPIO number")
    name: str
    mode: PinMode
    state: bool = Field(description="Logic level")
    value: int = Field(ge=0, le=1, description="Numeric projection of state")
    duty_cycle: int = Field(ge=0, le=100, description="PWM duty cycle in percent")
    pull_up: bool
    pull_down: bool
    interrupt_enabled: bool
    color: str
    group: Optional[str] = None
    notes: str = ""


class PinListResponse(BaseModel):
    """All pins in board order"""
    pins: List[PinResponse]
    count: int


class PinStateRequest(BaseModel):
    """Request to drive a pin high or low"""
    state: bool = Field(description="True = HIGH, False = LOW")


class PinModeRequest(BaseModel):
    """Request to change the pin mode"""
    mode: str = Field(description="input, output or pwm")


class PinDutyCycleRequest(BaseModel):
    """Request to change the PWM duty cycle (0-100, out-of-range values are rejected)"""
    duty_cycle: int


class PinConfigRequest(BaseModel):
    """Partial pin configuration; omitted fields stay unchanged"""
    name: Optional[str] = None
    mode: Optional[str] = None
    pull_up: Optional[bool] = None
    pull_down: Optional[bool] = None
    interrupt_enabled: Optional[bool] = None
    color: Optional[str] = None
    notes: Optional[str] = None

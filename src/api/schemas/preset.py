"""Preset schemas"""

from datetime import datetime
from pydantic import BaseModel
from typing import List

from api.schemas.pin import PinResponse


class PresetSaveRequest(BaseModel):
    name: str
    description: str = ""


class PresetResponse(BaseModel):
    id: str
    name: str
    description: str
    created_at: datetime
    pins: List[PinResponse]


class PresetListResponse(BaseModel):
    presets: List[PresetResponse]
    count: int

"""Group schemas"""

from pydantic import BaseModel, Field
from typing import List


class GroupCreateRequest(BaseModel):
    name: str = Field(description="Group name (required, non-empty)")
    color: str = Field("blue", description="Display colour tag")
    pin_ids: List[int] = Field(default_factory=list, description="Member pins; unknown ids are skipped")


class GroupResponse(BaseModel):
    id: str
    name: str
    color: str
    pins: List[int]


class GroupListResponse(BaseModel):
    groups: List[GroupResponse]
    count: int

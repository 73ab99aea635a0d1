"""
Diagnostics schemas - history, event log and board catalogue
"""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List

from models.enums import LogSeverity


class HistoryEntryResponse(BaseModel):
    timestamp: datetime
    pin_id: int
    state: bool
    value: int


class HistoryResponse(BaseModel):
    entries: List[HistoryEntryResponse]
    count: int
    enabled: bool


class LogEntryResponse(BaseModel):
    timestamp: datetime
    severity: LogSeverity
    message: str


class LogResponse(BaseModel):
    entries: List[LogEntryResponse]
    count: int
    enabled: bool


class RecordingToggleRequest(BaseModel):
    enabled: bool = Field(description="Start (True) or pause (False) recording new entries")


class BoardResponse(BaseModel):
    model: str
    valid_gpios: List[int]


class BoardListResponse(BaseModel):
    boards: List[BoardResponse]
    default_board: str


class BoardInitializeRequest(BaseModel):
    model: str = Field(description="Board model from the catalogue")

"""Preset domain model"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from models.domain.pin import Pin


@dataclass(frozen=True)
class Preset:
    """Named snapshot of the whole pin set"""
    id: str
    name: str
    description: str
    pins: List[Pin] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

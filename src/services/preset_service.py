"""Preset service - named whole-board snapshots"""

import uuid
from datetime import datetime
from typing import Dict, List

from models.domain.preset import Preset
from models.errors import NotFoundError, ValidationError
from models.events import EventSource
from models.payloads import PinRecord
from services.pin_registry import PinRegistry
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.PRESET)


class PresetService:
    """Save, restore and delete pin configuration presets (in memory)"""

    def __init__(self, registry: PinRegistry):
        self.registry = registry
        self._presets: Dict[str, Preset] = {}

    def get(self, preset_id: str) -> Preset:
        preset = self._presets.get(preset_id)
        if preset is None:
            raise NotFoundError("Preset", preset_id)
        return preset

    def get_all(self) -> List[Preset]:
        return list(self._presets.values())

    def save_preset(self, name: str, description: str = "") -> Preset:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Preset name is required")

        preset = Preset(
            id=f"preset-{uuid.uuid4().hex[:8]}",
            name=name,
            description=description or "",
            pins=self.registry.snapshot(),
            created_at=datetime.now(),
        )
        self._presets[preset.id] = preset
        log.info(f"Preset saved: {name}", id=preset.id, pins=len(preset.pins))
        return preset

    def load_preset(self, preset_id: str) -> Preset:
        """Replace the pin set with the preset's snapshot"""
        preset = self.get(preset_id)
        records = [
            PinRecord.model_validate({
                "id": pin.id,
                "name": pin.name,
                "mode": pin.mode,
                "state": pin.state,
                "duty_cycle": pin.duty_cycle,
                "pull_up": pin.pull_up,
                "pull_down": pin.pull_down,
                "interrupt_enabled": pin.interrupt_enabled,
                "color": pin.color,
                "group": pin.group,
                "notes": pin.notes,
            })
            for pin in preset.pins
        ]
        self.registry.restore(records, EventSource.SYSTEM)
        log.info(f"Preset loaded: {preset.name}", id=preset_id)
        return preset

    def delete_preset(self, preset_id: str) -> bool:
        preset = self._presets.pop(preset_id, None)
        if preset is None:
            return False
        log.info(f"Preset deleted: {preset.name}", id=preset_id)
        return True

"""
Serialization utilities - Central model serialization for export and the JSON API

Converts domain models to plain JSON-compatible dicts. Enums are written by
value ("output", "pwm", "info") and timestamps as ISO-8601 strings, which is
also the format the pin import accepts back.
"""

from typing import Any, Dict

from models.domain import HistoryEntry, LogEntry, Pin, PinGroup, Preset, Scenario, ScenarioStep


class Serializer:
    """Central model serialization for exports and the JSON API"""

    # ========================================================================
    # PIN SERIALIZATION
    # ========================================================================

    @staticmethod
    def pin_to_dict(pin: Pin) -> Dict[str, Any]:
        """
        Serialize pin to the export record

        Returns:
            Dict with every pin field, including the derived `value`
        """
        return {
            "id": pin.id,
            "name": pin.name,
            "mode": pin.mode.value,
            "state": pin.state,
            "value": pin.value,
            "duty_cycle": pin.duty_cycle,
            "pull_up": pin.pull_up,
            "pull_down": pin.pull_down,
            "interrupt_enabled": pin.interrupt_enabled,
            "color": pin.color,
            "group": pin.group,
            "notes": pin.notes,
        }

    @staticmethod
    def group_to_dict(group: PinGroup) -> Dict[str, Any]:
        return {
            "id": group.id,
            "name": group.name,
            "color": group.color,
            "pins": sorted(group.pins),
        }

    # ========================================================================
    # SCENARIO SERIALIZATION
    # ========================================================================

    @staticmethod
    def step_to_dict(step: ScenarioStep) -> Dict[str, Any]:
        data = {
            "pin_ids": list(step.pin_ids),
            "action": step.action_name,
            "delay_ms": step.delay_ms,
        }
        if step.value is not None:
            data["value"] = step.value
        return data

    @staticmethod
    def scenario_to_dict(scenario: Scenario) -> Dict[str, Any]:
        return {
            "id": scenario.id,
            "name": scenario.name,
            "description": scenario.description,
            "loop": scenario.loop,
            "steps": [Serializer.step_to_dict(step) for step in scenario.steps],
        }

    @staticmethod
    def preset_to_dict(preset: Preset) -> Dict[str, Any]:
        return {
            "id": preset.id,
            "name": preset.name,
            "description": preset.description,
            "created_at": preset.created_at.isoformat(),
            "pins": [Serializer.pin_to_dict(pin) for pin in preset.pins],
        }

    # ========================================================================
    # OBSERVATION RECORDS
    # ========================================================================

    @staticmethod
    def history_to_dict(entry: HistoryEntry) -> Dict[str, Any]:
        return {
            "timestamp": entry.timestamp.isoformat(),
            "pin_id": entry.pin_id,
            "state": entry.state,
            "value": entry.value,
        }

    @staticmethod
    def log_to_dict(entry: LogEntry) -> Dict[str, Any]:
        return {
            "timestamp": entry.timestamp.isoformat(),
            "severity": entry.severity.value,
            "message": entry.message,
        }

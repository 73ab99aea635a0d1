"""
Inbound pin payloads - Pydantic models for externally supplied pin records

Two shapes are accepted:
- ExternalPinRecord: partial record from a reconciliation source; absent or
  null fields mean "no change".
- PinRecord: complete record as produced by export, used for import and
  preset restore.
- PinConfigFields: configuration fields for applyConfig. Types are strict;
  a string is never read as a boolean.

Both accept the snake_case names used by this package and the camelCase
names used by browser frontends (pullUp, dutyCycle, pwmValue, ...).
"""

import json
from typing import Any, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from models.domain.pin import Pin
from models.enums import PinMode
from models.errors import TransportError, ValidationError


class ExternalPinRecord(BaseModel):
    """Partial pin record supplied by a reconciliation source"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: Optional[str] = None
    mode: Optional[PinMode] = None
    state: Optional[bool] = None
    value: Optional[int] = Field(None, ge=0, le=1)
    duty_cycle: Optional[int] = Field(
        None, ge=0, le=100,
        validation_alias=AliasChoices("duty_cycle", "dutyCycle", "pwmValue"),
    )
    pull_up: Optional[bool] = Field(None, validation_alias=AliasChoices("pull_up", "pullUp"))
    pull_down: Optional[bool] = Field(None, validation_alias=AliasChoices("pull_down", "pullDown"))
    interrupt_enabled: Optional[bool] = Field(
        None, validation_alias=AliasChoices("interrupt_enabled", "interruptEnabled", "interrupt"),
    )
    color: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_pulls(self):
        if self.pull_up and self.pull_down:
            raise ValueError("pull_up and pull_down cannot both be enabled")
        return self

    def supplied_fields(self) -> dict:
        """Fields to merge: everything present and non-null except id"""
        data = self.model_dump(exclude_none=True)
        data.pop("id", None)
        value = data.pop("value", None)
        if "state" not in data and value is not None:
            data["state"] = value != 0
        return data


class PinRecord(BaseModel):
    """Complete pin record (export/import format)"""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    mode: PinMode = PinMode.OUTPUT
    state: bool = False
    value: Optional[int] = Field(None, ge=0, le=1)
    duty_cycle: int = Field(0, ge=0, le=100, validation_alias=AliasChoices("duty_cycle", "dutyCycle", "pwmValue"))
    pull_up: bool = Field(False, validation_alias=AliasChoices("pull_up", "pullUp"))
    pull_down: bool = Field(False, validation_alias=AliasChoices("pull_down", "pullDown"))
    interrupt_enabled: bool = Field(
        False, validation_alias=AliasChoices("interrupt_enabled", "interruptEnabled", "interrupt"),
    )
    color: Optional[str] = None
    group: Optional[str] = None
    notes: str = ""

    @model_validator(mode="after")
    def validate_record(self):
        if self.pull_up and self.pull_down:
            raise ValueError("pull_up and pull_down cannot both be enabled")
        if self.value is not None and self.value != (1 if self.state else 0):
            raise ValueError("value must match state")
        return self

    def to_pin(self) -> Pin:
        return Pin(
            id=self.id,
            name=self.name,
            mode=self.mode,
            state=self.state,
            duty_cycle=self.duty_cycle,
            pull_up=self.pull_up,
            pull_down=self.pull_down,
            interrupt_enabled=self.interrupt_enabled,
            color=self.color or "",
            group=self.group,
            notes=self.notes,
        )


_external_adapter = TypeAdapter(List[ExternalPinRecord])
_record_adapter = TypeAdapter(List[PinRecord])


def _unwrap(payload: Any) -> Any:
    # Socket peers wrap the list as {"type": "pinUpdate", "pins": [...]}
    if isinstance(payload, dict) and "pins" in payload:
        return payload["pins"]
    return payload


def _validate(adapter: TypeAdapter, payload: Any, what: str):
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise TransportError(f"{what.capitalize()} payload is not valid JSON: {e}") from e
    try:
        return adapter.validate_python(_unwrap(payload))
    except PydanticValidationError as e:
        raise TransportError(
            f"Malformed {what} payload",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def parse_external_pins(payload: Any) -> List[ExternalPinRecord]:
    """Validate a reconciliation payload (list, {"pins": list} or JSON text)"""
    return _validate(_external_adapter, payload, "reconciliation")


def parse_pin_records(payload: Any) -> List[PinRecord]:
    """Validate an import payload; ids must be unique"""
    records = _validate(_record_adapter, payload, "pin import")
    ids = [r.id for r in records]
    if len(ids) != len(set(ids)):
        raise TransportError("Duplicate pin ids in pin import payload")
    return records


class PinConfigFields(BaseModel):
    """Fields accepted by applyConfig; absent or null fields mean "no change" """
    model_config = ConfigDict(extra="forbid")

    name: Optional[StrictStr] = None
    mode: Optional[PinMode] = None
    pull_up: Optional[StrictBool] = None
    pull_down: Optional[StrictBool] = None
    interrupt_enabled: Optional[StrictBool] = None
    color: Optional[StrictStr] = None
    notes: Optional[StrictStr] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Pin name cannot be empty")
        return v

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_pulls(self):
        if self.pull_up and self.pull_down:
            raise ValueError("pull_up and pull_down cannot both be enabled")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


def parse_pin_config(fields: Any) -> PinConfigFields:
    """Validate applyConfig fields; raises ValidationError on unknown fields or bad types"""
    try:
        return PinConfigFields.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid pin configuration",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

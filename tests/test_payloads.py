"""Inbound pin payload parsing"""

import pytest

from models.enums import PinMode
from models.errors import TransportError
from models.payloads import parse_external_pins, parse_pin_records


def test_external_record_accepts_camel_case():
    [record] = parse_external_pins([{
        "id": 4, "pullUp": True, "interruptEnabled": True, "pwmValue": 70, "mode": "pwm",
    }])

    assert record.supplied_fields() == {
        "pull_up": True, "interrupt_enabled": True, "duty_cycle": 70, "mode": PinMode.PWM,
    }


def test_external_record_ignores_unknown_fields():
    [record] = parse_external_pins({"pins": [{"id": 4, "voltage": 3.3}]})
    assert record.supplied_fields() == {}


@pytest.mark.parametrize("payload", [
    "[{]",
    42,
    [{"id": 4, "dutyCycle": 120}],
    [{"id": 4, "value": 2}],
    [{"id": 4, "mode": "analog"}],
])
def test_malformed_external_payloads(payload):
    with pytest.raises(TransportError):
        parse_external_pins(payload)


def test_pin_records_require_consistent_value():
    with pytest.raises(TransportError):
        parse_pin_records([{"id": 2, "name": "GPIO 2", "state": False, "value": 1}])


def test_pin_record_to_pin_defaults_colour():
    [record] = parse_pin_records(b'[{"id": 13, "name": "LED", "state": true}]')

    pin = record.to_pin()
    assert pin.color == "green"  # 13 % 12 == 1
    assert pin.value == 1

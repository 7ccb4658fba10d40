"""Adjustable climate targets and their virtual-pin mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Protocol

logger = logging.getLogger(__name__)

VPIN_TARGET_TEMPERATURE = 40
VPIN_TARGET_HUMIDITY = 41
VPIN_TARGET_SOIL_MOISTURE = 42
VPIN_TARGET_LUX_MIN = 43
VPIN_TARGET_VENT_TEMP = 44
VPIN_TARGET_SOIL_PH = 45
VPIN_TARGET_SOIL_EC = 46
VPIN_TARGET_WATER_LEVEL = 47

TARGET_PINS: dict[int, str] = {
    VPIN_TARGET_TEMPERATURE: "temperature",
    VPIN_TARGET_HUMIDITY: "humidity",
    VPIN_TARGET_SOIL_MOISTURE: "soil_moisture",
    VPIN_TARGET_LUX_MIN: "lux_min",
    VPIN_TARGET_VENT_TEMP: "vent_temp",
    VPIN_TARGET_SOIL_PH: "soil_ph",
    VPIN_TARGET_SOIL_EC: "soil_ec",
    VPIN_TARGET_WATER_LEVEL: "water_level",
}


class _PinSink(Protocol):
    def send_virtual_pin(self, pin: int, value: object) -> None: ...


@dataclass
class Targets:
    """Set points the control logic steers towards."""

    temperature: float = 24.0
    humidity: float = 60.0
    soil_moisture: float = 40.0
    lux_min: float = 10000.0
    vent_temp: float = 28.0
    soil_ph: float = 6.5
    soil_ec: float = 1500.0
    water_level: float = 20.0

    def load_defaults(self) -> None:
        """Restore every target to its factory value."""
        for field in fields(self):
            setattr(self, field.name, field.default)

    def set_from_pin(self, pin: int, value: float) -> float:
        """Store a value written to a target's virtual pin and return it."""
        try:
            name = TARGET_PINS[pin]
        except KeyError:
            raise ValueError(f"virtual pin V{pin} is not a target pin") from None
        value = float(value)
        setattr(self, name, value)
        logger.info("New target %s: %s", name, value)
        return value

    def pin_values(self) -> dict[int, float]:
        """Map each target's virtual pin to its current value."""
        return {pin: getattr(self, name) for pin, name in TARGET_PINS.items()}


def sync_to_blynk(targets: Targets, blynk: _PinSink) -> None:
    """Push every target to its virtual pin."""
    for pin, value in targets.pin_values().items():
        blynk.send_virtual_pin(pin, value)
    logger.info("Target synchronisation complete")
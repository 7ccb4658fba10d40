"""Soil-moisture driven irrigation with environmental adjustment."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TARGET = 70.0
DEFAULT_TOLERANCE = 5.0
DEFAULT_DURATION_S = 30
MAX_DURATION_S = 300
MIN_DURATION_S = 10
MIN_INTERVAL_BETWEEN_S = 1800
EMERGENCY_MOISTURE = 20.0
MIN_TARGET = 30.0
MAX_TARGET = 95.0
WATER_FLOW_RATE = 100.0
RAPID_DRYING_RATE = -0.5
EVERY_DAY = 0b01111111

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


@dataclass(frozen=True)
class IrrigationSchedule:
    """A daily watering slot: start time, duration in seconds and weekday mask."""

    hour: int
    minute: int
    duration: int
    enabled: bool
    days: int = EVERY_DAY


class IrrigationControl:
    """Decides when and for how long the water pump should run."""

    def __init__(self, *, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or _monotonic_ms
        self.target = DEFAULT_TARGET
        self.current_soil_moisture = 50.0
        self.tolerance = DEFAULT_TOLERANCE
        self.previous_moisture = 50.0
        self.moisture_rate = 0.0
        self.default_irrigation_duration = DEFAULT_DURATION_S
        self.max_irrigation_duration = MAX_DURATION_S
        self.min_interval_between_irrigation = MIN_INTERVAL_BETWEEN_S
        self.emergency_moisture_threshold = EMERGENCY_MOISTURE
        self.soil_retention_capacity = 100.0
        self.plant_water_consumption = 50.0
        self.evapotranspiration_rate = 1.0
        self.irrigation_active = False
        self.temperature_factor = 1.0
        self.humidity_factor = 1.0
        self.light_factor = 1.0
        self.is_raining_outside = False
        self.enabled = False
        self.schedule_enabled = True
        self.emergency_mode_active = False
        self.water_flow_rate = WATER_FLOW_RATE
        self.total_water_used = 0.0
        self.daily_water_used = 0.0
        self.watering_session_time = 0
        self.total_irrigations = 0
        self.daily_irrigations = 0
        self.total_irrigation_time = 0
        self.last_irrigation_duration = 0
        self.morning_schedule = IrrigationSchedule(7, 0, 60, True)
        self.evening_schedule = IrrigationSchedule(19, 0, 45, True)
        self.emergency_schedule = IrrigationSchedule(12, 0, 120, True)
        self._last_moisture_check = 0
        self._last_update = 0
        self._last_irrigation_time = 0
        self._current_irrigation_start = 0

    def begin(self) -> None:
        """Enable irrigation control and its schedules."""
        self._last_update = self._clock()
        self._last_irrigation_time = 0
        self.enabled = True
        self.schedule_enabled = True
        logger.info(
            "Irrigation control ready: target %s%%, default duration %d s",
            self.target, self.default_irrigation_duration,
        )

    def update(
        self,
        moisture: float,
        temperature: float = 0.0,
        humidity: float = 0.0,
        light_level: float = 0.0,
    ) -> None:
        """Feed new readings; start, stop or trigger emergency watering."""
        if not self.enabled:
            return
        now = self._clock()

        self.previous_moisture = self.current_soil_moisture
        self.current_soil_moisture = moisture
        if self._last_moisture_check > 0:
            elapsed = (now - self._last_moisture_check) / 1000.0
            if elapsed > 0:
                self.moisture_rate = (moisture - self.previous_moisture) / elapsed
        self._last_moisture_check = now

        if temperature > 0:
            self.temperature_factor = 1.0 + (temperature - 25.0) * 0.03
        if humidity > 0:
            self.humidity_factor = 1.0 - (humidity - 50.0) * 0.01
        if light_level > 0:
            self.light_factor = 1.0 + light_level / 50000.0 * 0.2

        self._update_evapotranspiration(temperature, humidity, light_level)

        if (
            self.current_soil_moisture <= self.emergency_moisture_threshold
            and not self.irrigation_active
        ):
            self.emergency_irrigation()
            return

        if self.irrigation_active:
            if now - self._current_irrigation_start >= self.watering_session_time:
                self.stop_irrigation()
            return

        if self.needs_irrigation() and self.is_valid_irrigation_time():
            self.start_irrigation(self.calculate_optimal_duration())

        self._last_update = now

    def set_target(self, target: float) -> None:
        """Set the target soil moisture (30-95 %)."""
        if not MIN_TARGET <= target <= MAX_TARGET:
            raise ValueError(
                f"target soil moisture {target}% outside {MIN_TARGET}-{MAX_TARGET}%"
            )
        self.target = target
        logger.info("Target soil moisture set to %s%%", target)

    def enable(self) -> None:
        self.enabled = True
        logger.info("Irrigation control enabled")

    def disable(self) -> None:
        """Disable control, stopping any watering in progress."""
        self.enabled = False
        if self.irrigation_active:
            self.stop_irrigation()
        logger.info("Irrigation control disabled")

    def start_irrigation(self, duration: int = 0) -> bool:
        """Start watering for ``duration`` seconds (0 means the default).

        Returns False when disabled or already watering.
        """
        if not self.enabled or self.irrigation_active:
            return False
        if duration == 0:
            duration = self.default_irrigation_duration

        adjusted = duration * self.temperature_factor * self.humidity_factor * self.light_factor
        adjusted = min(adjusted, float(self.max_irrigation_duration))

        self.watering_session_time = int(adjusted) * 1000
        self._current_irrigation_start = self._clock()
        self.irrigation_active = True
        self._last_irrigation_time = self._current_irrigation_start

        self.total_irrigations += 1
        self.daily_irrigations += 1

        session_water = self.water_flow_rate * adjusted / 60.0
        self.total_water_used += session_water
        self.daily_water_used += session_water
        logger.info("Irrigation started: %s s, %s ml", adjusted, session_water)
        return True

    def stop_irrigation(self) -> None:
        """Stop watering and record how long it ran, in whole seconds."""
        if not self.irrigation_active:
            return
        actual = (self._clock() - self._current_irrigation_start) // 1000
        self.last_irrigation_duration = actual
        self.total_irrigation_time += actual
        self.irrigation_active = False
        self.emergency_mode_active = False
        logger.info("Irrigation stopped after %d s", actual)

    def emergency_irrigation(self) -> None:
        """Water for twice the default duration, capped at the maximum."""
        if self.irrigation_active:
            return
        self.emergency_mode_active = True
        duration = min(self.default_irrigation_duration * 2, self.max_irrigation_duration)
        self.start_irrigation(duration)
        logger.warning("Emergency irrigation activated")

    def needs_irrigation(self) -> bool:
        """True when soil is too dry or drying quickly below target."""
        if not self.enabled or self.is_raining_outside:
            return False
        deficit = self.target - self.current_soil_moisture
        if deficit > self.tolerance:
            return True
        return (
            self.moisture_rate < RAPID_DRYING_RATE
            and self.current_soil_moisture < self.target
        )

    def is_valid_irrigation_time(self) -> bool:
        """True once the minimum interval since the last watering has passed."""
        elapsed = self._clock() - self._last_irrigation_time
        return elapsed >= self.min_interval_between_irrigation * 1000

    def calculate_optimal_duration(self) -> int:
        """Watering duration in seconds for the current moisture deficit."""
        deficit = self.target - self.current_soil_moisture
        duration = deficit / 10.0 * self.default_irrigation_duration
        duration *= self.temperature_factor * self.humidity_factor * self.light_factor
        duration = max(duration, float(MIN_DURATION_S))
        duration = min(duration, float(self.max_irrigation_duration))
        return int(duration)

    def status_string(self) -> str:
        if not self.enabled:
            state = "(OFF)"
        elif self.irrigation_active:
            elapsed = self._clock() - self._current_irrigation_start
            remaining = max(0, self.watering_session_time - elapsed) // 1000
            state = f"(IRRIGATING: {remaining}s)"
        elif self.emergency_mode_active:
            state = "(EMERGENCY)"
        else:
            state = "(MONITORING)"
        return (
            f"{self.current_soil_moisture:.1f}% {state} "
            f"[Target: {self.target:.1f}%]"
        )

    def check_emergency(self) -> bool:
        """True when soil moisture is at or below the emergency threshold."""
        if not self.enabled:
            return False
        if self.current_soil_moisture <= self.emergency_moisture_threshold:
            logger.warning(
                "Critical low soil moisture: %s%%", self.current_soil_moisture
            )
            return True
        return False

    def _update_evapotranspiration(
        self, temperature: float, humidity: float, light: float
    ) -> None:
        rate = self.plant_water_consumption
        if temperature > 0:
            rate *= 1.0 + (temperature - 20.0) * 0.05
        if humidity > 0:
            rate *= 1.0 - (humidity - 50.0) * 0.01
        if light > 0:
            rate *= 1.0 + light / 50000.0 * 0.3
        self.evapotranspiration_rate = rate

    def reset_daily_statistics(self) -> None:
        self.daily_water_used = 0.0
        self.daily_irrigations = 0
        logger.info("Irrigation daily statistics reset")

    def reset_statistics(self) -> None:
        self.total_water_used = 0.0
        self.total_irrigations = 0
        self.total_irrigation_time = 0
        self.reset_daily_statistics()
"""Temperature regulation by heating and cooling around a set point."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TARGET = 22.0
DEFAULT_TOLERANCE = 1.0
DEFAULT_MIN_TEMP = 10.0
DEFAULT_MAX_TEMP = 35.0
MAX_INTEGRAL = 100.0
MAX_PID_OUTPUT = 100.0
MAX_TOLERANCE = 5.0
ABSOLUTE_MAX_TEMP = 50.0
EMERGENCY_HIGH = 40.0
EMERGENCY_LOW = 5.0
EMERGENCY_DEVIATION = 10.0

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


class TemperatureControl:
    """Decides whether the greenhouse needs heating or cooling."""

    def __init__(self, *, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or _monotonic_ms
        self.target = DEFAULT_TARGET
        self.current_temperature = 20.0
        self.tolerance = DEFAULT_TOLERANCE
        self.previous_error = 0.0
        self.integral = 0.0
        self.derivative = 0.0
        self.kp = 2.0
        self.ki = 0.1
        self.kd = 0.5
        self.min_temp = DEFAULT_MIN_TEMP
        self.max_temp = DEFAULT_MAX_TEMP
        self.max_integral = MAX_INTEGRAL
        self.enabled = False
        self.heating = False
        self.cooling = False
        self.adjustment_count = 0
        self._last_update = 0
        self._total_active_time = 0
        self._last_active_time = 0

    def begin(self) -> None:
        """Reset the controller state and enable it."""
        self.previous_error = 0.0
        self.integral = 0.0
        self.derivative = 0.0
        self._last_update = self._clock()
        self.kp, self.ki, self.kd = 2.0, 0.1, 0.5
        self.enabled = True
        logger.info(
            "Temperature control ready: target %s°C, tolerance ±%s°C",
            self.target, self.tolerance,
        )

    def update(self, current_temp: float) -> None:
        """Feed a new reading and decide between heating, cooling or nothing."""
        if not self.enabled:
            return
        now = self._clock()
        delta = (now - self._last_update) / 1000.0
        if delta <= 0:
            return

        self.current_temperature = current_temp
        error = self.target - current_temp

        self.integral += error * delta
        self.integral = max(-self.max_integral, min(self.max_integral, self.integral))
        self.derivative = (error - self.previous_error) / delta

        was_heating, was_cooling = self.heating, self.cooling
        self.heating = False
        self.cooling = False

        if error > self.tolerance:
            self.heating = True
            if not was_heating:
                self._last_active_time = now
                self.adjustment_count += 1
                logger.info(
                    "Heating on: current %s°C, target %s°C", current_temp, self.target
                )
        elif error < -self.tolerance:
            self.cooling = True
            if not was_cooling:
                self._last_active_time = now
                self.adjustment_count += 1
                logger.info(
                    "Cooling on: current %s°C, target %s°C", current_temp, self.target
                )
        elif was_heating or was_cooling:
            self._total_active_time += now - self._last_active_time
            logger.info(
                "Temperature stable: current %s°C, target %s°C", current_temp, self.target
            )

        self.previous_error = error
        self._last_update = now

    def set_target(self, target: float) -> None:
        """Set the target temperature; it must lie within the limits."""
        if not self.min_temp <= target <= self.max_temp:
            raise ValueError(
                f"target temperature {target}°C outside "
                f"{self.min_temp}-{self.max_temp}°C"
            )
        self.target = target
        self.integral = 0.0
        logger.info("Target temperature set to %s°C", target)

    def set_tolerance(self, tolerance: float) -> None:
        if not 0.0 < tolerance <= MAX_TOLERANCE:
            raise ValueError(f"tolerance {tolerance} outside (0, {MAX_TOLERANCE}]")
        self.tolerance = tolerance

    def set_pid_constants(self, kp: float, ki: float, kd: float) -> None:
        self.kp, self.ki, self.kd = kp, ki, kd
        self.integral = 0.0
        logger.info("PID constants: Kp %s Ki %s Kd %s", kp, ki, kd)

    def set_temperature_limits(self, minimum: float, maximum: float) -> None:
        if not (minimum < maximum and minimum >= 0.0 and maximum <= ABSOLUTE_MAX_TEMP):
            raise ValueError(f"invalid temperature limits {minimum}-{maximum}°C")
        self.min_temp = minimum
        self.max_temp = maximum

    def enable(self) -> None:
        self.enabled = True
        self.integral = 0.0
        self.previous_error = 0.0
        self._last_update = self._clock()
        logger.info("Temperature control enabled")

    def disable(self) -> None:
        self.enabled = False
        self.heating = False
        self.cooling = False
        logger.info("Temperature control disabled")

    def error(self) -> float:
        return self.target - self.current_temperature

    def is_heating_active(self) -> bool:
        return self.enabled and self.heating

    def is_cooling_active(self) -> bool:
        return self.enabled and self.cooling

    def is_in_range(self) -> bool:
        return abs(self.error()) <= self.tolerance

    def pid_output(self) -> float:
        """PID output clamped to ±100, or 0 when disabled."""
        if not self.enabled:
            return 0.0
        output = self.kp * self.error() + self.ki * self.integral + self.kd * self.derivative
        return max(-MAX_PID_OUTPUT, min(MAX_PID_OUTPUT, output))

    def total_active_time(self) -> int:
        """Milliseconds spent heating or cooling, including the current spell."""
        total = self._total_active_time
        if self.heating or self.cooling:
            total += self._clock() - self._last_active_time
        return total

    def reset_statistics(self) -> None:
        self._total_active_time = 0
        self.adjustment_count = 0

    def status_string(self) -> str:
        if not self.enabled:
            state = "OFF"
        elif self.heating:
            state = "HEATING"
        elif self.cooling:
            state = "COOLING"
        else:
            state = "STABLE"
        return (
            f"{self.current_temperature:.1f}°C ({state}) "
            f"[Target: {self.target:.1f}°C]"
        )

    def check_emergency(self) -> bool:
        """True for critical temperatures or a large deviation from target."""
        if not self.enabled:
            return False
        if self.current_temperature > EMERGENCY_HIGH:
            logger.warning("Critical high temperature: %s°C", self.current_temperature)
            return True
        if self.current_temperature < EMERGENCY_LOW:
            logger.warning("Critical low temperature: %s°C", self.current_temperature)
            return True
        deviation = abs(self.error())
        if deviation > EMERGENCY_DEVIATION:
            logger.warning("Large temperature deviation: %s°C", deviation)
            return True
        return False
"""Humidity regulation by humidifying, dehumidifying and ventilating."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TARGET = 65.0
DEFAULT_TOLERANCE = 5.0
DEFAULT_MIN_HUMIDITY = 30.0
DEFAULT_MAX_HUMIDITY = 90.0
DEFAULT_CRITICAL_LOW = 20.0
DEFAULT_CRITICAL_HIGH = 95.0
DEFAULT_MIN_ACTION_INTERVAL_MS = 60000
MAX_TOLERANCE = 20.0
MAX_ERROR_SUM = 100.0

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


class HumidityControl:
    """Decides whether air needs humidifying, dehumidifying or ventilating."""

    def __init__(
        self,
        *,
        min_action_interval: int = DEFAULT_MIN_ACTION_INTERVAL_MS,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._clock = clock or _monotonic_ms
        self.min_action_interval = min_action_interval
        self.target = DEFAULT_TARGET
        self.current_humidity = 50.0
        self.tolerance = DEFAULT_TOLERANCE
        self.previous_error = 0.0
        self.error_sum = 0.0
        self.kp = 1.5
        self.ki = 0.05
        self.kd = 0.3
        self.min_humidity = DEFAULT_MIN_HUMIDITY
        self.max_humidity = DEFAULT_MAX_HUMIDITY
        self.critical_low = DEFAULT_CRITICAL_LOW
        self.critical_high = DEFAULT_CRITICAL_HIGH
        self.enabled = False
        self.humidifying = False
        self.dehumidifying = False
        self.ventilating = False
        self.temperature_factor = 1.0
        self.is_daytime = True
        self.adjustment_count = 0
        self._last_update = 0
        self._last_action = 0
        self._total_active_time = 0
        self._last_active_time = 0

    def begin(self) -> None:
        """Reset the controller state and enable it."""
        self.previous_error = 0.0
        self.error_sum = 0.0
        self._last_update = self._clock()
        self._last_action = 0
        self.kp, self.ki, self.kd = 1.5, 0.05, 0.3
        self.enabled = True
        logger.info(
            "Humidity control ready: target %s%%, tolerance ±%s%%",
            self.target, self.tolerance,
        )

    def _any_active(self) -> bool:
        return self.humidifying or self.dehumidifying or self.ventilating

    def update(self, current_humidity: float, current_temp: float) -> None:
        """Feed new readings; warmer air shifts the effective target upward."""
        if not self.enabled:
            return
        now = self._clock()
        delta = (now - self._last_update) / 1000.0
        if delta <= 0:
            return

        self.current_humidity = current_humidity

        adjusted = self.target
        if current_temp > 0:
            self.temperature_factor = 1.0 + (current_temp - 20.0) * 0.02
            adjusted = self.target * self.temperature_factor
            adjusted = min(adjusted, self.max_humidity)
            adjusted = max(adjusted, self.min_humidity)

        error = adjusted - current_humidity
        self.error_sum += error * delta
        self.error_sum = max(-MAX_ERROR_SUM, min(MAX_ERROR_SUM, self.error_sum))

        was_active = self._any_active()
        self.humidifying = False
        self.dehumidifying = False
        self.ventilating = False

        if now - self._last_action >= self.min_action_interval:
            tol = self.tolerance
            if error > tol:
                if current_humidity < self.critical_low:
                    self.humidifying = True
                    self._last_action = now
                elif self.is_daytime and error > tol * 1.5:
                    self.humidifying = True
                    self._last_action = now
                if not was_active and self.humidifying:
                    self._last_active_time = now
                    self.adjustment_count += 1
                    logger.info(
                        "Humidification on: current %s%%, target %s%%",
                        current_humidity, adjusted,
                    )
            elif error < -tol:
                if current_humidity > self.critical_high:
                    self.dehumidifying = True
                    self.ventilating = True
                    self._last_action = now
                elif error < -tol * 1.5:
                    self.ventilating = True
                    if error < -tol * 2.0:
                        self.dehumidifying = True
                    self._last_action = now
                if not was_active and (self.dehumidifying or self.ventilating):
                    self._last_active_time = now
                    self.adjustment_count += 1
                    logger.info(
                        "Dehumidification on: current %s%%, target %s%%",
                        current_humidity, adjusted,
                    )
            elif was_active:
                self._total_active_time += now - self._last_active_time
                logger.info(
                    "Humidity stable: current %s%%, target %s%%",
                    current_humidity, adjusted,
                )

        self.previous_error = error
        self._last_update = now

    def set_target(self, target: float) -> None:
        """Set the target humidity; it must lie within the limits."""
        if not self.min_humidity <= target <= self.max_humidity:
            raise ValueError(
                f"target humidity {target}% outside "
                f"{self.min_humidity}-{self.max_humidity}%"
            )
        self.target = target
        self.error_sum = 0.0
        logger.info("Target humidity set to %s%%", target)

    def set_tolerance(self, tolerance: float) -> None:
        if not 0.0 < tolerance <= MAX_TOLERANCE:
            raise ValueError(f"tolerance {tolerance} outside (0, {MAX_TOLERANCE}]")
        self.tolerance = tolerance

    def set_control_constants(self, kp: float, ki: float, kd: float) -> None:
        self.kp, self.ki, self.kd = kp, ki, kd
        self.error_sum = 0.0

    def set_humidity_limits(self, minimum: float, maximum: float) -> None:
        if not (minimum < maximum and minimum >= 0.0 and maximum <= 100.0):
            raise ValueError(f"invalid humidity limits {minimum}-{maximum}%")
        self.min_humidity = minimum
        self.max_humidity = maximum

    def set_critical_limits(self, critical_low: float, critical_high: float) -> None:
        self.critical_low = critical_low
        self.critical_high = critical_high

    def enable(self) -> None:
        self.enabled = True
        self.error_sum = 0.0
        self.previous_error = 0.0
        self._last_update = self._clock()
        logger.info("Humidity control enabled")

    def disable(self) -> None:
        self.enabled = False
        self.humidifying = False
        self.dehumidifying = False
        self.ventilating = False
        logger.info("Humidity control disabled")

    def error(self) -> float:
        return self.target - self.current_humidity

    def is_humidifying_active(self) -> bool:
        return self.enabled and self.humidifying

    def is_dehumidifying_active(self) -> bool:
        return self.enabled and self.dehumidifying

    def is_ventilation_active(self) -> bool:
        return self.enabled and self.ventilating

    def is_in_range(self) -> bool:
        return abs(self.error()) <= self.tolerance

    def ventilation_level(self) -> int:
        """Ventilation demand as 0-100 %, from the deviation from target."""
        if not self.enabled or not self.ventilating:
            return 0
        deviation = abs(self.current_humidity - self.target)
        span = self.max_humidity - self.min_humidity
        level = int(deviation / span * 100.0)
        return max(0, min(100, level))

    def control_output(self) -> float:
        err = self.error()
        return self.kp * err + self.ki * self.error_sum + self.kd * (err - self.previous_error)

    def is_critical_condition(self) -> bool:
        return (
            self.current_humidity <= self.critical_low
            or self.current_humidity >= self.critical_high
        )

    def total_active_time(self) -> int:
        """Milliseconds spent acting on humidity, including the current spell."""
        total = self._total_active_time
        if self._any_active():
            total += self._clock() - self._last_active_time
        return total

    def reset_statistics(self) -> None:
        self._total_active_time = 0
        self.adjustment_count = 0

    def status_string(self) -> str:
        if not self.enabled:
            state = "OFF"
        elif self.humidifying:
            state = "HUMIDIFYING"
        elif self.dehumidifying:
            state = "DEHUMIDIFYING"
        elif self.ventilating:
            state = "VENTILATING"
        else:
            state = "STABLE"
        adjusted = self.target * self.temperature_factor
        status = f"{self.current_humidity:.1f}% ({state}) [Target: {adjusted:.1f}%]"
        if self.is_critical_condition():
            status += " [CRITICAL]"
        return status

    def check_emergency(self) -> bool:
        """True when humidity is at or beyond a critical limit."""
        if not self.enabled:
            return False
        if self.current_humidity <= self.critical_low:
            logger.warning("Critical low humidity: %s%%", self.current_humidity)
            return True
        if self.current_humidity >= self.critical_high:
            logger.warning("Critical high humidity: %s%%", self.current_humidity)
            return True
        return False

    def adapt_to_weather(self, is_raining: bool, outside_humidity: float) -> None:
        """Lower the effective target in rain, raise it when outside air is dry."""
        if is_raining:
            self.temperature_factor = 0.9
        elif 0 < outside_humidity < 30.0:
            self.temperature_factor = 1.1

    def calculate_ideal_humidity(self, temperature: float) -> float:
        """Ideal relative humidity for a temperature, within the limits."""
        ideal = 80.0 - (temperature - 15.0) * 1.5
        return max(self.min_humidity, min(self.max_humidity, ideal))
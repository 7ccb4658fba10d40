"""Supplemental lighting driven by a daily schedule and measured light."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TARGET_LUX = 15000.0
DEFAULT_TOLERANCE_LUX = 2000.0
DEFAULT_PHOTOPERIOD_HOURS = 14
DEFAULT_MIN_LUX = 500.0
DEFAULT_MAX_LUX = 50000.0
DEFAULT_MAX_LED_INTENSITY = 100.0
DEFAULT_MIN_ADJUST_INTERVAL_MS = 60000
MIN_PHOTOPERIOD_HOURS = 8
MAX_PHOTOPERIOD_HOURS = 18
MAX_INTEGRAL = 100.0
LED_STRIP_MAX_WATTS = 50.0
_MINUTES_PER_DAY = 24 * 60
_MS_PER_MINUTE = 60 * 1000

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


@dataclass(frozen=True)
class LightSchedule:
    """A daily time window with a lighting intensity in percent of target."""

    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    intensity: float
    enabled: bool

    def contains(self, hour: int, minute: int) -> bool:
        """Whether the time falls in the window; windows may cross midnight."""
        current = hour * 60 + minute
        start = self.start_hour * 60 + self.start_minute
        end = self.end_hour * 60 + self.end_minute
        if end < start:
            return current >= start or current < end
        return start <= current < end


MORNING_SCHEDULE = LightSchedule(6, 0, 8, 0, 30.0, True)
DAY_SCHEDULE = LightSchedule(8, 0, 18, 0, 80.0, True)
EVENING_SCHEDULE = LightSchedule(18, 0, 20, 0, 50.0, True)
NIGHT_SCHEDULE = LightSchedule(20, 0, 6, 0, 0.0, False)


class LightControl:
    """Decides when the LED strip should supplement natural light."""

    def __init__(
        self,
        *,
        min_adjust_interval: int = DEFAULT_MIN_ADJUST_INTERVAL_MS,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._clock = clock or _monotonic_ms
        self.min_adjust_interval = min_adjust_interval
        self.target = DEFAULT_TARGET_LUX
        self.current_light_intensity = 1000.0
        self.tolerance = DEFAULT_TOLERANCE_LUX
        self.daily_light_hours = DEFAULT_PHOTOPERIOD_HOURS
        self.current_photoperiod = 0
        self.previous_error = 0.0
        self.error_integral = 0.0
        self.derivative = 0.0
        self.kp = 0.8
        self.ki = 0.02
        self.kd = 0.1
        self.min_lux = DEFAULT_MIN_LUX
        self.max_lux = DEFAULT_MAX_LUX
        self.max_led_intensity = DEFAULT_MAX_LED_INTENSITY
        self.enabled = False
        self.artificial_light_active = False
        self.photoperiod_active = True
        self.cloudiness_detection = True
        self.natural_light_level = 0.0
        self.supplemental_light_level = 0.0
        self.total_light_time = 0
        self.daily_light_time = 0
        self.adjustment_count = 0
        self.daily_energy_consumption = 0.0
        self.morning_schedule = MORNING_SCHEDULE
        self.day_schedule = DAY_SCHEDULE
        self.evening_schedule = EVENING_SCHEDULE
        self.night_schedule = NIGHT_SCHEDULE
        self._last_update = 0
        self._last_adjustment = 0
        self._day_start = 0

    def begin(self) -> None:
        """Reset the controller state and enable it."""
        self.previous_error = 0.0
        self.error_integral = 0.0
        now = self._clock()
        self._last_update = now
        self._day_start = now
        self.kp, self.ki, self.kd = 0.8, 0.02, 0.1
        self.enabled = True
        self.photoperiod_active = True
        logger.info(
            "Light control ready: target %s lux, photoperiod %d h",
            self.target, self.daily_light_hours,
        )

    def update(self, current_lux: float, hour: int = 12, minute: int = 0) -> None:
        """Feed a light reading at a time of day and decide on the LEDs."""
        if not self.enabled:
            return
        now = self._clock()
        delta = (now - self._last_update) / 1000.0
        if delta <= 0:
            return

        self.current_light_intensity = current_lux
        self.natural_light_level = current_lux

        schedule = self.current_schedule(hour, minute)
        schedule_target = self.target * schedule.intensity / 100.0
        effective_target = schedule_target
        if self.cloudiness_detection and self.natural_light_level > self.min_lux:
            natural = min(self.natural_light_level, schedule_target)
            effective_target = max(0.0, schedule_target - natural)

        available = self.natural_light_level + self.supplemental_light_level
        error = schedule_target - available

        self.error_integral += error * delta
        self.error_integral = max(-MAX_INTEGRAL, min(MAX_INTEGRAL, self.error_integral))
        self.derivative = (error - self.previous_error) / delta

        allowed = now - self._last_adjustment >= self.min_adjust_interval
        was_active = self.artificial_light_active
        self.artificial_light_active = False

        if allowed and schedule.enabled:
            if error > self.tolerance and effective_target > 0:
                self.artificial_light_active = True
                self.supplemental_light_level = min(
                    effective_target, self.max_led_intensity * self.target / 100.0
                )
                self._last_adjustment = now
                if not was_active:
                    self.adjustment_count += 1
                    logger.info(
                        "Artificial light on: target %s lux, natural %s lux",
                        schedule_target, self.natural_light_level,
                    )
            elif error < -self.tolerance or effective_target <= 0:
                self.supplemental_light_level = 0.0
                if was_active:
                    self._last_adjustment = now
                    logger.info("Artificial light off: enough natural light")

        self._update_photoperiod()

        if self.artificial_light_active:
            watts = self.supplemental_light_level / self.target * LED_STRIP_MAX_WATTS
            self.daily_energy_consumption += watts * delta / 3600.0

        self.previous_error = error
        self._last_update = now

    def set_target(self, target_lux: float) -> None:
        """Set the target light level; it must lie within the lux limits."""
        if not self.min_lux <= target_lux <= self.max_lux:
            raise ValueError(
                f"target light {target_lux} lux outside {self.min_lux}-{self.max_lux} lux"
            )
        self.target = target_lux
        self.error_integral = 0.0
        logger.info("Target light intensity set to %s lux", target_lux)

    def set_photoperiod(self, hours: int) -> None:
        if not MIN_PHOTOPERIOD_HOURS <= hours <= MAX_PHOTOPERIOD_HOURS:
            raise ValueError(
                f"photoperiod {hours} h outside "
                f"{MIN_PHOTOPERIOD_HOURS}-{MAX_PHOTOPERIOD_HOURS} h"
            )
        self.daily_light_hours = hours

    def enable(self) -> None:
        self.enabled = True
        self.error_integral = 0.0
        self._last_update = self._clock()
        logger.info("Light control enabled")

    def disable(self) -> None:
        self.enabled = False
        self.artificial_light_active = False
        self.supplemental_light_level = 0.0
        logger.info("Light control disabled")

    def is_artificial_light_active(self) -> bool:
        return self.enabled and self.artificial_light_active

    def led_intensity(self) -> float:
        """LED output as a percentage of the target light level."""
        if not self.artificial_light_active:
            return 0.0
        intensity = self.supplemental_light_level / self.target * 100.0
        return min(intensity, self.max_led_intensity)

    def status_string(self) -> str:
        if not self.enabled:
            state = "(OFF)"
        elif self.artificial_light_active:
            state = f"(LED: {self.led_intensity():.0f}%)"
        else:
            state = "(NATURAL)"
        return (
            f"{self.current_light_intensity:.0f} lux {state} "
            f"[Target: {self.target:.0f} lux]"
        )

    def check_emergency(self) -> bool:
        """Lighting has no emergency conditions."""
        return False

    def current_schedule(self, hour: int, minute: int) -> LightSchedule:
        for schedule in (self.morning_schedule, self.day_schedule, self.evening_schedule):
            if schedule.contains(hour, minute):
                return schedule
        return self.night_schedule

    def _update_photoperiod(self) -> None:
        now = self._clock()
        self.current_photoperiod = (now - self._day_start) // _MS_PER_MINUTE
        if self.current_photoperiod > _MINUTES_PER_DAY:
            self.reset_daily_statistics()
            self._day_start = now
            self.current_photoperiod = 0

    def reset_daily_statistics(self) -> None:
        self.daily_light_time = 0
        self.daily_energy_consumption = 0.0
        logger.info("Light daily statistics reset")

    def reset_statistics(self) -> None:
        self.total_light_time = 0
        self.adjustment_count = 0
        self.reset_daily_statistics()
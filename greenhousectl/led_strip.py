"""LED grow-light strip, switched digitally or dimmed by PWM."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MIN_STATE_CHANGE_INTERVAL = 1000
DEFAULT_MAX_CONTINUOUS_RUN_TIME = 43200000
MAX_BRIGHTNESS = 255
_FADE_STEP_S = 0.01

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


def _scale(x: int, in_min: int, in_max: int, out_min: int, out_max: int) -> int:
    """Integer linear rescale, truncating toward zero."""
    num = (x - in_min) * (out_max - out_min)
    den = in_max - in_min
    quotient = abs(num) // abs(den)
    if (num < 0) != (den < 0):
        quotient = -quotient
    return quotient + out_min


class LEDStripActuator:
    """An LED strip with optional brightness control, fades and run statistics."""

    label = "LED strip"

    def __init__(
        self,
        pin: int,
        enable_pwm: bool = False,
        pwm_channel: int = 0,
        *,
        min_state_change_interval: int = DEFAULT_MIN_STATE_CHANGE_INTERVAL,
        max_continuous_run_time: int = DEFAULT_MAX_CONTINUOUS_RUN_TIME,
        clock: Optional[Callable[[], int]] = None,
        output: Optional[Callable[[int, bool], None]] = None,
        pwm_write: Optional[Callable[[int, int], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.pin = pin
        self.pwm = enable_pwm
        self.pwm_channel = pwm_channel
        self.min_state_change_interval = min_state_change_interval
        self.max_continuous_run_time = max_continuous_run_time
        self._clock = clock or _monotonic_ms
        self._output = output or (lambda pin, level: None)
        self._pwm_write = pwm_write or (lambda channel, duty: None)
        self._sleep = sleep
        self.brightness = MAX_BRIGHTNESS
        self.initialized = False
        self.on = False
        self.last_state_change = 0
        self._run_start = 0
        self._continuous = False
        self._total_run_time = 0
        self.activation_count = 0

    def begin(self) -> None:
        """Start with the strip dark and mark it ready."""
        if self.pwm:
            self._pwm_write(self.pwm_channel, 0)
            logger.info(
                "%s with PWM initialised on pin %d (channel %d)",
                self.label, self.pin, self.pwm_channel,
            )
        else:
            self._output(self.pin, False)
            logger.info("Digital %s initialised on pin %d", self.label, self.pin)
        self.initialized = True

    def _require_ready(self) -> None:
        if not self.initialized:
            raise RuntimeError(f"{self.label} is not initialised")

    def _change_allowed(self, now: int) -> bool:
        if now - self.last_state_change < self.min_state_change_interval:
            logger.warning("%s: minimum interval between changes not met", self.label)
            return False
        return True

    def _end_run(self, now: int) -> None:
        if self._continuous:
            self._total_run_time += now - self._run_start
            self._continuous = False

    def turn_on(self) -> bool:
        """Light the strip; False if the minimum interval has not passed."""
        self._require_ready()
        now = self._clock()
        if not self._change_allowed(now):
            return False
        if not self.on:
            if self.pwm:
                self._pwm_write(self.pwm_channel, self.brightness)
            else:
                self._output(self.pin, True)
            self.on = True
            self.last_state_change = now
            self.activation_count += 1
            if not self._continuous:
                self._run_start = now
                self._continuous = True
            logger.info("%s on (activation #%d)", self.label, self.activation_count)
        return True

    def turn_off(self) -> bool:
        """Darken the strip; False if the minimum interval has not passed."""
        self._require_ready()
        now = self._clock()
        if not self._change_allowed(now):
            return False
        if self.on:
            run = now - self._run_start
            self._end_run(now)
            if self.pwm:
                self._pwm_write(self.pwm_channel, 0)
            else:
                self._output(self.pin, False)
            self.on = False
            self.last_state_change = now
            logger.info("%s off (ran %d ms)", self.label, run)
        return True

    def toggle(self) -> bool:
        return self.turn_off() if self.on else self.turn_on()

    def set_brightness(self, value: int) -> bool:
        """Set the PWM duty (0-255); False when the strip has no PWM."""
        if not self.pwm:
            logger.warning("%s: brightness control needs PWM", self.label)
            return False
        value = int(value)
        if not 0 <= value <= MAX_BRIGHTNESS:
            raise ValueError(f"brightness {value} outside 0-{MAX_BRIGHTNESS}")
        self.brightness = value
        if self.on:
            self._pwm_write(self.pwm_channel, value)
        logger.info("%s brightness set to %d", self.label, value)
        return True

    def fade_in(self, duration: int) -> bool:
        """Ramp from dark up to the set brightness over ``duration`` ms."""
        if not self.pwm or not self.initialized:
            return False
        start = self._clock()
        self.on = True
        if not self._continuous:
            self._run_start = start
            self._continuous = True
            self.activation_count += 1
        while (elapsed := self._clock() - start) < duration:
            self._pwm_write(
                self.pwm_channel, _scale(elapsed, 0, duration, 0, self.brightness)
            )
            self._sleep(_FADE_STEP_S)
        self._pwm_write(self.pwm_channel, self.brightness)
        self.last_state_change = self._clock()
        logger.info("%s fade in complete", self.label)
        return True

    def fade_out(self, duration: int) -> bool:
        """Ramp from the set brightness down to dark over ``duration`` ms."""
        if not self.pwm or not self.initialized or not self.on:
            return False
        start = self._clock()
        while (elapsed := self._clock() - start) < duration:
            self._pwm_write(
                self.pwm_channel, _scale(elapsed, 0, duration, self.brightness, 0)
            )
            self._sleep(_FADE_STEP_S)
        self._pwm_write(self.pwm_channel, 0)
        now = self._clock()
        self._end_run(now)
        self.on = False
        self.last_state_change = now
        logger.info("%s fade out complete", self.label)
        return True

    def is_running(self) -> bool:
        return self.on

    def is_ready(self) -> bool:
        return self.initialized

    def supports_brightness(self) -> bool:
        return self.pwm

    def time_since_last_change(self) -> int:
        return self._clock() - self.last_state_change

    def continuous_run_time(self) -> int:
        """Milliseconds since the current run began, or 0 when idle."""
        if self._continuous:
            return self._clock() - self._run_start
        return 0

    def has_exceeded_max_run_time(self) -> bool:
        if self._continuous and self.max_continuous_run_time > 0:
            return self.continuous_run_time() > self.max_continuous_run_time
        return False

    def total_run_time(self) -> int:
        """Accumulated run time in ms, including the current run."""
        total = self._total_run_time
        if self._continuous:
            total += self.continuous_run_time()
        return total

    def reset_statistics(self) -> None:
        self._total_run_time = 0
        self.activation_count = 0
        logger.info("%s statistics reset", self.label)

    def blynk_state(self) -> int:
        return 1 if self.on else 0

    def set_from_blynk(self, state: int) -> bool:
        """Switch on for state 1, off for anything else."""
        return self.turn_on() if state == 1 else self.turn_off()

    def set_brightness_from_blynk(self, value: int) -> bool:
        """Set brightness from a 0-100 percentage."""
        if not self.pwm:
            return False
        duty = _scale(int(value), 0, 100, 0, MAX_BRIGHTNESS)
        logger.info("%s brightness from app: %s -> %d", self.label, value, duty)
        return self.set_brightness(duty)

    def status_report(self) -> str:
        lines = [
            f"========== {self.label} Status ==========",
            f"Initialized: {'Yes' if self.initialized else 'No'}",
            f"Pin: {self.pin}",
            f"PWM support: {'Yes' if self.pwm else 'No'}",
        ]
        if self.pwm:
            lines.append(f"PWM channel: {self.pwm_channel}")
            lines.append(f"Brightness: {self.brightness}")
        lines += [
            f"State: {'ON' if self.on else 'OFF'}",
            f"Time since last change: {self.time_since_last_change()} ms",
            f"Activations: {self.activation_count}",
            f"Total run time: {self.total_run_time()} ms",
        ]
        if self._continuous:
            lines.append(f"Continuous run time: {self.continuous_run_time()} ms")
            lines.append(
                f"Exceeds max run time: {'YES' if self.has_exceeded_max_run_time() else 'No'}"
            )
        lines.append("=" * 42)
        return "\n".join(lines)
"""Relay-driven on/off actuators with rate limiting and run-time tracking."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


def _discard_output(pin: int, level: bool) -> None:
    """Default output sink used when no hardware writer is given."""


class RelayActuator:
    """An actuator switched by a single relay pin."""

    label = "Relay"
    default_min_state_change_interval = 5000
    default_max_continuous_run_time = 3600000

    def __init__(
        self,
        pin: int,
        *,
        min_state_change_interval: Optional[int] = None,
        max_continuous_run_time: Optional[int] = None,
        clock: Optional[Callable[[], int]] = None,
        output: Optional[Callable[[int, bool], None]] = None,
    ) -> None:
        self.pin = pin
        self.min_state_change_interval = (
            self.default_min_state_change_interval
            if min_state_change_interval is None
            else min_state_change_interval
        )
        self.max_continuous_run_time = (
            self.default_max_continuous_run_time
            if max_continuous_run_time is None
            else max_continuous_run_time
        )
        self._clock = clock or _monotonic_ms
        self._output = output or _discard_output
        self.initialized = False
        self.on = False
        self.last_state_change = 0
        self._run_start = 0
        self._continuous = False

    def begin(self) -> None:
        """Drive the relay low and mark the actuator ready."""
        self._output(self.pin, False)
        self.initialized = True
        logger.info("%s initialised on pin %d", self.label, self.pin)

    def _after_turn_on(self, now: int) -> None:
        """Hook run after the relay is switched on."""

    def _before_turn_off(self, now: int) -> None:
        """Hook run before the relay is switched off."""

    def _switch_on(self, now: int) -> None:
        self._output(self.pin, True)
        self.on = True
        self.last_state_change = now
        if not self._continuous:
            self._run_start = now
            self._continuous = True
        self._after_turn_on(now)

    def _switch_off(self, now: int) -> None:
        self._before_turn_off(now)
        self._output(self.pin, False)
        self.on = False
        self.last_state_change = now
        self._continuous = False

    def _change(self, state: bool) -> bool:
        if not self.initialized:
            raise RuntimeError(f"{self.label} is not initialised")
        now = self._clock()
        if now - self.last_state_change < self.min_state_change_interval:
            logger.warning("%s: minimum interval between changes not met", self.label)
            return False
        if self.on != state:
            (self._switch_on if state else self._switch_off)(now)
            logger.info("%s switched %s", self.label, "on" if state else "off")
        return True

    def turn_on(self) -> bool:
        """Switch on; False if the minimum interval has not passed."""
        return self._change(True)

    def turn_off(self) -> bool:
        """Switch off; False if the minimum interval has not passed."""
        return self._change(False)

    def toggle(self) -> bool:
        return self._change(not self.on)

    def is_running(self) -> bool:
        return self.on

    def is_ready(self) -> bool:
        return self.initialized

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

    def blynk_state(self) -> int:
        return int(self.on)

    def set_from_blynk(self, state: int) -> bool:
        """Switch on for state 1, off for anything else."""
        return self._change(state == 1)

    def _extra_status_lines(self) -> list[str]:
        return []

    def status_report(self) -> str:
        lines = [
            f"========== {self.label} Status ==========",
            f"Initialized: {'Yes' if self.initialized else 'No'}",
            f"Relay pin: {self.pin}",
            f"State: {'ON' if self.on else 'OFF'}",
            f"Time since last change: {self.time_since_last_change()} ms",
            *self._extra_status_lines(),
        ]
        if self._continuous:
            exceeded = "YES" if self.has_exceeded_max_run_time() else "No"
            lines.append(f"Continuous run time: {self.continuous_run_time()} ms")
            lines.append(f"Exceeds max run time: {exceeded}")
        lines.append("=" * 42)
        return "\n".join(lines)


class _TrackedRelayActuator(RelayActuator):
    """Relay actuator that counts activations and accumulates run time."""

    def __init__(self, pin: int, **kwargs: Any) -> None:
        super().__init__(pin, **kwargs)
        self.activation_count = 0
        self._total_run_time = 0

    def _after_turn_on(self, now: int) -> None:
        self.activation_count += 1
        logger.info("%s activation #%d", self.label, self.activation_count)

    def _before_turn_off(self, now: int) -> None:
        if self._continuous:
            run = now - self._run_start
            self._total_run_time += run
            logger.info("%s ran for %d ms", self.label, run)

    def total_run_time(self) -> int:
        """Accumulated run time in ms, including the current run."""
        return self._total_run_time + self.continuous_run_time()

    def reset_statistics(self) -> None:
        self._total_run_time = 0
        self.activation_count = 0
        logger.info("%s statistics reset", self.label)

    def _extra_status_lines(self) -> list[str]:
        return [
            f"Activations: {self.activation_count}",
            f"Total run time: {self.total_run_time()} ms",
        ]


class FanActuator(RelayActuator):
    """Ventilation fan on a relay: 5 s between changes, at most 1 h continuous."""

    label = "Fan"
    default_min_state_change_interval = 5000
    default_max_continuous_run_time = 3600000
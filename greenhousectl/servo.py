"""Vent servo that covers or uncovers the ventilation fan."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from greenhousectl.led_strip import _scale

logger = logging.getLogger(__name__)

POSITION_TOLERANCE = 2
MIN_ANGLE = 0
MAX_ANGLE = 180
MIN_MOVE_INTERVAL = 10
MAX_MOVE_SPEED = 10
_SETTLE_S = 0.5

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


class ServoActuator:
    """A hobby servo positioned in degrees, with direct and stepped moves."""

    label = "Servo"

    def __init__(
        self,
        pin: int,
        *,
        clock: Optional[Callable[[], int]] = None,
        write: Optional[Callable[[int], None]] = None,
        attach: Optional[Callable[[int], bool]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.pin = pin
        self._clock = clock or _monotonic_ms
        self._write = write or (lambda angle: None)
        self._attach = attach or (lambda pin: True)
        self._sleep = sleep
        self.current_position = 90
        self.target_position = 90
        self.open_position = 90
        self.closed_position = 0
        self.min_position = MIN_ANGLE
        self.max_position = MAX_ANGLE
        self.move_interval = 50
        self.move_speed = 1
        self.initialized = False
        self.moving = False
        self.last_move_time = 0
        self.move_count = 0

    def begin(self) -> None:
        """Attach the servo and drive it to its starting position."""
        if not self._attach(self.pin):
            raise RuntimeError(f"could not attach servo on pin {self.pin}")
        self.initialized = True
        self._write(self.current_position)
        self._sleep(_SETTLE_S)
        logger.info(
            "%s initialised on pin %d at %d° (open %d°, closed %d°)",
            self.label, self.pin, self.current_position,
            self.open_position, self.closed_position,
        )

    def _require_ready(self) -> None:
        if not self.initialized:
            raise RuntimeError(f"{self.label} is not initialised")

    def _check_in_limits(self, position: int) -> None:
        if not self.min_position <= position <= self.max_position:
            raise ValueError(
                f"position {position} outside limits "
                f"{self.min_position}-{self.max_position}"
            )

    def move_to(self, position: int) -> bool:
        """Jump straight to ``position`` degrees."""
        self._require_ready()
        self._check_in_limits(position)
        if position != self.current_position:
            self._write(position)
            self.current_position = position
            self.target_position = position
            self.last_move_time = self._clock()
            self.move_count += 1
            logger.info("%s moved to %d°", self.label, position)
        return True

    def open_vent(self) -> bool:
        logger.info("Opening vent")
        return self.move_to(self.open_position)

    def close_vent(self) -> bool:
        logger.info("Closing vent")
        return self.move_to(self.closed_position)

    def set_open_position(self, position: int) -> None:
        self._check_in_limits(position)
        self.open_position = position

    def set_closed_position(self, position: int) -> None:
        self._check_in_limits(position)
        self.closed_position = position

    def set_position_limits(self, min_pos: int, max_pos: int) -> None:
        if not (min_pos >= MIN_ANGLE and max_pos <= MAX_ANGLE and min_pos < max_pos):
            raise ValueError(f"invalid position limits {min_pos}-{max_pos}")
        self.min_position = min_pos
        self.max_position = max_pos

    def set_move_speed(self, speed: int) -> None:
        """Degrees moved per step of a smooth move (1-10)."""
        if not 0 < speed <= MAX_MOVE_SPEED:
            raise ValueError(f"move speed {speed} outside 1-{MAX_MOVE_SPEED}")
        self.move_speed = speed

    def set_move_interval(self, interval: int) -> None:
        """Milliseconds between steps of a smooth move (at least 10)."""
        if interval < MIN_MOVE_INTERVAL:
            raise ValueError(f"move interval {interval} below {MIN_MOVE_INTERVAL} ms")
        self.move_interval = interval

    def is_at_position(self, position: int) -> bool:
        return abs(self.current_position - position) <= POSITION_TOLERANCE

    def is_open(self) -> bool:
        return self.is_at_position(self.open_position)

    def is_closed(self) -> bool:
        return self.is_at_position(self.closed_position)

    def is_ready(self) -> bool:
        return self.initialized

    def update(self) -> None:
        """Advance a smooth move by one step when its interval has passed."""
        if not self.initialized or not self.moving:
            return
        now = self._clock()
        if now - self.last_move_time < self.move_interval:
            return
        remaining = self.target_position - self.current_position
        if remaining == 0:
            self.moving = False
            return
        step = min(self.move_speed, abs(remaining))
        self.current_position += step if remaining > 0 else -step
        self._write(self.current_position)
        self.last_move_time = now
        if self.current_position == self.target_position:
            self.moving = False
            logger.info("%s smooth move finished at %d°", self.label, self.current_position)

    def smooth_move_to(self, position: int) -> bool:
        """Start a stepped move towards ``position``, driven by update()."""
        self._require_ready()
        self._check_in_limits(position)
        self.target_position = position
        self.moving = True
        self.move_count += 1
        logger.info("%s starting smooth move to %d°", self.label, position)
        return True

    def calibrate(self) -> bool:
        """Sweep to the minimum, maximum and centre positions."""
        self._require_ready()
        for position in (
            self.min_position,
            self.max_position,
            (self.min_position + self.max_position) // 2,
        ):
            self.move_to(position)
            self._sleep(1.0)
        logger.info("%s calibration complete", self.label)
        return True

    def test_movement(self) -> bool:
        """Open, close and reopen the vent."""
        self._require_ready()
        self.open_vent()
        self._sleep(2.0)
        self.close_vent()
        self._sleep(2.0)
        self.open_vent()
        self._sleep(1.0)
        logger.info("%s movement test complete", self.label)
        return True

    def blynk_state(self) -> int:
        return 1 if self.is_open() else 0

    def set_from_blynk(self, state: int) -> bool:
        """Open the vent for state 1, close it for anything else."""
        return self.open_vent() if state == 1 else self.close_vent()

    def set_position_from_blynk(self, position: int) -> bool:
        """Move to a 0-100 percentage of the position range."""
        angle = _scale(int(position), 0, 100, self.min_position, self.max_position)
        logger.info("%s position from app: %s -> %d°", self.label, position, angle)
        return self.move_to(angle)

    def _vent_state(self) -> str:
        if self.is_open():
            return "OPEN"
        if self.is_closed():
            return "CLOSED"
        return "INTERMEDIATE"

    def status_report(self) -> str:
        lines = [
            f"========== {self.label} Status ==========",
            f"Initialized: {'Yes' if self.initialized else 'No'}",
            f"Pin: {self.pin}",
            f"Current position: {self.current_position} degrees",
            f"Target position: {self.target_position} degrees",
            f"Moving: {'Yes' if self.moving else 'No'}",
            f"Vent state: {self._vent_state()}",
            f"Open position: {self.open_position} degrees",
            f"Closed position: {self.closed_position} degrees",
            f"Limits: {self.min_position} - {self.max_position} degrees",
            f"Moves: {self.move_count}",
            "=" * 38,
        ]
        return "\n".join(lines)
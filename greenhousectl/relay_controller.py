"""A bank of relay channels with debounce and inverted-logic support."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from greenhousectl.relay_device import _discard_output, _monotonic_ms

logger = logging.getLogger(__name__)

MAX_RELAYS = 8
MAX_GPIO = 39
DEFAULT_DEBOUNCE_MS = 50


@dataclass
class _Relay:
    pin: Optional[int] = None
    active: bool = False
    inverted: bool = False
    name: str = ""
    last_toggle: int = 0


class RelayController:
    """Switches up to eight relay channels, each on its own output pin."""

    def __init__(
        self,
        *,
        clock: Optional[Callable[[], int]] = None,
        output: Optional[Callable[[int, bool], None]] = None,
    ) -> None:
        self._relays = [_Relay() for _ in range(MAX_RELAYS)]
        self._clock = clock or _monotonic_ms
        self._output = output or _discard_output
        self.debounce_delay = DEFAULT_DEBOUNCE_MS
        self.initialized = False
        self._configured_count = 0

    def _relay(self, channel: int) -> _Relay:
        if not 0 <= channel < MAX_RELAYS:
            raise ValueError(f"invalid relay channel {channel}")
        return self._relays[channel]

    def _write(self, relay: _Relay, state: bool) -> None:
        if relay.pin is None:
            return
        self._output(relay.pin, (not state) if relay.inverted else state)

    def begin(self, debounce_ms: int = DEFAULT_DEBOUNCE_MS) -> None:
        """Set the debounce delay and switch every configured relay off."""
        self.debounce_delay = debounce_ms
        self.initialized = True
        logger.info("Relay controller ready, debounce %d ms", debounce_ms)
        self.deactivate_all()

    def configure_relay(
        self, channel: int, pin: int, name: str = "", inverted: bool = False
    ) -> None:
        """Assign a pin and name to a channel and switch it off."""
        relay = self._relay(channel)
        if not 0 <= pin <= MAX_GPIO:
            raise ValueError(f"invalid GPIO pin {pin}")
        relay.pin = pin
        relay.name = name
        relay.inverted = inverted
        relay.active = False
        relay.last_toggle = 0
        self._write(relay, False)
        self._configured_count += 1
        logger.info(
            "Relay configured: channel %d, pin %d, name %s, inverted %s",
            channel, pin, name, inverted,
        )

    def _switch(self, channel: int, state: bool) -> bool:
        relay = self._relay(channel)
        if relay.pin is None:
            return False
        now = self._clock()
        if now - relay.last_toggle < self.debounce_delay:
            return False
        relay.active = state
        relay.last_toggle = now
        self._write(relay, state)
        logger.info(
            "Relay %s: channel %d (%s)",
            "activated" if state else "deactivated", channel, relay.name,
        )
        return True

    def activate(self, channel: int) -> bool:
        """Switch a channel on; False if unconfigured or debouncing."""
        return self._switch(channel, True)

    def deactivate(self, channel: int) -> bool:
        """Switch a channel off; False if unconfigured or debouncing."""
        return self._switch(channel, False)

    def toggle(self, channel: int) -> bool:
        relay = self._relay(channel)
        if relay.pin is None:
            return False
        return self._switch(channel, not relay.active)

    def state(self, channel: int) -> bool:
        return self._relay(channel).active

    def name(self, channel: int) -> str:
        return self._relay(channel).name or "Unnamed"

    def pin(self, channel: int) -> Optional[int]:
        return self._relay(channel).pin

    def deactivate_all(self) -> None:
        """Switch every configured relay off, ignoring debounce."""
        logger.info("Deactivating all relays")
        for relay in self._relays:
            if relay.pin is not None:
                relay.active = False
                self._write(relay, False)

    def set_mask(self, mask: int) -> None:
        """Set each configured channel from the matching bit of ``mask``."""
        for channel, relay in enumerate(self._relays):
            if relay.pin is not None:
                self._switch(channel, bool(mask & (1 << channel)))

    def mask(self) -> int:
        return sum(1 << i for i, relay in enumerate(self._relays) if relay.active)

    def active_channel_count(self) -> int:
        """Number of configure_relay calls made so far."""
        return self._configured_count

    def blynk_state(self, channel: int) -> int:
        """1 when the channel is active, 0 otherwise."""
        return int(self._relay(channel).active)

    def set_from_blynk(self, channel: int, state: int) -> bool:
        if self._relay(channel).pin is None:
            return False
        return self._switch(channel, state == 1)

    def status_report(self) -> str:
        lines = [
            "========== Relay Controller Status ==========",
            f"Initialized: {'Yes' if self.initialized else 'No'}",
            f"Configured channels: {self._configured_count}",
            f"Current mask: 0x{self.mask():02X}",
            "-" * 52,
        ]
        lines.extend(
            f"Channel {channel}: {relay.name} | Pin: {relay.pin} | "
            f"State: {'ACTIVE' if relay.active else 'INACTIVE'} | "
            f"Inverted: {'Yes' if relay.inverted else 'No'}"
            for channel, relay in enumerate(self._relays)
            if relay.pin is not None
        )
        lines.append("=" * 50)
        return "\n".join(lines)
"""Connection management for a Blynk cloud link."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "blynk.cloud"
DEFAULT_PORT = 80
RECONNECT_INTERVAL_MS = 30000
CONNECT_TIMEOUT_MS = 10000
_POLL_INTERVAL_S = 0.1

_START = time.monotonic()


def _monotonic_ms() -> int:
    return int((time.monotonic() - _START) * 1000)


class BlynkBackend(Protocol):
    """The client library operations the manager drives."""

    def config(self, token: str, server: str, port: int) -> None: ...

    def connected(self) -> bool: ...

    def run(self) -> None: ...

    def virtual_write(self, pin: int, value: object) -> None: ...


class BlynkManager:
    """Configures, connects and reconnects a Blynk link and writes virtual pins."""

    def __init__(
        self,
        backend: Optional[BlynkBackend] = None,
        *,
        reconnect_interval: int = RECONNECT_INTERVAL_MS,
        network_available: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], int]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.backend = backend
        self.auth_token = ""
        self.server = DEFAULT_SERVER
        self.port = DEFAULT_PORT
        self.reconnect_interval = reconnect_interval
        self.initialized = False
        self._network_available = network_available or (lambda: True)
        self._clock = clock or _monotonic_ms
        self._sleep = sleep
        self._last_attempt = 0
        self._connected = False
        self._connect_callback: Optional[Callable[[], None]] = None
        self._disconnect_callback: Optional[Callable[[], None]] = None

    def begin(
        self,
        token: Optional[str] = None,
        server: Optional[str] = None,
        port: Optional[int] = None,
    ) -> None:
        """Set credentials and mark the manager ready to connect."""
        if token is not None:
            self.auth_token = token
            self.server = server if server is not None else DEFAULT_SERVER
            self.port = port if port is not None else DEFAULT_PORT
        if not self.auth_token:
            raise ValueError("an auth token is required")
        self.initialized = True

    def connect(self) -> bool:
        """Try to connect, waiting up to the connect timeout."""
        backend = self.backend
        if not self.initialized or backend is None:
            return False
        if not self._network_available() or not self.auth_token:
            return False

        backend.config(self.auth_token, self.server, self.port)
        start = self._clock()
        while not backend.connected() and self._clock() - start < CONNECT_TIMEOUT_MS:
            backend.run()
            self._sleep(_POLL_INTERVAL_S)

        self._connected = backend.connected()
        if self._connected and self._connect_callback:
            self._connect_callback()
        return self._connected

    def is_connected(self) -> bool:
        if self.backend is not None:
            self._connected = self.backend.connected()
        return self._connected

    def disconnect(self) -> None:
        if self._disconnect_callback:
            self._disconnect_callback()

    def run(self) -> None:
        if self.initialized and self.backend is not None:
            self.backend.run()

    def attempt_reconnection(self) -> bool:
        """Reconnect if the interval has passed; report whether connected."""
        now = self._clock()
        if now - self._last_attempt >= self.reconnect_interval:
            self._last_attempt = now
            if not self.is_connected() and self._network_available():
                return self.connect()
        return self.is_connected()

    def on_connect(self, callback: Callable[[], None]) -> None:
        self._connect_callback = callback

    def on_disconnect(self, callback: Callable[[], None]) -> None:
        self._disconnect_callback = callback

    def send_virtual_pin(self, pin: int, value: object) -> None:
        """Write a value to a virtual pin when the link is up."""
        if self.is_connected() and self.backend is not None:
            self.backend.virtual_write(pin, value)
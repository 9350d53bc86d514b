"""Per-address tracking of port knock sequences."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from knockd.config import Config
from knockd.logger import LogLevel, Logger


@dataclass
class KnockState:
    """Progress of one address through the knock sequence (times in seconds)."""

    index: int = 0
    start_time: float = 0.0
    last_knock: float = 0.0


def _elapsed_ms(now: float, then: float) -> int:
    return int((now - then) * 1000)


class Tracker:
    """Validates knock order and timing per address and logs activations."""

    def __init__(
        self,
        config: Config,
        logger: Logger,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.logger = logger
        self._clock = clock
        self._states: dict[str, KnockState] = {}
        self._lock = threading.Lock()

    def record_knock(self, ip: str, port: int) -> None:
        """Register a knock from ``ip`` on ``port``, activating on a completed sequence."""
        ports = self.config.trigger_ports
        with self._lock:
            now = self._clock()
            state = self._states.setdefault(ip, KnockState())

            if (
                state.index == 0
                or _elapsed_ms(now, state.start_time) > self.config.sequence_timeout_ms
            ):
                state.index = 0
                state.start_time = now

            if (
                state.index > 0
                and _elapsed_ms(now, state.last_knock) > self.config.inter_knock_timeout_ms
            ):
                state.index = 0

            if port == ports[state.index]:
                state.last_knock = now
                state.index += 1
                if state.index == len(ports):
                    self._log_activation(ip)
                    del self._states[ip]
            else:
                state.index = 0

    def _log_activation(self, ip: str) -> None:
        self.logger.write(LogLevel.INFO, "service activation <%s>", ip)
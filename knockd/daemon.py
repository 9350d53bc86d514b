"""Listener threads that accept knock connections and feed them to the tracker."""

from __future__ import annotations

import select
import signal
import socket
import sys
import threading
import time
from pathlib import Path

from knockd.config import Config, ConfigError
from knockd.logger import LogLevel, Logger
from knockd.tracker import Tracker

_DEFAULT_POLL_SECONDS = 1.0
_BACKLOG = 5
_JOIN_POLL_SECONDS = 0.5


class Daemon:
    """Listens on every trigger port, one thread per port, until stopped."""

    def __init__(self, host: str = "0.0.0.0") -> None:
        self.host = host
        self._stopping = threading.Event()

    @property
    def running(self) -> bool:
        """Whether the daemon has not yet been asked to stop."""
        return not self._stopping.is_set()

    def stop(self) -> None:
        """Ask all listener threads to finish; they exit within about a second."""
        self._stopping.set()

    def run(self, config_path: str | Path) -> int:
        """Load the configuration and serve until stopped.

        Returns 1 if the configuration cannot be loaded, otherwise 0 once
        every listener has shut down.
        """
        try:
            config = Config.load(config_path)
        except ConfigError as exc:
            print(exc, file=sys.stderr)
            return 1

        logger = Logger(config.log_file)
        tracker = Tracker(config, logger)
        listeners = [
            threading.Thread(
                target=self._listen,
                args=(port, config, logger, tracker),
                name=f"knock-listener-{port}",
                daemon=True,
            )
            for port in config.trigger_ports
        ]
        for listener in listeners:
            listener.start()
        for listener in listeners:
            while listener.is_alive():
                listener.join(_JOIN_POLL_SECONDS)
        return 0

    def _listen(self, port: int, config: Config, logger: Logger, tracker: Tracker) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((self.host, port))
            except OSError:
                logger.write(LogLevel.ERROR, "Bind failed on port %d", port)
                return
            try:
                sock.listen(_BACKLOG)
            except OSError:
                logger.write(LogLevel.ERROR, "Listen failed on port %d", port)
                return

            first_seen: dict[str, float] = {}
            while not self._stopping.is_set():
                timeout = self._select_timeout(
                    first_seen, config.sequence_timeout_ms, time.monotonic()
                )
                readable, _, _ = select.select([sock], [], [], timeout)
                if not readable:
                    continue
                try:
                    conn, address = sock.accept()
                except OSError:
                    continue
                with conn:
                    ip = address[0]
                    first_seen.setdefault(ip, time.monotonic())
                    tracker.record_knock(ip, port)

    @staticmethod
    def _select_timeout(first_seen: dict[str, float], timeout_ms: int, now: float) -> float:
        """Drop expired entries (oldest first) and return how long to wait, in seconds.

        Stops at the first entry that has not expired and waits only until
        that entry would expire; with nothing pending, waits one second.
        """
        for ip, seen in list(first_seen.items()):
            elapsed = int((now - seen) * 1000)
            if elapsed >= timeout_ms:
                del first_seen[ip]
            else:
                return (timeout_ms - elapsed) / 1000
        return _DEFAULT_POLL_SECONDS


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point: ``knockd <config_file>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: knockd <config_file>")
        return 1

    daemon = Daemon()

    def _on_signal(signum: int, frame: object) -> None:
        daemon.stop()
        print(f"\nReceived signal {signum}, shutting down...")

    previous = signal.signal(signal.SIGINT, _on_signal)
    try:
        return daemon.run(args[0])
    finally:
        signal.signal(signal.SIGINT, previous)


if __name__ == "__main__":
    sys.exit(main())
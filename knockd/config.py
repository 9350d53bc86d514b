"""Loading and validation of the daemon's JSON configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from knockd.logger import LogLevel, Logger

DEFAULT_LOG_PATH = "/var/log/ssad_activations.log"

MIN_TRIGGER_PORTS = 3
MAX_TRIGGER_PORTS = 5


class ConfigError(Exception):
    """Raised when a configuration file is missing or invalid."""


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Config:
    """Validated daemon settings."""

    trigger_ports: tuple[int, ...]
    sequence_timeout_ms: int
    inter_knock_timeout_ms: int
    log_file: str

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """Read and validate a configuration file.

        Validation failures are also recorded in the default activation log,
        since no configured log location is known yet.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"no such file for config_path {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"unable to load configuration file for {path}") from exc

        try:
            return cls._from_text(text)
        except ConfigError as exc:
            Logger(DEFAULT_LOG_PATH).write(LogLevel.ERROR, "%s", str(exc))
            raise

    @classmethod
    def _from_text(cls, text: str) -> Config:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"configuration file is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            data = {}

        if not isinstance(data.get("trigger_ports"), list):
            raise ConfigError(
                "configuration file must include trigger_ports. check the schema file"
            )
        if not _is_int(data.get("sequence_timeout_ms")):
            raise ConfigError(
                "configuration file must include sequence_timeout_ms and should be ints "
                "(0 - 65k). check the schema file"
            )
        if not _is_int(data.get("inter_knock_timeout_ms")):
            raise ConfigError(
                "configuration file must include inter_knock_timeout_ms. check schema file"
            )
        if not isinstance(data.get("activation_log_file"), str):
            raise ConfigError(
                "configuration file must include activation_log_file. check schema file"
            )

        ports = data["trigger_ports"]
        if not all(_is_int(p) for p in ports):
            raise ConfigError("trigger_ports must contain only integers")
        if not MIN_TRIGGER_PORTS <= len(ports) <= MAX_TRIGGER_PORTS:
            raise ConfigError("trigger_ports must contain between 3 and 5 entries")
        if any(not 1 <= p <= 65535 for p in ports):
            raise ConfigError("trigger_ports contains invalid port numbers")

        return cls(
            trigger_ports=tuple(ports),
            sequence_timeout_ms=data["sequence_timeout_ms"],
            inter_knock_timeout_ms=data["inter_knock_timeout_ms"],
            log_file=data["activation_log_file"],
        )
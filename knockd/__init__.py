"""Port-knocking daemon that logs service activations for completed knock sequences."""

__version__ = "0.1.0"
__all__ = ["config", "daemon", "logger", "tracker"]
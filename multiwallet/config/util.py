"""Configuration helpers shared by the commands."""

import os
from typing import Any, Mapping

from configargparse import ArgumentTypeError

from .logging import LoggingConfigurator


def common_config(settings: Mapping[str, Any]):
    """Configure logging from the `log.*` settings.

    `LOG_LEVEL` from the environment applies when no level is configured.
    """
    LoggingConfigurator.configure(
        settings.get("log.config"),
        settings.get("log.level") or os.getenv("LOG_LEVEL"),
        settings.get("log.file"),
    )


class BoundedInt:
    """Argument type accepting integers within optional bounds."""

    def __init__(self, min: int = None, max: int = None):
        """Initialize the BoundedInt parser."""
        self.min_val = min
        self.max_val = max

    def __call__(self, arg: str) -> int:
        """Parse and check the argument value."""
        try:
            val = int(arg)
        except (TypeError, ValueError):
            raise ArgumentTypeError(f"Invalid integer value: '{arg}'")
        if self.min_val is not None and val < self.min_val:
            raise ArgumentTypeError(f"Value must be at least {self.min_val}")
        if self.max_val is not None and val > self.max_val:
            raise ArgumentTypeError(f"Value must be at most {self.max_val}")
        return val

    def __repr__(self):
        """Name the type in argument errors."""
        return "integer"

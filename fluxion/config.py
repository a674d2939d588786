"""
Fluxion Configuration
=====================

Process-wide defaults for schedulers and the store's error hook.

The values live on a plain dataclass so hosts can override them either in code
(``CONFIG.frame_rate = 30``) or from the environment via ``Settings.from_env``.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Runtime defaults for the delivery pipeline."""

    frame_rate: float = 60.0
    tick_delay: float = 0.0
    log_consumer_errors: bool = True

    def __post_init__(self) -> None:
        if self.frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {self.frame_rate}")
        if self.tick_delay < 0:
            raise ValueError(f"tick_delay must not be negative, got {self.tick_delay}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from ``FLUXION_*`` environment variables.

        Unset variables keep their defaults. Malformed values raise ValueError.
        """
        if environ is None:
            environ = os.environ

        settings = cls()
        if "FLUXION_FRAME_RATE" in environ:
            settings.frame_rate = float(environ["FLUXION_FRAME_RATE"])
        if "FLUXION_TICK_DELAY" in environ:
            settings.tick_delay = float(environ["FLUXION_TICK_DELAY"])
        if "FLUXION_LOG_CONSUMER_ERRORS" in environ:
            settings.log_consumer_errors = _parse_bool(
                environ["FLUXION_LOG_CONSUMER_ERRORS"]
            )
        # Re-run validation on the overridden values
        settings.__post_init__()
        return settings


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Cannot interpret {raw!r} as a boolean")


CONFIG = Settings()

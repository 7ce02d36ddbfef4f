"""
qemucaps configuration.

A global Config instance that can be modified at runtime. Parsers copy the
values they need when constructed, so changing the config never affects a
parse that is already running.
"""

import os
from dataclasses import dataclass, fields

from qemucaps.models.enums import LogLevel

ENV_PREFIX = "QEMUCAPS_"


@dataclass
class CapsConfig:
    """Capability detection configuration."""

    # Parsing Limits
    MAX_HELP_OUTPUT_SIZE: int = 1024 * 64
    BANNER_SEARCH_LINES: int = 3

    # Probe Configuration
    QEMU_BINARY: str = "qemu-system-x86_64"
    PROBE_TIMEOUT_SECONDS: int = 10

    # Logging Configuration
    LOG_LEVEL: LogLevel = LogLevel.INFO

    def load_from_env(self, environ: dict[str, str] | None = None) -> "CapsConfig":
        """
        Apply QEMUCAPS_<FIELD> environment overrides in place.

        Values are converted to the type of the field's default.
        Invalid values raise ValueError naming the variable.
        """
        environ = os.environ if environ is None else environ
        for f in fields(self):
            raw = environ.get(ENV_PREFIX + f.name)
            if raw is None:
                continue
            current = getattr(self, f.name)
            try:
                if isinstance(current, LogLevel):
                    value = LogLevel(raw.lower())
                elif isinstance(current, int):
                    value = int(raw)
                else:
                    value = raw
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}{f.name}={raw!r}: {e}") from e
            setattr(self, f.name, value)
        return self


# Global config instance
config = CapsConfig()

"""
Enumeration types for qemucaps.

Configuration and output options shared by the library and the CLI.
"""

from enum import Enum


class LogLevel(str, Enum):
    """
    Logging verbosity levels.

    Levels (from most to least verbose):
        - FULL: Complete trace with detailed stack information
        - DEBUG: Debug messages and above
        - INFO: Informational messages and above
        - WARNING: Only warnings and errors
    """

    FULL = "full"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


class OutputFormat(str, Enum):
    """CLI output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"

"""
Logging helpers built on loguru.

Modules grab a bound logger with get_logger(__name__); the CLI calls
init_logger() once to install the stderr sink at the configured level.
"""

import sys
import traceback

from loguru import logger as _logger

from qemucaps.models.enums import LogLevel

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

# loguru has no "full" level; FULL is DEBUG with backtraces enabled
_LEVEL_MAP = {
    LogLevel.FULL: "DEBUG",
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "WARNING",
}

# The library stays silent until an application opts in
_logger.disable("qemucaps")


def get_logger(name: str):
    """Get a logger bound to a module name."""
    return _logger.bind(name=name)


def init_logger(level: LogLevel = LogLevel.INFO, sink=None) -> None:
    """Replace loguru's default handler with one at the given level."""
    level = LogLevel(level)
    _logger.remove()
    _logger.add(
        sink if sink is not None else sys.stderr,
        level=_LEVEL_MAP[level],
        format=_LOG_FORMAT,
        backtrace=level == LogLevel.FULL,
        diagnose=level == LogLevel.FULL,
    )
    _logger.enable("qemucaps")


def format_traceback(e: BaseException) -> str:
    """Format an exception with its traceback for debug logging."""
    return "".join(traceback.format_exception(type(e), e, e.__traceback__))

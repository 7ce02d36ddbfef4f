"""Shared fixtures for the qemucaps test suite."""

from dataclasses import fields
from pathlib import Path

import pytest

from qemucaps.config import config
from qemucaps.utils.logger import _logger

DATA_DIR = Path(__file__).parent / "data" / "qemuhelpdata"

# Captured output is never read past this many bytes
CAPTURE_LIMIT = 1024 * 64


def read_capture(name: str) -> bytes:
    with open(DATA_DIR / name, "rb") as f:
        return f.read(CAPTURE_LIMIT)


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture(autouse=True)
def restore_config():
    """Undo any change a test makes to the global config."""
    saved = {f.name: getattr(config, f.name) for f in fields(config)}
    yield config
    for name, value in saved.items():
        setattr(config, name, value)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks a test (or a CLI run) installed and silence the library again."""
    yield
    _logger.remove()
    _logger.disable("qemucaps")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "QEMUCAPS_MAX_HELP_OUTPUT_SIZE",
        "QEMUCAPS_BANNER_SEARCH_LINES",
        "QEMUCAPS_QEMU_BINARY",
        "QEMUCAPS_PROBE_TIMEOUT_SECONDS",
        "QEMUCAPS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

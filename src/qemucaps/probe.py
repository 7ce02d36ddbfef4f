"""
Emulator probing.

Runs the emulator binary to capture the text the parser works on. This is
the only module that starts processes; the parser never imports it.
"""

import shutil
import subprocess

from qemucaps.config import CapsConfig, config
from qemucaps.devices import scan_device_list
from qemucaps.exceptions import ProbeError
from qemucaps.flags import CapabilityFlag
from qemucaps.parser import CapabilityParser, ParseResult, apply_arch_quirks
from qemucaps.utils.logger import format_traceback, get_logger

logger = get_logger(__name__)

HELP_ARGS = ["-help"]

# Model list plus the properties of the devices whose options we care about.
# These releases print all of it on stderr.
DEVICE_ARGS = [
    "-device",
    "?",
    "-device",
    "pci-assign,?",
    "-device",
    "virtio-blk-pci,?",
    "-device",
    "virtio-net-pci,?",
]


def _run(binary: str, args: list[str], timeout: int) -> subprocess.CompletedProcess:
    path = shutil.which(binary)
    if path is None:
        raise ProbeError("binary not found", binary)
    try:
        return subprocess.run(
            [path, *args],
            capture_output=True,
            timeout=timeout,
            # Keep a stray -device from starting a guest
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as e:
        raise ProbeError(f"timed out after {timeout}s", binary) from e
    except OSError as e:
        logger.debug(format_traceback(e))
        raise ProbeError(str(e), binary) from e


def probe_help(binary: str | None = None, cfg: CapsConfig | None = None) -> bytes:
    """Capture `<binary> -help`, cut to MAX_HELP_OUTPUT_SIZE."""
    cfg = cfg or config
    binary = binary or cfg.QEMU_BINARY
    result = _run(binary, HELP_ARGS, cfg.PROBE_TIMEOUT_SECONDS)
    # Old releases exit 1 after printing help
    if result.returncode not in (0, 1):
        raise ProbeError(f"-help exited with status {result.returncode}", binary)
    return result.stdout[: cfg.MAX_HELP_OUTPUT_SIZE]


def probe_devices(binary: str | None = None, cfg: CapsConfig | None = None) -> bytes:
    """Capture the device model list, cut to MAX_HELP_OUTPUT_SIZE."""
    cfg = cfg or config
    binary = binary or cfg.QEMU_BINARY
    result = _run(binary, DEVICE_ARGS, cfg.PROBE_TIMEOUT_SECONDS)
    # The listing goes to stderr and the exit status is not meaningful
    return result.stderr[: cfg.MAX_HELP_OUTPUT_SIZE]


def probe_capabilities(
    binary: str | None = None,
    arch: str | None = None,
    cfg: CapsConfig | None = None,
) -> ParseResult:
    """
    Probe an installed emulator and parse its capabilities.

    The device list is only requested when the help text shows -device.

    Raises:
        ProbeError: The binary could not be run.
        VersionBannerError: Its help output had no usable version banner.
    """
    cfg = cfg or config
    binary = binary or cfg.QEMU_BINARY
    parser = CapabilityParser.from_config(cfg)

    help_text = probe_help(binary, cfg)
    result = parser.parse(help_text)
    if CapabilityFlag.DEVICE in result.flags:
        logger.debug(f"{binary} supports -device, probing device list")
        flags = scan_device_list(
            probe_devices(binary, cfg), result.flags, parser.max_size
        )
        result = ParseResult(version=result.version, kvm=result.kvm, flags=flags)

    logger.info(
        f"{binary}: version {result.version_string}, "
        f"{len(result.flags)} capabilities"
    )
    return apply_arch_quirks(result, arch)

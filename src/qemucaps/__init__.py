"""
QEMU capability detection.

Parses the help and device-list output of a QEMU binary into:
- a comparable version number
- KVM build information
- a set of capability flags

Probing an installed binary is available separately in qemucaps.probe.
"""

from qemucaps.exceptions import (
    CapabilityError,
    MalformedVersionBanner,
    MissingVersionBanner,
    ProbeError,
    VersionBannerError,
)
from qemucaps.flags import CapabilityFlag, FlagSet
from qemucaps.parser import (
    CapabilityParser,
    ParseResult,
    apply_arch_quirks,
    parse_capabilities,
)
from qemucaps.version import (
    BannerInfo,
    KvmInfo,
    decode_version,
    encode_version,
    extract_banner,
    format_version,
)

__version__ = "0.1.0"

__all__ = [
    # Parser
    "CapabilityParser",
    "ParseResult",
    "parse_capabilities",
    "apply_arch_quirks",
    # Flags
    "CapabilityFlag",
    "FlagSet",
    # Version
    "BannerInfo",
    "KvmInfo",
    "encode_version",
    "decode_version",
    "format_version",
    "extract_banner",
    # Exceptions
    "CapabilityError",
    "VersionBannerError",
    "MissingVersionBanner",
    "MalformedVersionBanner",
    "ProbeError",
]

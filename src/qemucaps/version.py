"""
Emulator version banner parsing.

The first lines of `qemu -help` announce the release, e.g.:

    QEMU PC emulator version 0.9.1 (kvm-74), Copyright (c) 2003-2008 ...
    QEMU PC emulator version 0.12.1 (qemu-kvm-0.12.1.2), Copyright ...
    QEMU emulator version 0.12.1, Copyright (c) 2003-2008 Fabrice Bellard

Versions are encoded as major * 1,000,000 + minor * 1,000 + micro so that
plain integer comparison orders releases correctly.
"""

import re
from dataclasses import dataclass

from qemucaps.exceptions import MalformedVersionBanner, MissingVersionBanner
from qemucaps.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EMULATOR = "QEMU"
DEFAULT_SEARCH_LINES = 3

_COMPONENT_LIMIT = 1000

_SIGNATURE_RE = re.compile(r"^(?P<emulator>\S+)(?: PC)? emulator version\b")
_NUMBER_RE = re.compile(
    r"\s*(?P<major>\d{1,9})\.(?P<minor>\d{1,9})(?:\.(?P<micro>\d{1,9}))?(?!\d)"
)
_KVM_TAG = "(kvm-"
_QEMU_KVM_TAG = "(qemu-kvm-"
_KVM_NUMBER_RE = re.compile(r"\d{1,9}(?!\d)")


@dataclass(frozen=True)
class KvmInfo:
    """KVM build information; kvm_version is 0 unless is_kvm."""

    is_kvm: bool = False
    kvm_version: int = 0


@dataclass(frozen=True)
class BannerInfo:
    """Everything the banner line tells us."""

    emulator: str
    version: int
    kvm: KvmInfo

    @property
    def major(self) -> int:
        return decode_version(self.version)[0]

    @property
    def minor(self) -> int:
        return decode_version(self.version)[1]

    @property
    def micro(self) -> int:
        return decode_version(self.version)[2]

    @property
    def version_string(self) -> str:
        return format_version(self.version)


def encode_version(major: int, minor: int, micro: int = 0) -> int:
    """
    Encode a release as a single comparable integer.

    Each component must be in 0..999, otherwise neighbouring components
    would overlap and ordering would break.

    >>> encode_version(0, 12, 1)
    12001
    """
    for label, value in (("major", major), ("minor", minor), ("micro", micro)):
        if not 0 <= value < _COMPONENT_LIMIT:
            raise ValueError(f"{label} version component out of range: {value}")
    return (major * _COMPONENT_LIMIT + minor) * _COMPONENT_LIMIT + micro


def decode_version(version: int) -> tuple[int, int, int]:
    """Inverse of encode_version()."""
    if version < 0:
        raise ValueError(f"Encoded version must be non-negative: {version}")
    rest, micro = divmod(version, _COMPONENT_LIMIT)
    major, minor = divmod(rest, _COMPONENT_LIMIT)
    return major, minor, micro


def format_version(version: int) -> str:
    """Render an encoded version as 'major.minor.micro'."""
    return "%d.%d.%d" % decode_version(version)


def _first_line(text: str) -> str:
    return text.lstrip().split("\n", 1)[0].strip()


def _find_banner_line(text: str, search_lines: int) -> tuple[str, re.Match] | None:
    seen = 0
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        match = _SIGNATURE_RE.match(line)
        if match:
            return line, match
        seen += 1
        if seen >= search_lines:
            break
    return None


def _parse_kvm_tag(rest: str, emulator: str, line: str) -> KvmInfo:
    rest = rest.lstrip()
    if rest.startswith(_QEMU_KVM_TAG):
        # qemu-kvm reports its own release here, not a kvm sub-version
        return KvmInfo(is_kvm=True, kvm_version=0)
    if rest.startswith(_KVM_TAG):
        number = _KVM_NUMBER_RE.match(rest, len(_KVM_TAG))
        if number is None:
            raise MalformedVersionBanner(emulator, line, "kvm tag has no number")
        return KvmInfo(is_kvm=True, kvm_version=int(number.group()))
    return KvmInfo()


def extract_banner(text: str, search_lines: int = DEFAULT_SEARCH_LINES) -> BannerInfo:
    """
    Locate and parse the version banner.

    The banner must be one of the first `search_lines` non-blank lines.

    Raises:
        MissingVersionBanner: No banner-shaped line was found.
        MalformedVersionBanner: The banner's numbers could not be parsed.
    """
    found = _find_banner_line(text, search_lines)
    if found is None:
        line = _first_line(text)
        raise MissingVersionBanner(DEFAULT_EMULATOR, line)

    line, signature = found
    emulator = signature.group("emulator")
    rest = line[signature.end() :]

    numbers = _NUMBER_RE.match(rest)
    if numbers is None:
        raise MalformedVersionBanner(emulator, line, "no version number")
    rest = rest[numbers.end() :]
    if numbers.group("micro") is None and rest.startswith("."):
        # "0.12." is a truncated version, not a two-part one
        raise MalformedVersionBanner(emulator, line, "truncated version number")

    major = int(numbers.group("major"))
    minor = int(numbers.group("minor"))
    micro = int(numbers.group("micro") or 0)
    try:
        version = encode_version(major, minor, micro)
    except ValueError as e:
        raise MalformedVersionBanner(emulator, line, str(e)) from e

    kvm = _parse_kvm_tag(rest, emulator, line)

    logger.debug(
        f"Parsed {emulator} version {format_version(version)} "
        f"(is_kvm={kvm.is_kvm}, kvm_version={kvm.kvm_version})"
    )
    return BannerInfo(emulator=emulator, version=version, kvm=kvm)

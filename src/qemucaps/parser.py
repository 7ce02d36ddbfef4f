"""
Capability parser entry point.

Turns the captured help text (and, when -device exists, the device list) of
an emulator binary into its version, KVM build info and capability flags.
Everything here is a pure function of its input text.
"""

from dataclasses import dataclass

from qemucaps.config import CapsConfig, config
from qemucaps.devices import scan_device_list
from qemucaps.exceptions import VersionBannerError
from qemucaps.flags import CapabilityFlag, FlagSet
from qemucaps.scanner import DEFAULT_MAX_SIZE, ParseContext, bound_text, scan_context
from qemucaps.utils.logger import get_logger
from qemucaps.version import (
    DEFAULT_SEARCH_LINES,
    BannerInfo,
    KvmInfo,
    encode_version,
    extract_banner,
    format_version,
)

logger = get_logger(__name__)

# Architectures whose PCI bus is named pci.0 from 0.13 onwards
_MULTIBUS_ARCHES = frozenset({"i686", "x86_64"})


@dataclass(frozen=True)
class ParseResult:
    """Version, KVM info and capabilities of one emulator binary."""

    version: int
    kvm: KvmInfo
    flags: FlagSet

    @property
    def is_kvm(self) -> bool:
        return self.kvm.is_kvm

    @property
    def kvm_version(self) -> int:
        return self.kvm.kvm_version

    @property
    def version_string(self) -> str:
        return format_version(self.version)

    def has(self, flag: CapabilityFlag) -> bool:
        return flag in self.flags


class CapabilityParser:
    """
    Parser bound to a set of limits.

    Limits are copied from the config at construction time.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        banner_search_lines: int = DEFAULT_SEARCH_LINES,
    ):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive: {max_size}")
        self.max_size = max_size
        self.banner_search_lines = banner_search_lines

    @classmethod
    def from_config(cls, cfg: CapsConfig | None = None) -> "CapabilityParser":
        cfg = cfg or config
        return cls(
            max_size=cfg.MAX_HELP_OUTPUT_SIZE,
            banner_search_lines=cfg.BANNER_SEARCH_LINES,
        )

    def extract_banner(self, help_text: str | bytes) -> BannerInfo:
        text = bound_text(help_text, self.max_size)
        try:
            return extract_banner(text, self.banner_search_lines)
        except VersionBannerError as e:
            logger.warning(str(e))
            raise

    def parse(
        self,
        help_text: str | bytes,
        device_list_text: str | bytes | None = None,
    ) -> ParseResult:
        """
        Parse help output and, optionally, the device list.

        The device list is only consulted when the help text shows -device.
        If -device is present but no device list was given, the result
        simply lacks the device-conditioned capabilities.

        Raises:
            MissingVersionBanner: No version banner in the help text.
            MalformedVersionBanner: The banner's version could not be parsed.
        """
        banner = self.extract_banner(help_text)
        ctx = ParseContext.build(help_text, banner, self.max_size)
        flags = scan_context(ctx)

        if CapabilityFlag.DEVICE in flags:
            if device_list_text is None:
                logger.debug("-device supported but no device list supplied")
            else:
                flags = scan_device_list(device_list_text, flags, self.max_size)

        logger.debug(
            f"{banner.emulator} {banner.version_string}: "
            f"{len(flags)} capabilities, mask {flags.mask:#x}"
        )
        return ParseResult(version=banner.version, kvm=banner.kvm, flags=flags)


def parse_capabilities(
    help_text: str | bytes,
    device_list_text: str | bytes | None = None,
    *,
    max_size: int | None = None,
) -> ParseResult:
    """Parse with limits taken from the global config unless given."""
    parser = CapabilityParser.from_config()
    if max_size is not None:
        parser = CapabilityParser(max_size, parser.banner_search_lines)
    return parser.parse(help_text, device_list_text)


def apply_arch_quirks(result: ParseResult, arch: str | None) -> ParseResult:
    """
    Add capabilities that depend on the target architecture.

    These are not visible in the help text, so they are kept out of parse().
    """
    if arch in _MULTIBUS_ARCHES and result.version >= encode_version(0, 13, 0):
        return ParseResult(
            version=result.version,
            kvm=result.kvm,
            flags=result.flags.with_flags(CapabilityFlag.PCI_MULTIBUS),
        )
    return result

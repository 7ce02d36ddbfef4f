"""
Help text capability scanning.

Each capability is detected by one independent rule:

- textual rules look for an option, or an option qualifier, in the help text
- version rules fire for every release at or past a threshold, for features
  the help text never advertised on their own

All rules are evaluated and their results unioned. No rule can clear a bit
another rule set, so evaluation order does not matter.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from qemucaps.flags import CapabilityFlag as F
from qemucaps.flags import FlagSet
from qemucaps.utils.logger import get_logger
from qemucaps.version import BannerInfo, encode_version

logger = get_logger(__name__)

DEFAULT_MAX_SIZE = 1024 * 64

V0_9 = encode_version(0, 9, 0)
V0_10 = encode_version(0, 10, 0)
V0_12 = encode_version(0, 12, 0)
V0_13 = encode_version(0, 13, 0)


@dataclass(frozen=True)
class ParseContext:
    """
    Per-invocation input to the rules.

    Built once per parse from the caller's text; `text` is already cut to the
    size limit so no rule ever sees more than that.
    """

    text: str
    banner: BannerInfo

    @classmethod
    def build(
        cls, text: str | bytes, banner: BannerInfo, max_size: int = DEFAULT_MAX_SIZE
    ) -> "ParseContext":
        return cls(text=bound_text(text, max_size), banner=banner)

    @property
    def version(self) -> int:
        return self.banner.version

    @property
    def is_kvm(self) -> bool:
        return self.banner.kvm.is_kvm

    @property
    def kvm_version(self) -> int:
        return self.banner.kvm.kvm_version

    def has(self, *markers: str) -> bool:
        """True if every marker appears somewhere in the text."""
        return all(marker in self.text for marker in markers)

    def vga_option(self) -> str | None:
        """
        Text from the -vga option onwards, or None if there is no -vga.

        Old releases only had -std-vga, which also contains "-vga".
        """
        if "-std-vga" in self.text:
            return None
        start = self.text.find("-vga")
        if start < 0:
            return None
        return self.text[start:]


def bound_text(text: str | bytes, max_size: int = DEFAULT_MAX_SIZE) -> str:
    """Decode captured output and drop anything past max_size."""
    if isinstance(text, bytes):
        text = text[:max_size].decode("utf-8", errors="replace")
    return text[:max_size]


class RuleKind(str, Enum):
    TEXT = "text"
    VERSION = "version"


@dataclass(frozen=True)
class HelpRule:
    """Sets `flag` when `check` holds for the parse context."""

    flag: F
    kind: RuleKind
    check: Callable[[ParseContext], bool]
    description: str


def _text(flag: F, *markers: str) -> HelpRule:
    return HelpRule(
        flag,
        RuleKind.TEXT,
        lambda ctx: ctx.has(*markers),
        " and ".join(repr(m) for m in markers),
    )


def _since(flag: F, version: int) -> HelpRule:
    return HelpRule(
        flag,
        RuleKind.VERSION,
        lambda ctx: ctx.version >= version,
        f"version >= {version}",
    )


def _drive_cache_v2(ctx: ParseContext) -> bool:
    # cache=on|off is the old boolean syntax
    return ctx.has("-drive", "cache=") and not ctx.has("cache=on|off")


def _domid(ctx: ParseContext) -> bool:
    return ctx.has("-domid") and not ctx.has("-xen-domid")


def _vga(ctx: ParseContext) -> bool:
    return ctx.vga_option() is not None


def _vga_qxl(ctx: ParseContext) -> bool:
    option = ctx.vga_option()
    return option is not None and "|qxl" in option


def _vga_none(ctx: ParseContext) -> bool:
    option = ctx.vga_option()
    if option is None:
        return False
    return "|none" in option.split("\n", 1)[0]


def _vnet_hdr(ctx: ParseContext) -> bool:
    return ctx.is_kvm and (ctx.version >= V0_10 or ctx.kvm_version >= 74)


def _vnet_host(ctx: ParseContext) -> bool:
    return ctx.is_kvm and ctx.has(",vhost=")


# -incoming tcp    (kvm >= 79, qemu >= 0.10.0)
# -incoming exec   (kvm >= 80, qemu >= 0.10.0)
# -incoming stdio  (all earlier kvm)
# kvm had a 'tcp' mode before kvm-79 but it blocked the monitor while
# waiting for data, so it is not reported.


def _migrate_tcp(ctx: ParseContext) -> bool:
    return ctx.version >= V0_10 or ctx.kvm_version >= 79


def _migrate_exec(ctx: ParseContext) -> bool:
    return ctx.version >= V0_10 or ctx.kvm_version >= 80


def _migrate_kvm_stdio(ctx: ParseContext) -> bool:
    return ctx.version < V0_10 and 0 < ctx.kvm_version < 79


def _netdev(ctx: ParseContext) -> bool:
    # 0.12 has -netdev but not the netdev_add/netdev_del monitor commands
    # needed for hotplug
    return ctx.version >= V0_13 and ctx.has("-netdev")


def _drive_readonly(ctx: ParseContext) -> bool:
    # -device shipped with readonly= support but did not advertise it
    return ctx.has("-drive", "readonly=") or ctx.has("-device")


HELP_RULES: tuple[HelpRule, ...] = (
    _text(F.KQEMU, "-no-kqemu"),
    _text(F.ENABLE_KQEMU, "-enable-kqemu"),
    _text(F.KVM, "-no-kvm"),
    _text(F.ENABLE_KVM, "-enable-kvm"),
    _text(F.NO_REBOOT, "-no-reboot"),
    _text(F.NAME, "-name"),
    _text(F.NAME_PROCESS, "-name", ",process="),
    _text(F.UUID, "-uuid"),
    _text(F.XEN_DOMID, "-xen-domid"),
    HelpRule(F.DOMID, RuleKind.TEXT, _domid, "'-domid' without '-xen-domid'"),
    _text(F.DRIVE, "-drive"),
    HelpRule(
        F.DRIVE_CACHE_V2,
        RuleKind.TEXT,
        _drive_cache_v2,
        "'-drive' and 'cache=' without 'cache=on|off'",
    ),
    _text(F.DRIVE_FORMAT, "-drive", "format="),
    HelpRule(
        F.DRIVE_READONLY,
        RuleKind.TEXT,
        _drive_readonly,
        "'-drive' and 'readonly=', or '-device'",
    ),
    _text(F.DRIVE_AIO, "-drive", "aio=threads|native"),
    HelpRule(F.VGA, RuleKind.TEXT, _vga, "'-vga' without '-std-vga'"),
    HelpRule(F.VGA_QXL, RuleKind.TEXT, _vga_qxl, "'|qxl' after '-vga'"),
    HelpRule(F.VGA_NONE, RuleKind.TEXT, _vga_none, "'|none' on the '-vga' line"),
    _text(F.SPICE, "-spice"),
    _text(F.DRIVE_BOOT, "boot=on"),
    _text(F.DRIVE_SERIAL, "serial=s"),
    _text(F.PCIDEVICE, "-pcidevice"),
    _text(F.MEM_PATH, "-mem-path"),
    _text(F.CHARDEV, "-chardev"),
    _text(F.CHARDEV_SPICEVMC, "-chardev", "-chardev spicevmc"),
    _text(F.BALLOON, "-balloon"),
    _text(F.DEVICE, "-device"),
    _text(F.NODEFCONFIG, "-nodefconfig"),
    # The trailing space keeps -rtc-td-hack from matching
    _text(F.RTC, "-rtc "),
    _text(F.RTC_TD_HACK, "-rtc-td-hack"),
    _text(F.NO_HPET, "-no-hpet"),
    _text(F.NO_KVM_PIT, "-no-kvm-pit-reinjection"),
    _text(F.TDF, "-tdf"),
    _text(F.NESTING, "-enable-nesting"),
    _text(F.BOOT_MENU, ",menu=on"),
    _text(F.FSDEV, "-fsdev"),
    _text(F.SMBIOS_TYPE, "-smbios type"),
    _text(F.SDL, "-sdl"),
    _text(F.SMP_TOPOLOGY, "cores=", "threads=", "sockets="),
    HelpRule(F.NETDEV, RuleKind.VERSION, _netdev, "'-netdev' and version >= 13000"),
    HelpRule(F.VNET_HDR, RuleKind.VERSION, _vnet_hdr, "kvm and (>= 10000 or kvm-74)"),
    HelpRule(F.VNET_HOST, RuleKind.TEXT, _vnet_host, "kvm and ',vhost='"),
    _since(F.VNC_COLON, V0_9),
    _since(F.QEMU_0_10, V0_10),
    HelpRule(F.MIGRATE_QEMU_TCP, RuleKind.VERSION, _migrate_tcp, ">= 10000 or kvm-79"),
    HelpRule(F.MIGRATE_QEMU_EXEC, RuleKind.VERSION, _migrate_exec, ">= 10000 or kvm-80"),
    HelpRule(
        F.MIGRATE_KVM_STDIO,
        RuleKind.VERSION,
        _migrate_kvm_stdio,
        "< 10000 and kvm-1 .. kvm-78",
    ),
    _since(F.MIGRATE_QEMU_UNIX, V0_12),
    _since(F.MIGRATE_QEMU_FD, V0_12),
    # JSON mode existed in 0.12.0 but was too incomplete to use
    _since(F.MONITOR_JSON, V0_13),
)


def scan_context(ctx: ParseContext, rules: tuple[HelpRule, ...] = HELP_RULES) -> FlagSet:
    """Evaluate every rule against the context and union the results."""
    return FlagSet(rule.flag for rule in rules if rule.check(ctx))


def scan_help_text(
    text: str | bytes, banner: BannerInfo, max_size: int = DEFAULT_MAX_SIZE
) -> FlagSet:
    """Detect capabilities advertised by (or implied for) a help text."""
    flags = scan_context(ParseContext.build(text, banner, max_size))
    logger.debug(
        f"Detected {len(flags)} capabilities for {banner.emulator} "
        f"{banner.version_string}"
    )
    return flags

"""
Capability flags and the fixed-width set that holds them.

Every capability has a stable bit position. Positions are part of the
compatibility contract: recorded masks from older releases must keep
decoding to the same capabilities, so members are only ever appended.
"""

from collections.abc import Iterable, Iterator
from enum import IntEnum


class CapabilityFlag(IntEnum):
    """
    Capabilities detectable from emulator help and device-list output.

    The value of each member is its bit position in a FlagSet.
    """

    KQEMU = 0  # Whether KQEMU is compiled in
    VNC_COLON = 1  # VNC takes address + display instead of just a port
    NO_REBOOT = 2  # -no-reboot
    DRIVE = 3  # -drive
    DRIVE_BOOT = 4  # -drive boot=on
    NAME = 5  # -name
    UUID = 6  # -uuid
    DOMID = 7  # Xenner only, -domid
    VNET_HDR = 8
    MIGRATE_KVM_STDIO = 9  # Original KVM migration, stdio only
    MIGRATE_QEMU_TCP = 10  # -incoming tcp:
    MIGRATE_QEMU_EXEC = 11  # -incoming exec:
    DRIVE_CACHE_V2 = 12  # cache= takes none|writeback|writethrough
    KVM = 13  # Whether KVM is compiled in
    DRIVE_FORMAT = 14  # -drive format=
    VGA = 15  # -vga

    # Everything that arrived with the 0.10 series.
    QEMU_0_10 = 16
    NET_NAME = 16  # -net ...,name=str
    HOST_NET_ADD = 16  # host_net_add monitor command

    PCIDEVICE = 17  # -pcidevice, qemu-kvm only
    MEM_PATH = 18  # -mem-path
    DRIVE_SERIAL = 19  # -drive serial=
    XEN_DOMID = 20  # -xen-domid
    MIGRATE_QEMU_UNIX = 21  # -incoming unix:
    CHARDEV = 22  # -chardev
    ENABLE_KVM = 23  # -enable-kvm
    MONITOR_JSON = 24  # QMP monitor
    BALLOON = 25  # -balloon
    DEVICE = 26  # -device
    SDL = 27  # -sdl
    SMP_TOPOLOGY = 28  # -smp sockets=,cores=,threads=
    NETDEV = 29  # -netdev plus netdev_add/netdev_del
    RTC = 30  # -rtc
    VNET_HOST = 31  # vhost-net
    RTC_TD_HACK = 32  # -rtc-td-hack
    NO_HPET = 33  # -no-hpet
    NO_KVM_PIT = 34  # -no-kvm-pit-reinjection
    TDF = 35  # -tdf
    PCI_CONFIGFD = 36  # pci-assign.configfd
    NODEFCONFIG = 37  # -nodefconfig
    BOOT_MENU = 38  # -boot menu=on
    ENABLE_KQEMU = 39  # -enable-kqemu
    FSDEV = 40  # -fsdev
    NESTING = 41  # -enable-nesting
    NAME_PROCESS = 42  # -name process=
    DRIVE_READONLY = 43  # -drive readonly=on|off
    SMBIOS_TYPE = 44  # -smbios type=
    VGA_QXL = 45  # -vga qxl
    SPICE = 46  # -spice
    VGA_NONE = 47  # -vga none
    MIGRATE_QEMU_FD = 48  # -incoming fd:
    BOOTINDEX = 49  # -device ...,bootindex=
    HDA_DUPLEX = 50  # -device hda-duplex
    DRIVE_AIO = 51  # -drive aio=
    PCI_MULTIBUS = 52  # bus=pci.0 instead of bus=pci
    PCI_BOOTINDEX = 53  # pci-assign.bootindex
    CCID_EMULATED = 54  # -device ccid-card-emulated
    CCID_PASSTHRU = 55  # -device ccid-card-passthru
    CHARDEV_SPICEVMC = 56  # -chardev spicevmc
    DEVICE_SPICEVMC = 57  # -device spicevmc
    VIRTIO_TX_ALG = 58  # -device virtio-net-pci,tx=


class FlagSet:
    """
    Immutable set of CapabilityFlag values backed by a 64-bit mask.

    Only named-flag operations are offered; the raw mask is exposed read-only
    for reporting and for loading recorded masks via from_mask().
    """

    WIDTH = 64

    __slots__ = ("_bits",)

    def __init__(self, flags: Iterable[CapabilityFlag] = ()):
        bits = 0
        for flag in flags:
            bits |= 1 << CapabilityFlag(flag).value
        self._bits = bits

    @classmethod
    def from_mask(cls, mask: int) -> "FlagSet":
        """Build a FlagSet from a recorded mask, rejecting unassigned bits."""
        if mask < 0 or mask >= 1 << cls.WIDTH:
            raise ValueError(f"Mask {mask:#x} does not fit in {cls.WIDTH} bits")
        known = _known_mask()
        if mask & ~known:
            raise ValueError(f"Mask {mask:#x} has unassigned bits {mask & ~known:#x}")
        result = cls()
        result._bits = mask
        return result

    @property
    def mask(self) -> int:
        return self._bits

    def with_flags(self, *flags: CapabilityFlag) -> "FlagSet":
        """Return a copy with the given flags set."""
        return self | FlagSet(flags)

    def __contains__(self, flag: object) -> bool:
        if not isinstance(flag, CapabilityFlag):
            return False
        return bool(self._bits & (1 << flag.value))

    def __or__(self, other: "FlagSet") -> "FlagSet":
        if not isinstance(other, FlagSet):
            return NotImplemented
        result = FlagSet()
        result._bits = self._bits | other._bits
        return result

    def __iter__(self) -> Iterator[CapabilityFlag]:
        # Iterating the enum skips aliases, so each bit is yielded once
        for flag in CapabilityFlag:
            if self._bits & (1 << flag.value):
                yield flag

    def __len__(self) -> int:
        return bin(self._bits).count("1")

    def __bool__(self) -> bool:
        return self._bits != 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlagSet):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self) -> int:
        return hash(self._bits)

    def __repr__(self) -> str:
        names = "|".join(flag.name for flag in self)
        return f"FlagSet({names or '0'})"


def _known_mask() -> int:
    bits = 0
    for flag in CapabilityFlag:
        bits |= 1 << flag.value
    return bits


EMPTY = FlagSet()

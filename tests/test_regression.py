"""
Regression table of captured help output from historical releases.

Each entry names a capture under data/qemuhelpdata/ and the exact version,
KVM info and capability set it must produce. A "<name>-device" capture is
fed in as the device list whenever the expected set includes DEVICE.
"""

from dataclasses import dataclass

import pytest

from qemucaps.exceptions import MalformedVersionBanner, MissingVersionBanner
from qemucaps.flags import CapabilityFlag as F
from qemucaps.flags import FlagSet
from qemucaps.parser import parse_capabilities

from conftest import CAPTURE_LIMIT, read_capture


@dataclass(frozen=True)
class Release:
    name: str
    flags: frozenset
    version: int
    is_kvm: bool
    kvm_version: int


RELEASES = [
    Release(
        "qemu-0.9.1",
        frozenset({F.KQEMU, F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.NAME}),
        9001,
        False,
        0,
    ),
    Release(
        "kvm-74",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.VNET_HDR,
            F.MIGRATE_KVM_STDIO, F.KVM, F.DRIVE_FORMAT, F.MEM_PATH, F.TDF,
        }),
        9001,
        True,
        74,
    ),
    Release(
        "kvm-83-rhel56",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.VGA, F.PCIDEVICE, F.MEM_PATH,
            F.BALLOON, F.RTC_TD_HACK, F.NO_HPET, F.NO_KVM_PIT, F.TDF,
            F.DRIVE_READONLY, F.SMBIOS_TYPE, F.SPICE,
        }),
        9001,
        True,
        83,
    ),
    Release(
        "qemu-0.10.5",
        frozenset({
            F.KQEMU, F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.NAME, F.UUID,
            F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.VGA, F.QEMU_0_10, F.ENABLE_KVM,
            F.SDL, F.RTC_TD_HACK, F.NO_HPET, F.VGA_NONE,
        }),
        10005,
        False,
        0,
    ),
    Release(
        "qemu-kvm-0.10.5",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.VGA, F.QEMU_0_10, F.PCIDEVICE,
            F.MEM_PATH, F.SDL, F.RTC_TD_HACK, F.NO_HPET, F.NO_KVM_PIT, F.TDF,
            F.NESTING, F.VGA_NONE,
        }),
        10005,
        True,
        0,
    ),
    Release(
        "kvm-86",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.VGA, F.QEMU_0_10, F.PCIDEVICE,
            F.SDL, F.RTC_TD_HACK, F.NO_HPET, F.NO_KVM_PIT, F.TDF, F.NESTING,
            F.SMBIOS_TYPE, F.VGA_NONE,
        }),
        10050,
        True,
        0,
    ),
    Release(
        "qemu-kvm-0.11.0-rc2",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.VGA, F.QEMU_0_10, F.PCIDEVICE,
            F.MEM_PATH, F.ENABLE_KVM, F.BALLOON, F.SDL, F.RTC_TD_HACK, F.NO_HPET,
            F.NO_KVM_PIT, F.TDF, F.BOOT_MENU, F.NESTING, F.NAME_PROCESS,
            F.SMBIOS_TYPE, F.VGA_NONE,
        }),
        10092,
        True,
        0,
    ),
    Release(
        "qemu-0.12.1",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.NAME, F.UUID, F.MIGRATE_QEMU_TCP,
            F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2, F.DRIVE_FORMAT, F.DRIVE_SERIAL,
            F.DRIVE_READONLY, F.VGA, F.QEMU_0_10, F.ENABLE_KVM, F.SDL, F.XEN_DOMID,
            F.MIGRATE_QEMU_UNIX, F.CHARDEV, F.BALLOON, F.DEVICE, F.SMP_TOPOLOGY,
            F.RTC, F.NO_HPET, F.BOOT_MENU, F.NAME_PROCESS, F.SMBIOS_TYPE,
            F.VGA_NONE, F.MIGRATE_QEMU_FD, F.DRIVE_AIO,
        }),
        12001,
        False,
        0,
    ),
    Release(
        "qemu-kvm-0.12.1.2-rhel60",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.DRIVE_READONLY, F.VGA,
            F.QEMU_0_10, F.PCIDEVICE, F.MEM_PATH, F.MIGRATE_QEMU_UNIX, F.CHARDEV,
            F.ENABLE_KVM, F.BALLOON, F.DEVICE, F.SMP_TOPOLOGY, F.RTC, F.VNET_HOST,
            F.NO_KVM_PIT, F.TDF, F.PCI_CONFIGFD, F.NODEFCONFIG, F.BOOT_MENU,
            F.NESTING, F.NAME_PROCESS, F.SMBIOS_TYPE, F.VGA_QXL, F.SPICE,
            F.VGA_NONE, F.MIGRATE_QEMU_FD, F.DRIVE_AIO, F.DEVICE_SPICEVMC,
        }),
        12001,
        True,
        0,
    ),
    Release(
        "qemu-kvm-0.12.3",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.DRIVE_READONLY, F.VGA,
            F.QEMU_0_10, F.PCIDEVICE, F.MEM_PATH, F.SDL, F.MIGRATE_QEMU_UNIX,
            F.CHARDEV, F.BALLOON, F.DEVICE, F.SMP_TOPOLOGY, F.RTC, F.VNET_HOST,
            F.NO_HPET, F.NO_KVM_PIT, F.TDF, F.BOOT_MENU, F.NESTING,
            F.NAME_PROCESS, F.SMBIOS_TYPE, F.VGA_NONE, F.MIGRATE_QEMU_FD,
            F.DRIVE_AIO,
        }),
        12003,
        True,
        0,
    ),
    Release(
        "qemu-kvm-0.13.0",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.DRIVE_BOOT, F.NAME, F.UUID,
            F.VNET_HDR, F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2,
            F.KVM, F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.XEN_DOMID, F.DRIVE_READONLY,
            F.VGA, F.QEMU_0_10, F.PCIDEVICE, F.MEM_PATH, F.SDL,
            F.MIGRATE_QEMU_UNIX, F.CHARDEV, F.ENABLE_KVM, F.MONITOR_JSON,
            F.BALLOON, F.DEVICE, F.SMP_TOPOLOGY, F.NETDEV, F.RTC, F.VNET_HOST,
            F.NO_HPET, F.NO_KVM_PIT, F.TDF, F.PCI_CONFIGFD, F.NODEFCONFIG,
            F.BOOT_MENU, F.FSDEV, F.NESTING, F.NAME_PROCESS, F.SMBIOS_TYPE,
            F.SPICE, F.VGA_NONE, F.MIGRATE_QEMU_FD, F.DRIVE_AIO,
            F.DEVICE_SPICEVMC,
        }),
        13000,
        True,
        0,
    ),
    Release(
        "qemu-kvm-0.12.1.2-rhel61",
        frozenset({
            F.VNC_COLON, F.NO_REBOOT, F.DRIVE, F.NAME, F.UUID, F.VNET_HDR,
            F.MIGRATE_QEMU_TCP, F.MIGRATE_QEMU_EXEC, F.DRIVE_CACHE_V2, F.KVM,
            F.DRIVE_FORMAT, F.DRIVE_SERIAL, F.DRIVE_READONLY, F.VGA, F.QEMU_0_10,
            F.PCIDEVICE, F.MEM_PATH, F.MIGRATE_QEMU_UNIX, F.CHARDEV, F.ENABLE_KVM,
            F.BALLOON, F.DEVICE, F.SMP_TOPOLOGY, F.RTC, F.VNET_HOST, F.NO_KVM_PIT,
            F.TDF, F.PCI_CONFIGFD, F.NODEFCONFIG, F.BOOT_MENU, F.NESTING,
            F.NAME_PROCESS, F.SMBIOS_TYPE, F.VGA_QXL, F.SPICE, F.VGA_NONE,
            F.MIGRATE_QEMU_FD, F.HDA_DUPLEX, F.DRIVE_AIO, F.CCID_PASSTHRU,
            F.CHARDEV_SPICEVMC, F.VIRTIO_TX_ALG,
        }),
        12001,
        True,
        0,
    ),
]


def _describe(flags) -> str:
    return ", ".join(sorted(flag.name for flag in flags)) or "none"


@pytest.mark.parametrize("release", RELEASES, ids=lambda r: r.name)
def test_release(release):
    help_text = read_capture(release.name)
    device_text = None
    if F.DEVICE in release.flags:
        device_text = read_capture(release.name + "-device")

    result = parse_capabilities(help_text, device_text, max_size=CAPTURE_LIMIT)

    got = set(result.flags)
    extra = got - release.flags
    missing = release.flags - got
    assert not extra and not missing, (
        f"{release.name}: extra [{_describe(extra)}], missing [{_describe(missing)}]"
    )
    assert result.flags == FlagSet(release.flags)
    assert result.version == release.version
    assert result.is_kvm is release.is_kvm
    assert result.kvm_version == release.kvm_version


def test_versions_come_from_help_text_alone():
    versions = [parse_capabilities(read_capture(r.name)).version for r in RELEASES]
    assert versions == [r.version for r in RELEASES]


def test_truncated_version():
    with pytest.raises(MalformedVersionBanner):
        parse_capabilities(read_capture("qemu-truncated-version"))


def test_truncated_banner():
    with pytest.raises(MissingVersionBanner):
        parse_capabilities(read_capture("qemu-truncated-banner"))

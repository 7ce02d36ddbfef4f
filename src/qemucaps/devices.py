"""
Device model list parsing.

Releases with -device can enumerate their device models and the properties
of individual models. The probe asks for both in one run:

    name "virtio-net-pci", bus PCI
    name "spicevmc", bus virtio-serial-bus
    pci-assign.configfd=string
    virtio-net-pci.tx=string

Model lines and property lines are collected separately; capability rules
then test for a model name or a "<model>.<property>" pair.
"""

import re
from dataclasses import dataclass, field

from qemucaps.flags import CapabilityFlag as F
from qemucaps.flags import FlagSet
from qemucaps.scanner import DEFAULT_MAX_SIZE, bound_text
from qemucaps.utils.logger import get_logger

logger = get_logger(__name__)

_MODEL_RE = re.compile(r'^name\s+"(?P<model>[^"]+)"')
_PROPERTY_RE = re.compile(r"^(?P<model>[\w-]+)\.(?P<property>[\w-]+)=")


@dataclass(frozen=True)
class DeviceList:
    """Device models and "<model>.<property>" pairs named by the emulator."""

    models: frozenset[str] = field(default_factory=frozenset)
    properties: frozenset[str] = field(default_factory=frozenset)

    def has_model(self, model: str) -> bool:
        return model in self.models

    def has_property(self, model: str, prop: str) -> bool:
        return f"{model}.{prop}" in self.properties


def parse_device_list(text: str | bytes, max_size: int = DEFAULT_MAX_SIZE) -> DeviceList:
    """Collect model names and model properties, skipping anything else."""
    models = set()
    properties = set()
    for line in bound_text(text, max_size).splitlines():
        line = line.strip()
        match = _MODEL_RE.match(line)
        if match:
            models.add(match.group("model"))
            continue
        match = _PROPERTY_RE.match(line)
        if match:
            properties.add(f"{match.group('model')}.{match.group('property')}")
    return DeviceList(models=frozenset(models), properties=frozenset(properties))


def scan_devices(devices: DeviceList, flags: FlagSet) -> FlagSet:
    """Flags contributed by a parsed device list, given the flags so far."""
    found = []

    # Which devices exist
    if devices.has_model("hda-duplex"):
        found.append(F.HDA_DUPLEX)
    if devices.has_model("ccid-card-emulated"):
        found.append(F.CCID_EMULATED)
    if devices.has_model("ccid-card-passthru"):
        found.append(F.CCID_PASSTHRU)
    # Prefer -chardev spicevmc (detected from help) over -device spicevmc
    if F.CHARDEV_SPICEVMC not in flags and devices.has_model("spicevmc"):
        found.append(F.DEVICE_SPICEVMC)

    # Features of given devices
    if devices.has_property("pci-assign", "configfd"):
        found.append(F.PCI_CONFIGFD)
    if devices.has_property("virtio-blk-pci", "bootindex"):
        found.append(F.BOOTINDEX)
        if devices.has_property("pci-assign", "bootindex"):
            found.append(F.PCI_BOOTINDEX)
    if devices.has_property("virtio-net-pci", "tx"):
        found.append(F.VIRTIO_TX_ALG)

    return FlagSet(found)


def scan_device_list(
    text: str | bytes, flags: FlagSet, max_size: int = DEFAULT_MAX_SIZE
) -> FlagSet:
    """
    Extend `flags` with capabilities found in a device list.

    The enumeration only exists once -device does, so without the DEVICE
    capability the input is returned unchanged.
    """
    if F.DEVICE not in flags:
        logger.debug("Ignoring device list: -device not supported")
        return flags

    devices = parse_device_list(text, max_size)
    extra = scan_devices(devices, flags)
    logger.debug(
        f"Device list named {len(devices.models)} models and "
        f"{len(devices.properties)} properties, adding {len(extra)} capabilities"
    )
    return flags | extra

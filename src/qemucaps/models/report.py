"""
Pydantic models for rendering capability results.

The parser itself works with plain dataclasses; these models exist for the
CLI's json/yaml output and for anything that stores probe results.
"""

from pydantic import BaseModel, Field

from qemucaps.flags import CapabilityFlag, FlagSet
from qemucaps.parser import ParseResult


class CapabilityReport(BaseModel):
    """Serializable view of a ParseResult."""

    version: int = Field(..., ge=0, description="Encoded version")
    version_string: str = Field(..., description="major.minor.micro")
    is_kvm: bool = Field(default=False, description="KVM-enabled build")
    kvm_version: int = Field(default=0, ge=0, description="kvm-NN sub-version")
    flags: int = Field(default=0, ge=0, description="Capability bit mask")
    flag_names: list[str] = Field(
        default_factory=list,
        description="Names of the capabilities in the mask, in bit order",
    )
    binary: str | None = Field(default=None, description="Probed binary path")
    arch: str | None = Field(default=None, description="Target architecture")

    @classmethod
    def from_result(
        cls,
        result: ParseResult,
        binary: str | None = None,
        arch: str | None = None,
    ) -> "CapabilityReport":
        return cls(
            version=result.version,
            version_string=result.version_string,
            is_kvm=result.is_kvm,
            kvm_version=result.kvm_version,
            flags=result.flags.mask,
            flag_names=[flag.name for flag in result.flags],
            binary=binary,
            arch=arch,
        )

    def flag_set(self) -> FlagSet:
        return FlagSet.from_mask(self.flags)

    def has(self, flag: CapabilityFlag) -> bool:
        return flag in self.flag_set()

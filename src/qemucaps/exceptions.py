"""Capability detection exception classes."""


class CapabilityError(Exception):
    """Base exception for capability detection."""

    pass


class VersionBannerError(CapabilityError):
    """The emulator version banner could not be used."""

    def __init__(self, message: str, line: str = ""):
        self.line = line
        super().__init__(message)


class MissingVersionBanner(VersionBannerError):
    """No banner-shaped line found in the help text."""

    def __init__(self, emulator: str, line: str = ""):
        self.emulator = emulator
        super().__init__(
            f"cannot find {emulator} version banner in '{line}'",
            line,
        )


class MalformedVersionBanner(VersionBannerError):
    """Banner found but its version numbers do not parse."""

    def __init__(self, emulator: str, line: str, reason: str):
        self.emulator = emulator
        self.reason = reason
        super().__init__(
            f"cannot parse {emulator} version number in '{line}': {reason}",
            line,
        )


class ProbeError(CapabilityError):
    """Running the emulator binary to capture its output failed."""

    def __init__(self, message: str, binary: str):
        self.binary = binary
        super().__init__(f"Probing {binary} failed: {message}")

"""
qemucaps CLI entry point.

Usage:
    qemucaps [OPTIONS] COMMAND [ARGS]...

Commands:
    parse    Parse captured help / device list output
    probe    Probe an installed emulator binary
    flags    List every capability flag and its bit
    version  Show version information
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from qemucaps.cli.output import console, print_data, print_error, print_report
from qemucaps.config import config
from qemucaps.exceptions import ProbeError, VersionBannerError
from qemucaps.flags import CapabilityFlag
from qemucaps.models.enums import LogLevel, OutputFormat
from qemucaps.models.report import CapabilityReport
from qemucaps.utils.logger import init_logger

app = typer.Typer(
    name="qemucaps",
    help="QEMU capability detection CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Set by the callback, read by commands
_state = {"format": OutputFormat.TABLE}


@app.callback()
def main(
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: table|json|yaml"),
    ] = OutputFormat.TABLE,
    log_level: Annotated[
        LogLevel | None,
        typer.Option("--log-level", "-l", help="Log level", envvar="QEMUCAPS_LOG_LEVEL"),
    ] = None,
):
    """
    QEMU capability detection.

    Work out which options, devices and migration modes an emulator supports.
    """
    config.load_from_env()
    if log_level is not None:
        config.LOG_LEVEL = log_level
    init_logger(config.LOG_LEVEL)
    _state["format"] = output_format


def _read_capture(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read(config.MAX_HELP_OUTPUT_SIZE)
    except OSError as e:
        print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(1)


@app.command("parse")
def parse(
    help_file: Annotated[Path, typer.Argument(help="Captured '-help' output")],
    devices: Annotated[
        Path | None,
        typer.Option("--devices", "-d", help="Captured '-device ?' output"),
    ] = None,
    arch: Annotated[
        str | None,
        typer.Option("--arch", "-a", help="Target architecture (e.g. x86_64)"),
    ] = None,
):
    """Parse previously captured emulator output."""
    from qemucaps.parser import apply_arch_quirks, parse_capabilities

    help_text = _read_capture(help_file)
    device_text = _read_capture(devices) if devices else None

    try:
        result = parse_capabilities(help_text, device_text)
    except VersionBannerError as e:
        print_error(str(e))
        raise typer.Exit(1)

    result = apply_arch_quirks(result, arch)
    print_report(CapabilityReport.from_result(result, arch=arch), _state["format"])


@app.command("probe")
def probe(
    binary: Annotated[
        str | None,
        typer.Argument(help="Emulator binary (default from QEMUCAPS_QEMU_BINARY)"),
    ] = None,
    arch: Annotated[
        str | None,
        typer.Option("--arch", "-a", help="Target architecture (e.g. x86_64)"),
    ] = None,
):
    """Run an installed emulator and report its capabilities."""
    from qemucaps.probe import probe_capabilities

    binary = binary or config.QEMU_BINARY
    try:
        result = probe_capabilities(binary, arch)
    except (ProbeError, VersionBannerError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_report(
        CapabilityReport.from_result(result, binary=binary, arch=arch),
        _state["format"],
    )


@app.command("flags")
def list_flags():
    """List every capability flag with its bit position."""
    rows = [{"bit": flag.value, "name": flag.name} for flag in CapabilityFlag]

    if _state["format"] != OutputFormat.TABLE:
        print_data(rows, _state["format"])
        return

    table = Table(title="Capability Flags", show_header=True)
    table.add_column("Bit", justify="right", style="bold")
    table.add_column("Name", style="cyan")
    for row in rows:
        table.add_row(str(row["bit"]), row["name"])
    console.print(table)


@app.command("version")
def version():
    """Show version information."""
    from qemucaps import __version__

    console.print(f"qemucaps v{__version__}")


if __name__ == "__main__":
    app()

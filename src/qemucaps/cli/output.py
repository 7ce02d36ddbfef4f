"""Console output helpers shared by CLI commands."""

import json

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from qemucaps.models.enums import OutputFormat
from qemucaps.models.report import CapabilityReport

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def format_report_table(report: CapabilityReport) -> Table:
    """Summary rows followed by one row per detected capability."""
    table = Table(title="Emulator Capabilities", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    if report.binary:
        table.add_row("Binary", report.binary)
    if report.arch:
        table.add_row("Arch", report.arch)
    table.add_row("Version", f"{report.version_string} ({report.version})")
    table.add_row(
        "KVM",
        f"yes (kvm-{report.kvm_version})" if report.is_kvm else "no",
    )
    table.add_row("Flags", f"{report.flags:#x}")
    table.add_row("Capabilities", "\n".join(report.flag_names) or "[dim]none[/dim]")
    return table


def print_report(report: CapabilityReport, output_format: OutputFormat) -> None:
    match output_format:
        case OutputFormat.JSON:
            console.print_json(report.model_dump_json())
        case OutputFormat.YAML:
            console.out(yaml.safe_dump(report.model_dump(), sort_keys=False), end="")
        case _:
            console.print(format_report_table(report))


def print_data(data, output_format: OutputFormat) -> None:
    """Print plain data (lists/dicts) in the chosen machine format."""
    if output_format == OutputFormat.YAML:
        console.out(yaml.safe_dump(data, sort_keys=False), end="")
    else:
        console.print_json(json.dumps(data))

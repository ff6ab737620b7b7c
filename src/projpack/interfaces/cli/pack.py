"""CLI commands for packing a project directory."""

import os
import sys
from typing import Optional

import rich_click as click
from rich.panel import Panel
from rich.table import Table

from ...application.container import get_service_container
from ...application.dtos import PackRequestDto, PackResultDto
from ...application.exceptions import OperationNotAllowedError, ValidationError
from ...application.services.pack_service import PackService
from ...application.validation import default_archive_name, validate_pack_request
from ...progress import RichProgressReporter
from .main import console

EXIT_FAILED = 1
EXIT_REJECTED = 2


def _default_output(source: str, fallback: str) -> str:
    source_abs = os.path.abspath(source)
    return os.path.join(os.path.dirname(source_abs), default_archive_name(source, fallback))


def _format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def _print_result(result: PackResultDto) -> None:
    counters = result.counters
    table = Table(title="Pack Summary", show_header=True, header_style="bold magenta")
    table.add_column("Kind", style="cyan")
    table.add_column("Copied", style="green", justify="right")
    table.add_column("Ignored", style="yellow", justify="right")
    table.add_row("Files", str(counters.processed_files), str(counters.ignored_files))
    table.add_row(
        "Directories",
        str(counters.processed_directories),
        str(counters.ignored_directories),
    )
    table.add_row(
        "[bold]Total[/bold]",
        str(counters.processed_total),
        str(counters.ignored_total),
    )
    console.print(Panel.fit(table))

    if result.success:
        console.print(f"[green]✓[/green] Archive written: [cyan]{result.output_path}[/cyan]")
        if result.archive is not None:
            console.print(
                f"   Entries: [yellow]{result.archive.entry_count}[/yellow], "
                f"size: [yellow]{_format_size(result.archive.archive_size)}[/yellow]"
            )
    else:
        console.print(f"[red]✗[/red] Pack failed: {result.error_message}")

    if not result.cleanup_succeeded:
        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")


@click.command(name="pack")
@click.argument("source", type=click.Path(file_okay=False))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    help="Archive to write (defaults to <source folder name>.zip next to SOURCE)",
)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.option(
    "--temp-dir",
    type=click.Path(file_okay=False, exists=True),
    help="Directory in which the temporary staging directory is created",
)
@click.option(
    "--show-events/--quiet",
    default=False,
    help="Print every copied and ignored entry",
)
def pack(source: str, output: Optional[str], yes: bool, temp_dir: Optional[str], show_events: bool):
    """Stage a filtered copy of SOURCE and write it to a ZIP archive.

    Examples:
        projpack pack ./MyApp                       # writes ./MyApp.zip
        projpack pack ./MyApp -o /tmp/MyApp.zip -y  # no confirmation prompt
    """
    container = get_service_container()
    service = container.pack_service
    if temp_dir:
        # Scoped to this invocation; the shared container keeps its config.
        service = PackService(config=container.config.with_overrides(temp_root=temp_dir))

    if not output:
        output = _default_output(source, service.config.default_archive_name)

    validation = validate_pack_request(source, output, is_running=service.is_running)
    if not validation.valid:
        console.print(f"[red]Error:[/red] {validation.reason}")
        sys.exit(EXIT_REJECTED)

    # The prompt must happen before the live display takes over the terminal.
    if not yes and not click.confirm(f"Pack '{source}' into '{output}'?", default=True):
        console.print("[yellow]Compression cancelled.[/yellow]")
        sys.exit(EXIT_FAILED)

    request = PackRequestDto(source_path=source, output_path=output)
    try:
        with RichProgressReporter(console=console, show_events=show_events) as reporter:
            result = service.run(request, reporter)
    except (ValidationError, OperationNotAllowedError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_REJECTED)

    _print_result(result)
    if not result.success:
        sys.exit(EXIT_FAILED)


@click.command(name="check")
@click.argument("source", type=click.Path())
@click.argument("output", type=click.Path())
def check(source: str, output: str):
    """Check whether SOURCE could be packed into OUTPUT."""
    validation = validate_pack_request(source, output)
    if validation.valid:
        console.print(f"[green]✓[/green] Ready to pack [cyan]{source}[/cyan] into [cyan]{output}[/cyan]")
        return
    console.print(f"[red]✗[/red] {validation.reason}")
    sys.exit(EXIT_REJECTED)


@click.command(name="rules")
def rules():
    """Show which directories and file extensions are left out."""
    policy = get_service_container().pack_service.policy
    table = Table(
        title="Exclusion Rules", show_header=True, header_style="bold magenta"
    )
    table.add_column("Kind", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Applies to", style="blue")

    for name in sorted(policy.rules.ignored_directories):
        table.add_row("directory", name, "any path component")
    for ext in sorted(policy.rules.ignored_extensions):
        table.add_row("extension", ext, "files outside ignored directories")

    console.print(Panel.fit(table))

"""Shared Rich console for build output."""

from rich.console import Console
from rich.table import Table

from module_bom.models.bom import BuildResult

console = Console()


def error(message: str, console: Console = console) -> None:
    """Print an error message in red."""
    console.print(f"[red bold]{message}[/red bold]")


def print_summary(result: BuildResult, console: Console = console) -> None:
    """Print the launch BOM as a table, followed by the entry counts."""
    if result.launch_bom:
        table = Table(title="Launch BOM")
        table.add_column("Name")
        table.add_column("Version")
        table.add_column("Licenses")
        for entry in result.launch_bom:
            table.add_row(entry.name, entry.version or "", ", ".join(entry.licenses))
        console.print(table)

    console.print(
        f"[green]Generated BOM: {len(result.launch_bom)} launch, "
        f"{len(result.build_bom)} build entries[/green]"
    )

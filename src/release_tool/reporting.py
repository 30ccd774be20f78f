"""
Console summary of assembled release notes.

Provides color-coded tables using the Rich library.
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .dependency import Change, Dependency
from .release import ReleaseNotes


class ReleaseReporter:
    """Formats and displays a release notes summary."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_summary(self, notes: ReleaseNotes) -> None:
        """
        Print the dependency changes, changelog and contributors of a release.

        Args:
            notes: Assembled release notes
        """
        self.console.print()
        self._print_header(notes)
        self._print_dependencies(notes.dependencies)
        self._print_changes(notes.changes)
        self._print_contributors(notes.contributors)

    def _print_header(self, notes: ReleaseNotes) -> None:
        release = notes.release
        revision_range = (
            f"{release.previous}..{release.commit}" if release.previous else release.commit
        )
        title = escape(release.project_name) if release.project_name else "release"
        header_text = f"📦 {title} {escape(notes.version)}  ({escape(revision_range)})"
        if release.pre_release:
            header_text += "  [yellow]pre-release[/yellow]"
        self.console.print(
            Panel(
                header_text,
                title=f"[bold blue]Release {escape(notes.tag)}[/bold blue]",
                border_style="blue",
            )
        )

    def _print_dependencies(self, dependencies: List[Dependency]) -> None:
        if not dependencies:
            self.console.print("✅ This release has no dependency changes.", style="green")
            self.console.print()
            return

        table = Table(title="🔗 Dependency Changes", box=box.ROUNDED, title_style="bold cyan")
        table.add_column("Dependency", style="bold")
        table.add_column("Previous", style="dim")
        table.add_column("Current")
        table.add_column("Status", justify="center")

        for dep in dependencies:
            if dep.previous:
                table.add_row(
                    escape(dep.name),
                    escape(dep.previous),
                    escape(dep.commit),
                    "[yellow]UPDATED[/yellow]",
                )
            else:
                table.add_row(escape(dep.name), "-", escape(dep.commit), "[green]NEW[/green]")

        self.console.print(table)
        self.console.print()

    def _print_changes(self, changes: List[Change]) -> None:
        table = Table(
            title=f"📝 Changes ({len(changes)})", box=box.ROUNDED, title_style="bold cyan"
        )
        table.add_column("Commit", style="magenta", no_wrap=True)
        table.add_column("Description")

        for change in changes:
            table.add_row(escape(change.commit), escape(change.description))

        self.console.print(table)
        self.console.print()

    def _print_contributors(self, contributors: List[str]) -> None:
        table = Table(title="👥 Contributors", box=box.SIMPLE, title_style="bold cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name")

        for rank, name in enumerate(contributors, 1):
            table.add_row(str(rank), escape(name))

        self.console.print(table)

"""
Rendering functions for s3history output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List

from .domain import CommitResult, ReplaySummary

console = Console()


def render_commits_table(commits: List[CommitResult], title: str = "Replayed commits") -> None:
    """
    Render replayed (or planned) commits as a table.

    Args:
        commits: Commit results in replay order
        title: Table title
    """
    if not commits:
        console.print("[yellow]No versions to replay.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Commit", style="cyan")
    table.add_column("Date")
    table.add_column("Files")

    for i, commit in enumerate(commits, 1):
        sha = commit.sha[:10] if commit.sha else "[dim](dry run)[/dim]"
        table.add_row(str(i), sha, commit.date, "\n".join(commit.files))

    console.print(table)


def render_summary(summary: ReplaySummary) -> None:
    """Print a one-paragraph summary of a replay run."""
    verb = "would create" if summary.dry_run else "created"
    count = summary.changesets if summary.dry_run else summary.commits
    console.print(
        f"[bold]{summary.bucket}[/bold]: {summary.objects} objects, "
        f"{summary.versions} versions, {verb} [green]{count}[/green] commits"
    )
    if summary.repository:
        console.print(f"Repository: {summary.repository}")
    if summary.truncated:
        console.print("[yellow]Object listing was truncated; only the first page was replayed.[/yellow]")
    for failure in summary.version_failures:
        console.print(f"[red]Skipped {failure.key}:[/red] {failure.error}")

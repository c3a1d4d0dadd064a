"""Rendering of classification results and deletion progress."""

import json
from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from branchsweep.classify import BranchRecord, BranchStatus
from branchsweep.cleanup import DeletionResult
from branchsweep.config import Config

STATUS_STYLES = {
    BranchStatus.DEPRECATED: "yellow",
    BranchStatus.STALE: "cyan",
    BranchStatus.ACTIVE: "green",
}


def print_header(console: Console, trunk: str, config: Config, thresholds: bool = True) -> None:
    """Show the settings this run uses."""
    console.print(f"Using [yellow]{escape(trunk)}[/yellow] as the main branch")
    if not thresholds:
        console.print()
        return
    console.print(f"Stale threshold: [yellow]{config.stale_days} days[/yellow]")
    console.print(f"Behind threshold: [yellow]{config.behind_threshold} commits[/yellow]")
    if config.unsafe:
        console.print("[red]UNSAFE MODE: Force deleting branches with unmerged changes[/red]")
    console.print()


def create_record_table(title: str, records: list[BranchRecord], title_style: str) -> Table:
    """Create a table listing branches with their reasons and last commit."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        title_style=title_style,
        title_justify="left",
        show_edge=True,
    )
    table.add_column("Branch", style=STATUS_STYLES[records[0].status], no_wrap=True)
    table.add_column("Reasons", style="magenta")
    table.add_column("Last Commit", style="dim")
    for record in records:
        table.add_row(escape(record.name), escape(record.reason_text), escape(record.last_commit))
    return table


def print_section(console: Console, title: str, records: list[BranchRecord], title_style: str, empty: str) -> None:
    if records:
        console.print(create_record_table(title, records, title_style))
    else:
        console.print(f"[{title_style}]{title}[/{title_style}]")
        console.print(f"[green]{empty}[/green]")
    console.print()


def print_report(console: Console, deprecated: list[BranchRecord], stale: list[BranchRecord]) -> None:
    """Show deprecated and stale branches, each in its own section."""
    print_section(
        console,
        "DEPRECATED BRANCHES (safe to delete)",
        deprecated,
        "bold red",
        "No deprecated branches found!",
    )
    print_section(
        console,
        "STALE BRANCHES (review before deleting)",
        stale,
        "bold blue",
        "No stale branches found!",
    )


def print_clean(console: Console) -> None:
    console.print(
        Panel(
            "[green]Your branches are clean ✨[/green]",
            style="green",
            padding=(0, 2),
            expand=False,
        )
    )


def print_record_details(console: Console, record: BranchRecord) -> None:
    """Show one branch before asking about it."""
    style = STATUS_STYLES[record.status]
    console.print()
    console.print(f"Branch: [{style}]{escape(record.name)}[/{style}] ({record.status.value})")
    console.print(f"Reasons: {escape(record.reason_text)}")
    console.print(f"Last commit: {escape(record.last_commit)}")


def print_dry_run(console: Console, records: Iterable[BranchRecord]) -> None:
    """List what a full cleanup would delete."""
    console.print()
    console.print("[magenta]DRY RUN - No branches will be deleted[/magenta]")
    console.print()
    console.print("Would delete the following branches:")
    for record in records:
        style = STATUS_STYLES[record.status]
        console.print(f"  [{style}]{escape(record.name)}[/{style}] ({record.status.value})")
        console.print(f"    {escape(record.reason_text)}")


def print_deletion_result(console: Console, result: DeletionResult) -> None:
    """Report the outcome for one branch."""
    name = escape(result.branch)
    if result.deleted:
        suffix = " (forced)" if result.forced else ""
        console.print(f"  [green]Deleted[/green] {name}{suffix}")
    elif result.error:
        console.print(f"  [yellow]Skipped {name}:[/yellow] {escape(result.error)}")
    else:
        console.print(f"  [yellow]Skipped {name}[/yellow]")


def print_deleted_count(console: Console, count: int, kind: str = "") -> None:
    label = f"{kind} branches" if kind else "branches"
    console.print(f"[green]Deleted {count} {label}![/green]")


def print_remaining(console: Console, branches: Iterable[str], current: str) -> None:
    """Show local branches left after cleanup."""
    console.print()
    console.print("Remaining local branches:")
    for branch in branches:
        marker = "* " if branch == current else "  "
        console.print(f"{marker}{escape(branch)}", highlight=False)


def print_merged_list(console: Console, entries: list[tuple[str, bool]], trunk: str) -> None:
    """Show numbered merged branches with whether they still exist on the remote."""
    console.print(f"Found [yellow]{len(entries)}[/yellow] branches that have been merged into {escape(trunk)}:")
    console.print()
    for number, (branch, on_remote) in enumerate(entries, start=1):
        where = "[yellow](still on remote)[/yellow]" if on_remote else "[green](local only)[/green]"
        console.print(f"  {number}. {escape(branch)} {where}", highlight=False)
    console.print()


def records_to_json(trunk: str, records: list[BranchRecord]) -> str:
    """Serialize classification results for scripting."""
    return json.dumps(
        {
            "trunk": trunk,
            "branches": [
                {
                    "name": record.name,
                    "status": record.status.value,
                    "reasons": record.reasons,
                    "last_commit": record.last_commit,
                    "age_days": record.age_days,
                    "ahead": record.ahead,
                    "behind": record.behind,
                }
                for record in records
            ],
        },
        indent=2,
    )

"""Command line interface for branchsweep."""

import sys
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import click
import typer
from rich.console import Console

from branchsweep import report
from branchsweep.classify import BranchRecord, classify_branches, split_by_status
from branchsweep.config import DEFAULT_BEHIND_THRESHOLD, DEFAULT_STALE_DAYS, Config
from branchsweep.git import GitError, GitRepo
from branchsweep.logging_config import get_logger, setup_logging
from branchsweep.menu import CleanupMenu, MergedMenu, remote_presence

app = typer.Typer(help="Find deprecated and stale git branches and clean them up")
console = Console()
logger = get_logger(__name__)

PathOption = Annotated[Path, typer.Option(help="Path to git repository")]
TrunkOption = Annotated[
    Optional[str], typer.Option("--trunk", help="Trunk branch (default: origin's HEAD, then main, then master)")
]
StaleDaysOption = Annotated[
    int, typer.Option("--stale-days", envvar="STALE_DAYS", help="Consider branches stale after N days")
]
BehindOption = Annotated[
    int,
    typer.Option(
        "--behind-threshold",
        envvar="BEHIND_THRESHOLD",
        help="Consider branches stale if N commits behind trunk with no commits of their own",
    ),
]
NoSyncOption = Annotated[
    bool, typer.Option("--no-sync", help="Skip fetching, switching to trunk and pulling; use local state as is")
]


def fail(err: Exception) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    console.print(f"[red]Error:[/red] {err}")
    raise typer.Exit(code=1) from err


def load_config(**values) -> Config:
    try:
        return Config.from_dict(values)
    except ValueError as err:
        fail(err)


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        fail(err)


def prepare(config: Config, quiet: bool = False, thresholds: bool = True) -> tuple[GitRepo, str]:
    """Open the repository, resolve trunk and bring it up to date."""
    repo = get_repo(config.path)
    try:
        trunk = repo.resolve_trunk(config.trunk)
    except GitError as err:
        fail(err)

    if not quiet:
        report.print_header(console, trunk, config, thresholds)
    if config.sync:
        sync(repo, trunk, quiet)
    return repo, trunk


def sync(repo: GitRepo, trunk: str, quiet: bool = False) -> None:
    """Fetch, switch to trunk and pull; failures here only warn."""
    if repo.has_remotes():
        if not quiet:
            console.print("Fetching latest changes from remote...")
        try:
            repo.fetch()
        except GitError as err:
            logger.warning("%s", err)

    if repo.get_current_branch_name() != trunk:
        if not quiet:
            console.print(f"Switching to {trunk}...")
        try:
            repo.checkout(trunk)
        except GitError as err:
            logger.warning("%s; staying on the current branch", err)
            return

    if repo.get_upstream_remote(trunk) is not None:
        if not quiet:
            console.print(f"Pulling latest {trunk}...")
        try:
            repo.pull()
        except GitError as err:
            logger.warning("%s", err)


def analyze(repo: GitRepo, trunk: str, config: Config) -> list[BranchRecord]:
    try:
        return classify_branches(repo, trunk, config.stale_days, config.behind_threshold)
    except GitError as err:
        fail(err)


def show_remaining(repo: GitRepo) -> None:
    try:
        report.print_remaining(console, repo.list_local_branches(), repo.get_current_branch_name())
    except GitError as err:
        fail(err)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show progress details")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Log every git command")] = False,
) -> None:
    """Find deprecated and stale git branches and clean them up."""
    setup_logging(verbose=verbose, debug=debug)


@app.command()
def scan(
    path: PathOption = Path("."),
    trunk: TrunkOption = None,
    unsafe: Annotated[
        bool, typer.Option("--unsafe", help="Force delete branches even with unmerged changes")
    ] = False,
    stale_days: StaleDaysOption = DEFAULT_STALE_DAYS,
    behind_threshold: BehindOption = DEFAULT_BEHIND_THRESHOLD,
    no_sync: NoSyncOption = False,
) -> None:
    """Classify branches, then choose what to delete from a menu."""
    config = load_config(
        path=path,
        trunk=trunk,
        stale_days=stale_days,
        behind_threshold=behind_threshold,
        unsafe=unsafe,
        sync=not no_sync,
    )
    repo, trunk_name = prepare(config)

    console.print()
    console.print("Analyzing branches...")
    console.print()
    deprecated, stale = split_by_status(analyze(repo, trunk_name, config))
    report.print_report(console, deprecated, stale)
    if not deprecated and not stale:
        return

    results = CleanupMenu(repo, deprecated, stale, console, unsafe=config.unsafe).run()
    if results is None:
        return
    show_remaining(repo)


@app.command("list")
def list_branches(
    path: PathOption = Path("."),
    trunk: TrunkOption = None,
    stale_days: StaleDaysOption = DEFAULT_STALE_DAYS,
    behind_threshold: BehindOption = DEFAULT_BEHIND_THRESHOLD,
    no_sync: NoSyncOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print results as JSON")] = False,
) -> None:
    """Show deprecated and stale branches without deleting anything."""
    config = load_config(
        path=path,
        trunk=trunk,
        stale_days=stale_days,
        behind_threshold=behind_threshold,
        sync=not no_sync,
    )
    repo, trunk_name = prepare(config, quiet=as_json)
    records = analyze(repo, trunk_name, config)

    if as_json:
        typer.echo(report.records_to_json(trunk_name, records))
        return

    deprecated, stale = split_by_status(records)
    if not records:
        report.print_clean(console)
        return
    report.print_report(console, deprecated, stale)


@app.command()
def merged(
    path: PathOption = Path("."),
    trunk: TrunkOption = None,
    no_sync: NoSyncOption = False,
) -> None:
    """Clean up only branches already merged into trunk."""
    config = load_config(path=path, trunk=trunk, sync=not no_sync)
    repo, trunk_name = prepare(config, thresholds=False)

    console.print()
    console.print("Finding merged branches...")
    console.print()
    try:
        current = repo.get_current_branch_name()
        branches = [b for b in repo.list_merged_branches(trunk_name) if b not in (trunk_name, current)]
    except GitError as err:
        fail(err)

    if not branches:
        console.print("[green]No merged branches found to clean up![/green]")
        return

    report.print_merged_list(console, remote_presence(repo, branches), trunk_name)
    results = MergedMenu(repo, branches, console).run()
    if results is None:
        return
    show_remaining(repo)


def main() -> None:
    """Console entry point; usage errors exit with status 1."""
    try:
        code = app(standalone_mode=False)
    except click.UsageError as err:
        err.show()
        sys.exit(1)
    except click.ClickException as err:
        err.show()
        sys.exit(err.exit_code)
    except click.Abort:
        console.print("Aborted.")
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)


if __name__ == "__main__":
    main()

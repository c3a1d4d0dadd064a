"""Interactive cleanup menus."""

from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from branchsweep import report
from branchsweep.classify import BranchRecord
from branchsweep.cleanup import DeletionResult, count_deleted, delete_branch, delete_branches
from branchsweep.git import GitError, GitRepo
from branchsweep.logging_config import get_logger

logger = get_logger(__name__)

Prompt = Callable[[str], str]

# (keys, label) per action; the first key is the one shown
SCAN_OPTIONS = {
    "deprecated": (("1", "d"), "Delete all DEPRECATED branches (safe)"),
    "stale": (("2", "s"), "Delete STALE branches (review each)"),
    "all": (("3", "a"), "Delete ALL deprecated and stale branches"),
    "interactive": (("4", "i"), "Interactive mode (choose each branch)"),
    "dry_run": (("5", "n"), "Dry run (show what would be deleted)"),
    "quit": (("q",), "Quit without deleting"),
}

MERGED_OPTIONS = {
    "all": (("a",), "Delete ALL merged branches"),
    "select": (("s",), "Select specific branches to delete"),
    "details": (("l",), "List branches with their last commit info"),
    "quit": (("q",), "Quit without deleting"),
}


def ask(prompt: Prompt, text: str) -> str:
    """Read one answer, normalized; end of input counts as 'q'."""
    try:
        return prompt(text).strip().lower()
    except EOFError:
        return "q"


def choose(console: Console, options: dict[str, tuple[tuple[str, ...], str]], prompt: Prompt) -> str:
    """Show the options and return the chosen action, re-prompting on invalid input."""
    console.print()
    console.print("[yellow]Options:[/yellow]")
    for keys, label in options.values():
        console.print(f"  {keys[0]} - {label}", highlight=False)
    console.print()

    lookup = {key: action for action, (keys, _) in options.items() for key in keys}
    while True:
        answer = ask(prompt, "Choose an option: ")
        if answer in lookup:
            return lookup[answer]
        console.print(f"[red]Invalid option: {escape(answer)}[/red]")


class CleanupMenu:
    """Menu offered after a scan found deprecated or stale branches."""

    def __init__(
        self,
        repo: GitRepo,
        deprecated: list[BranchRecord],
        stale: list[BranchRecord],
        console: Console,
        unsafe: bool = False,
        prompt: Prompt = input,
    ) -> None:
        self.repo = repo
        self.deprecated = deprecated
        self.stale = stale
        self.console = console
        self.unsafe = unsafe
        self.prompt = prompt

    @property
    def candidates(self) -> list[BranchRecord]:
        return self.deprecated + self.stale

    def run(self) -> Optional[list[DeletionResult]]:
        """Ask for an action and carry it out.

        Returns:
            The deletion results, or None if the operator quit.
        """
        action = choose(self.console, SCAN_OPTIONS, self.prompt)
        logger.debug("Menu action: %s", action)
        if action == "quit":
            self.console.print("Exiting without changes.")
            return None
        return getattr(self, f"do_{action}")()

    def confirm_force(self, branch_name: str) -> bool:
        self.console.print(f"[yellow]Warning: Branch {escape(branch_name)} has unmerged changes.[/yellow]")
        return ask(self.prompt, "Force delete? (y/n): ") == "y"

    def _delete(self, names: list[str]) -> list[DeletionResult]:
        return delete_branches(
            self.repo,
            names,
            unsafe=self.unsafe,
            confirm_force=self.confirm_force,
            on_result=lambda result: report.print_deletion_result(self.console, result),
        )

    def _review(self, records: list[BranchRecord]) -> list[DeletionResult]:
        """Ask about each branch in turn; 'q' stops the review."""
        results = []
        for record in records:
            report.print_record_details(self.console, record)
            answer = ask(self.prompt, "Delete this branch? (y/n/q): ")
            if answer == "q":
                break
            if answer != "y":
                continue
            result = delete_branch(self.repo, record.name, unsafe=self.unsafe, confirm_force=self.confirm_force)
            report.print_deletion_result(self.console, result)
            results.append(result)
        return results

    def do_deprecated(self) -> list[DeletionResult]:
        self.console.print()
        results = self._delete([record.name for record in self.deprecated])
        report.print_deleted_count(self.console, count_deleted(results), "deprecated")
        return results

    def do_stale(self) -> list[DeletionResult]:
        self.console.print()
        self.console.print("[yellow]Review stale branches before deleting:[/yellow]")
        results = self._review(self.stale)
        report.print_deleted_count(self.console, count_deleted(results), "stale")
        return results

    def do_all(self) -> list[DeletionResult]:
        self.console.print()
        self.console.print("[red]WARNING: This will delete all deprecated and stale branches.[/red]")
        if ask(self.prompt, "Are you sure? (yes/no): ") != "yes":
            self.console.print("Cancelled.")
            return []
        results = self._delete([record.name for record in self.candidates])
        report.print_deleted_count(self.console, count_deleted(results))
        return results

    def do_interactive(self) -> list[DeletionResult]:
        results = self._review(self.candidates)
        report.print_deleted_count(self.console, count_deleted(results))
        return results

    def do_dry_run(self) -> list[DeletionResult]:
        report.print_dry_run(self.console, self.candidates)
        return []


class MergedMenu:
    """Menu for the merged-only cleanup: delete all, pick by number, or inspect."""

    def __init__(self, repo: GitRepo, branches: list[str], console: Console, prompt: Prompt = input) -> None:
        self.repo = repo
        self.branches = branches
        self.console = console
        self.prompt = prompt

    def run(self) -> Optional[list[DeletionResult]]:
        action = choose(self.console, MERGED_OPTIONS, self.prompt)
        logger.debug("Menu action: %s", action)
        if action == "quit":
            self.console.print("Exiting without changes.")
            return None
        return getattr(self, f"do_{action}")()

    def _delete(self, names: list[str]) -> list[DeletionResult]:
        # Listed branches are merged, so a soft delete is enough
        results = delete_branches(
            self.repo,
            names,
            on_result=lambda result: report.print_deletion_result(self.console, result),
        )
        deleted = count_deleted(results)
        if deleted:
            self.console.print()
            self.console.print(f"[green]Successfully deleted {deleted} branches![/green]")
        return results

    def do_all(self) -> list[DeletionResult]:
        self.console.print()
        self.console.print(
            f"[red]WARNING: This will delete all {len(self.branches)} merged branches listed above.[/red]"
        )
        if ask(self.prompt, "Are you sure? (yes/no): ") != "yes":
            self.console.print("Cancelled.")
            return []
        return self._delete(self.branches)

    def parse_selection(self, answer: str) -> list[str]:
        """Turn space-separated 1-based numbers into branch names, reporting bad entries."""
        selected = []
        for token in answer.split():
            if token.isdigit() and 1 <= int(token) <= len(self.branches):
                branch = self.branches[int(token) - 1]
                if branch not in selected:
                    selected.append(branch)
            else:
                self.console.print(f"[red]Invalid selection: {escape(token)}[/red]")
        return selected

    def do_select(self) -> list[DeletionResult]:
        self.console.print()
        self.console.print("Enter the numbers of branches to delete (space-separated), or 'c' to cancel:")
        answer = ask(self.prompt, "> ")
        if answer in ("c", "q"):
            self.console.print("Cancelled.")
            return []
        return self._delete(self.parse_selection(answer))

    def do_details(self) -> list[DeletionResult]:
        self.console.print()
        self.console.print("Detailed branch information:")
        self.console.print()
        for branch in self.branches:
            self.console.print(f"[yellow]{escape(branch)}[/yellow]")
            self.console.print(f"  Last commit: {escape(self.repo.get_last_commit_summary(branch))}")
            self.console.print()
        return []


def remote_presence(repo: GitRepo, branches: list[str]) -> list[tuple[str, bool]]:
    """Pair each branch with whether origin still has a head of that name."""
    if not repo.has_remote("origin"):
        return [(branch, False) for branch in branches]
    entries = []
    for branch in branches:
        try:
            on_remote = repo.remote_branch_exists("origin", branch)
        except GitError as err:
            logger.warning("Could not check origin for %s: %s", branch, err)
            on_remote = False
        entries.append((branch, on_remote))
    return entries

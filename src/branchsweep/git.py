"""Git repository operations."""

from pathlib import Path
from typing import Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from branchsweep.logging_config import get_logger

logger = get_logger(__name__)


class GitError(Exception):
    """Git operation error."""


class NotARepositoryError(GitError):
    """Path is not a usable git work tree."""


class TrunkNotFoundError(GitError):
    """Trunk branch could not be determined."""


class BranchNotMergedError(GitError):
    """Soft delete refused because the branch has unmerged commits."""

    def __init__(self, branch: str, message: str) -> None:
        """Initialize error.

        Args:
            branch: Name of the branch git refused to delete
            message: Error output from git
        """
        super().__init__(message)
        self.branch = branch


class GitRepo:
    """Git repository operations.

    Every query goes through the git executable; nothing here reads
    repository objects directly.
    """

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise NotARepositoryError(f"Not in a git repository: {path}") from err
        if self.repo.bare:
            raise NotARepositoryError("Cannot operate on bare repository")

    def _git(self, command: str, *args: str) -> str:
        """Run a git command and return its stripped output."""
        logger.debug("git %s %s", command.replace("_", "-"), " ".join(args))
        return str(getattr(self.repo.git, command)(*args)).strip()

    def _ref_exists(self, ref: str) -> bool:
        try:
            self._git("show_ref", "--verify", "--quiet", ref)
        except GitCommandError:
            return False
        return True

    def branch_exists(self, branch_name: str) -> bool:
        """Check whether a local branch exists."""
        return self._ref_exists(f"refs/heads/{branch_name}")

    def resolve_trunk(self, preferred: Optional[str] = None) -> str:
        """Determine the trunk branch name.

        Order: the explicit name, origin's HEAD, then ``main`` and ``master``.

        Raises:
            TrunkNotFoundError: If no candidate exists locally
        """
        if preferred:
            if not self.branch_exists(preferred):
                raise TrunkNotFoundError(f"Trunk branch '{preferred}' does not exist locally")
            return preferred

        try:
            head_ref = self._git("symbolic_ref", "refs/remotes/origin/HEAD")
        except GitCommandError:
            head_ref = ""
        prefix = "refs/remotes/origin/"
        if head_ref.startswith(prefix) and self.branch_exists(head_ref[len(prefix) :]):
            return head_ref[len(prefix) :]

        for candidate in ("main", "master"):
            if self.branch_exists(candidate):
                return candidate

        raise TrunkNotFoundError(
            "Cannot determine main branch. "
            "Set it with: git remote set-head origin --auto, or pass --trunk"
        )

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        try:
            try:
                return self.repo.active_branch.name
            except TypeError:
                # Detached HEAD: nothing to exclude
                return ""
        except (GitCommandError, ValueError) as err:
            raise GitError(f"Failed to get current branch: {err}") from err

    def has_remotes(self) -> bool:
        return bool(self.repo.remotes)

    def has_remote(self, name: str) -> bool:
        return any(remote.name == name for remote in self.repo.remotes)

    def fetch(self) -> None:
        """Fetch from all remotes, pruning deleted remote branches."""
        try:
            self._git("fetch", "--all", "--prune")
        except GitCommandError as err:
            raise GitError(f"Failed to fetch from remotes: {err}") from err

    def checkout(self, branch_name: str) -> None:
        try:
            self._git("checkout", branch_name)
        except GitCommandError as err:
            raise GitError(f"Failed to check out {branch_name}: {err}") from err

    def pull(self) -> None:
        """Pull the current branch from its upstream."""
        try:
            self._git("pull")
        except GitCommandError as err:
            raise GitError(f"Failed to pull: {err}") from err

    def list_local_branches(self) -> list[str]:
        """List local branch names, in git's order."""
        try:
            output = self._git("branch", "--format=%(refname:short)")
        except GitCommandError as err:
            raise GitError(f"Failed to list branches: {err}") from err
        return [
            branch
            for branch in output.splitlines()
            # Skip detached HEAD placeholders like "(HEAD detached at 1a2b3c)"
            if branch and not branch.startswith("(")
        ]

    def list_merged_branches(self, trunk: str) -> list[str]:
        """List local branches whose history is reachable from trunk."""
        try:
            output = self._git("branch", "--merged", trunk, "--format=%(refname:short)")
        except GitCommandError as err:
            raise GitError(f"Failed to list branches merged into {trunk}: {err}") from err
        return [branch for branch in output.splitlines() if branch and not branch.startswith("(")]

    def get_upstream_remote(self, branch_name: str) -> Optional[str]:
        """Get the remote a branch tracks, or None if it has no upstream."""
        try:
            return self._git("config", "--get", f"branch.{branch_name}.remote") or None
        except GitCommandError:
            return None

    def get_upstream_branch(self, branch_name: str) -> str:
        """Get the remote branch name a branch tracks, defaulting to its own name."""
        try:
            merge_ref = self._git("config", "--get", f"branch.{branch_name}.merge")
        except GitCommandError:
            return branch_name
        if merge_ref.startswith("refs/heads/"):
            return merge_ref[len("refs/heads/") :]
        return merge_ref or branch_name

    def remote_branch_exists(self, remote: str, branch_name: str) -> bool:
        """Ask the remote itself whether a branch head still exists.

        ls-remote matches patterns against ref tails, so the output is
        checked for the exact ref.
        """
        ref = f"refs/heads/{branch_name}"
        try:
            output = self._git("ls_remote", "--heads", remote, ref)
        except GitCommandError as err:
            raise GitError(f"Failed to query {remote} for {branch_name}: {err}") from err
        return any(line.split("\t")[-1] == ref for line in output.splitlines())

    def get_last_commit_timestamp(self, branch_name: str) -> int:
        """Get the author timestamp of a branch's last commit, 0 if unreadable."""
        try:
            return int(self._git("log", "-1", "--format=%at", branch_name, "--") or 0)
        except (GitCommandError, ValueError):
            return 0

    def get_last_commit_summary(self, branch_name: str) -> str:
        """Get a one-line description of a branch's last commit."""
        try:
            return self._git("log", "-1", "--format=%h %s (%cr by %an)", branch_name, "--") or "unknown"
        except GitCommandError:
            return "unknown"

    def count_commits(self, revision_range: str) -> int:
        """Count commits in a range like ``main..feature``, 0 if it cannot be read."""
        try:
            return int(self._git("rev_list", "--count", revision_range, "--") or 0)
        except (GitCommandError, ValueError):
            return 0

    def get_subjects(self, revision_range: str) -> list[str]:
        """Get commit subjects in a range."""
        try:
            output = self._git("log", revision_range, "--format=%s", "--")
        except GitCommandError:
            return []
        return [line for line in output.splitlines() if line.strip()]

    def log_contains_subject(self, branch_name: str, subject: str) -> bool:
        """Check whether any commit on a branch mentions the given subject text."""
        try:
            return bool(self._git("log", branch_name, "--fixed-strings", f"--grep={subject}", "--format=%s", "--"))
        except GitCommandError:
            return False

    def delete_branch(self, branch_name: str, force: bool = False) -> None:
        """Delete a local branch.

        Raises:
            BranchNotMergedError: If a soft delete is refused for unmerged commits
            GitError: For any other failure
        """
        try:
            self._git("branch", "-D" if force else "-d", branch_name)
        except GitCommandError as err:
            stderr = str(err.stderr or err)
            if not force and "not fully merged" in stderr:
                raise BranchNotMergedError(branch_name, f"Branch {branch_name} has unmerged changes") from err
            raise GitError(f"Failed to delete {branch_name}: {stderr.strip()}") from err

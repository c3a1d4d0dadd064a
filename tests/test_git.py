"""Tests for the git command wrapper."""

from pathlib import Path

import pytest
from git import Repo

from branchsweep.git import BranchNotMergedError, GitError, GitRepo, NotARepositoryError, TrunkNotFoundError
from tests.conftest import OLD_TIMESTAMP, commit_file, configure_identity


def test_not_a_repository(tmp_path: Path) -> None:
    """Test that a plain directory is rejected."""
    with pytest.raises(NotARepositoryError, match="Not in a git repository"):
        GitRepo(tmp_path)


def test_bare_repository_rejected(test_env: tuple[Path, Path]) -> None:
    """Test that the bare remote cannot be inspected."""
    _, remote_path = test_env
    with pytest.raises(NotARepositoryError, match="bare"):
        GitRepo(remote_path)


def test_opens_from_subdirectory(test_repo: Path) -> None:
    """Test that a path inside the work tree finds the repository."""
    repo = GitRepo(test_repo / "feature")
    assert "main" in repo.list_local_branches()


def test_resolve_trunk_from_origin_head(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.resolve_trunk() == "main"


def test_resolve_trunk_explicit(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.resolve_trunk("feature/active") == "feature/active"


def test_resolve_trunk_explicit_missing(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    with pytest.raises(TrunkNotFoundError, match="does not exist"):
        repo.resolve_trunk("develop")


def test_resolve_trunk_falls_back_to_master(tmp_path: Path) -> None:
    """Test that master is used when there is no origin HEAD and no main."""
    local = Repo.init(tmp_path)
    configure_identity(local)
    commit_file(local, "README.md", "hello", "Initial commit")
    local.git.branch("-M", "master")

    assert GitRepo(tmp_path).resolve_trunk() == "master"


def test_resolve_trunk_fails_without_candidates(tmp_path: Path) -> None:
    local = Repo.init(tmp_path)
    configure_identity(local)
    commit_file(local, "README.md", "hello", "Initial commit")
    local.git.branch("-M", "develop")

    with pytest.raises(TrunkNotFoundError, match="Cannot determine main branch"):
        GitRepo(tmp_path).resolve_trunk()


def test_list_local_branches(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.list_local_branches() == [
        "feature/active",
        "feature/gone",
        "feature/merged",
        "feature/old",
        "feature/squashed",
        "main",
    ]


def test_list_merged_branches(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert set(repo.list_merged_branches("main")) == {"feature/merged", "main"}


def test_current_branch(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.get_current_branch_name() == "main"
    repo.checkout("feature/old")
    assert repo.get_current_branch_name() == "feature/old"


def test_detached_head_has_no_current_branch(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    repo.repo.git.checkout("--detach")
    assert repo.get_current_branch_name() == ""
    assert all(not branch.startswith("(") for branch in repo.list_local_branches())


def test_upstream_queries(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.get_upstream_remote("feature/active") == "origin"
    assert repo.get_upstream_branch("feature/active") == "feature/active"
    assert repo.get_upstream_remote("feature/old") is None
    assert repo.get_upstream_branch("feature/old") == "feature/old"


def test_remote_branch_exists(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.remote_branch_exists("origin", "feature/active")
    assert not repo.remote_branch_exists("origin", "feature/gone")


def test_remote_branch_exists_unknown_remote(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    with pytest.raises(GitError):
        repo.remote_branch_exists("nowhere", "feature/active")


def test_commit_timestamp_and_summary(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.get_last_commit_timestamp("feature/old") == OLD_TIMESTAMP
    summary = repo.get_last_commit_summary("feature/old")
    assert "Add old experiment" in summary
    assert "by Test User" in summary


def test_unreadable_branch_defaults(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.get_last_commit_timestamp("no/such/branch") == 0
    assert repo.get_last_commit_summary("no/such/branch") == "unknown"
    assert repo.count_commits("main..no/such/branch") == 0


def test_count_commits(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.count_commits("main..feature/old") == 1
    assert repo.count_commits("feature/old..main") == 1


def test_log_contains_subject_uses_fixed_strings(test_repo: Path) -> None:
    """Test that subjects with regex metacharacters are matched literally."""
    repo = GitRepo(test_repo)
    assert repo.log_contains_subject("main", "Add squash feature")
    assert not repo.log_contains_subject("main", "Fix [bug] (*")
    assert not repo.log_contains_subject("main", "Add .* feature")


def test_delete_merged_branch(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    repo.delete_branch("feature/merged")
    assert "feature/merged" not in repo.list_local_branches()


def test_delete_unmerged_branch_refused(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    with pytest.raises(BranchNotMergedError) as excinfo:
        repo.delete_branch("feature/old")
    assert excinfo.value.branch == "feature/old"
    assert "feature/old" in repo.list_local_branches()


def test_force_delete_unmerged_branch(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    repo.delete_branch("feature/old", force=True)
    assert "feature/old" not in repo.list_local_branches()


def test_delete_nonexistent_branch(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    with pytest.raises(GitError) as excinfo:
        repo.delete_branch("nonexistent")
    assert not isinstance(excinfo.value, BranchNotMergedError)


def test_remote_branch_exists_matches_exact_ref(test_repo: Path) -> None:
    """Test that a remote head merely ending in the branch name does not count."""
    Repo(test_repo).git.push("origin", "feature/active:refs/heads/team/feature/gone")
    repo = GitRepo(test_repo)

    assert repo.remote_branch_exists("origin", "team/feature/gone")
    assert not repo.remote_branch_exists("origin", "feature/gone")


def test_commit_queries_with_ambiguous_branch_name(test_repo: Path) -> None:
    """Test that a branch named like a tracked file is read as a revision."""
    repo = GitRepo(test_repo)
    repo.repo.create_head("README.md", "feature/old")

    assert repo.get_last_commit_timestamp("README.md") == OLD_TIMESTAMP
    assert "Add old experiment" in repo.get_last_commit_summary("README.md")
    assert repo.count_commits("main..README.md") == 1
    assert repo.get_subjects("main..README.md") == ["Add old experiment"]

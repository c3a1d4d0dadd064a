"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator, Optional

import pytest
from git import Actor, Repo
from typer.testing import CliRunner

# 2020-01-01 12:00:00 UTC, in git's internal date format
OLD_TIMESTAMP = 1577880000
OLD_DATE = f"{OLD_TIMESTAMP} +0000"

AUTHOR = Actor("Test User", "test@example.com")


def configure_identity(repo: Repo) -> None:
    repo.config_writer().set_value("user", "name", AUTHOR.name).release()
    repo.config_writer().set_value("user", "email", AUTHOR.email).release()


def commit_file(repo: Repo, name: str, content: str, message: str, date: Optional[str] = None) -> None:
    """Write a file and commit it, optionally backdated."""
    path = Path(repo.working_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message, author=AUTHOR, committer=AUTHOR, author_date=date, commit_date=date)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a local clone and its bare remote with one branch of every kind.

    Branches:
        feature/merged   merged into main with --no-ff, still on the remote
        feature/gone     pushed with tracking, then deleted on the remote
        feature/old      last commit in 2020, never pushed
        feature/squashed its change landed on main as a squash commit
        feature/active   recent, pushed, not merged

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)
    configure_identity(local_repo)

    commit_file(local_repo, "README.md", "# Test Repository", "Initial commit")
    local_repo.git.branch("-M", "main")
    main_branch = local_repo.heads.main

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)
    local_repo.git.remote("set-head", "origin", "main")

    def create_branch(name: str, message: str, push: bool = True, date: Optional[str] = None) -> None:
        """Create a branch off main with a single commit."""
        main_branch.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()
        commit_file(local_repo, f"{name}.txt", f"{name} content", message, date=date)
        if push:
            origin.push(name)
            branch.set_tracking_branch(origin.refs[name])

    create_branch("feature/merged", "Add merged feature")
    main_branch.checkout()
    local_repo.git.merge("feature/merged", "--no-ff", "-m", "Merge branch 'feature/merged'")

    create_branch("feature/gone", "Add gone feature")
    origin.push(":feature/gone")

    create_branch("feature/old", "Add old experiment", push=False, date=OLD_DATE)

    create_branch("feature/squashed", "Add squash feature", push=False)
    main_branch.checkout()
    commit_file(local_repo, "feature/squashed.txt", "feature/squashed content", "Add squash feature (#12)")

    create_branch("feature/active", "Add active work")

    main_branch.checkout()
    origin.push("main")

    yield local_path, remote_path


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    local_path, _ = test_env
    return local_path

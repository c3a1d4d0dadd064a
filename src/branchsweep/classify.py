"""Branch classification.

Each local branch (other than trunk and the checked-out branch) is judged
on four facts gathered from git: merged into trunk, upstream still present,
age of its last commit, and commits ahead/behind trunk.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from branchsweep.git import GitError, GitRepo
from branchsweep.logging_config import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


class BranchStatus(Enum):
    """Branch status."""

    ACTIVE = "active"
    STALE = "stale"
    DEPRECATED = "deprecated"


@dataclass
class BranchRecord:
    """Verdict for a single branch."""

    name: str
    status: BranchStatus = BranchStatus.ACTIVE
    reasons: list[str] = field(default_factory=list)
    last_commit: str = "unknown"
    age_days: int = 0
    ahead: int = 0
    behind: int = 0
    merged: bool = False
    remote_gone: bool = False

    @property
    def reason_text(self) -> str:
        return ", ".join(self.reasons)

    def add_reason(self, reason: str, status: BranchStatus) -> None:
        """Add a reason; deprecated always wins over stale."""
        self.reasons.append(reason)
        if self.status != BranchStatus.DEPRECATED:
            self.status = status


def is_likely_squash_merged(repo: GitRepo, branch_name: str, trunk: str) -> bool:
    """Guess whether a branch landed in trunk as a squash merge.

    Any subject of the branch's own commits showing up in trunk's log counts
    as a hit. Squash commits usually carry the original subjects, sometimes
    behind a PR prefix, so this is a best-effort guess only.
    """
    subjects = repo.get_subjects(f"{trunk}..{branch_name}")
    if not subjects:
        return True
    return any(repo.log_contains_subject(trunk, subject) for subject in subjects)


def _remote_gone(repo: GitRepo, branch_name: str) -> bool:
    """True if the branch tracks a remote branch that no longer exists."""
    remote = repo.get_upstream_remote(branch_name)
    if remote is None or remote == ".":
        return False
    try:
        return not repo.remote_branch_exists(remote, repo.get_upstream_branch(branch_name))
    except GitError as err:
        logger.warning("Could not check remote for %s: %s", branch_name, err)
        return False


def classify_branch(
    repo: GitRepo,
    branch_name: str,
    trunk: str,
    stale_days: int,
    behind_threshold: int,
    merged_branches: set[str],
    now: float,
) -> BranchRecord:
    """Build the record for one branch."""
    record = BranchRecord(name=branch_name)

    if branch_name in merged_branches:
        record.merged = True
        record.add_reason(f"merged into {trunk}", BranchStatus.DEPRECATED)

    if _remote_gone(repo, branch_name):
        record.remote_gone = True
        record.add_reason("remote branch deleted", BranchStatus.DEPRECATED)

    last_commit_ts = repo.get_last_commit_timestamp(branch_name)
    record.age_days = int((now - last_commit_ts) // SECONDS_PER_DAY) if last_commit_ts else 0
    if record.age_days > stale_days:
        record.add_reason(f"no activity for {record.age_days} days", BranchStatus.STALE)

    record.behind = repo.count_commits(f"{branch_name}..{trunk}")
    record.ahead = repo.count_commits(f"{trunk}..{branch_name}")
    if record.behind > behind_threshold and record.ahead == 0:
        record.add_reason(f"{record.behind} commits behind {trunk} with no new commits", BranchStatus.STALE)

    if record.status != BranchStatus.DEPRECATED and record.ahead > 0:
        if is_likely_squash_merged(repo, branch_name, trunk):
            record.add_reason("likely squash-merged", BranchStatus.DEPRECATED)

    if record.reasons:
        record.last_commit = repo.get_last_commit_summary(branch_name)
    return record


def classify_branches(
    repo: GitRepo,
    trunk: str,
    stale_days: int,
    behind_threshold: int,
    now: Optional[datetime] = None,
) -> list[BranchRecord]:
    """Classify every local branch except trunk and the current branch.

    Active branches are left out of the result.

    Args:
        repo: Repository to inspect (read-only queries only)
        trunk: Trunk branch name
        stale_days: Age in days above which a branch is stale
        behind_threshold: Commits behind trunk above which a branch with no
            commits of its own is stale
        now: Reference time for ages, defaults to the current time
    """
    now_ts = now.timestamp() if now is not None else time.time()
    current = repo.get_current_branch_name()
    merged = set(repo.list_merged_branches(trunk))

    records = []
    for branch_name in repo.list_local_branches():
        if branch_name in (trunk, current):
            continue
        record = classify_branch(repo, branch_name, trunk, stale_days, behind_threshold, merged, now_ts)
        logger.info("%s: %s (%s)", branch_name, record.status.value, record.reason_text or "no reasons")
        if record.status != BranchStatus.ACTIVE:
            records.append(record)
    return records


def split_by_status(records: list[BranchRecord]) -> tuple[list[BranchRecord], list[BranchRecord]]:
    """Split records into (deprecated, stale), keeping their order."""
    deprecated = [r for r in records if r.status == BranchStatus.DEPRECATED]
    stale = [r for r in records if r.status == BranchStatus.STALE]
    return deprecated, stale

"""Branch deletion."""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from branchsweep.git import BranchNotMergedError, GitError, GitRepo
from branchsweep.logging_config import get_logger

logger = get_logger(__name__)

# Called with a branch name when a soft delete was refused; True means force it
ForceConfirm = Callable[[str], bool]


@dataclass
class DeletionResult:
    """Outcome of deleting one branch."""

    branch: str
    deleted: bool
    forced: bool = False
    error: Optional[str] = None


def delete_branch(
    repo: GitRepo,
    branch_name: str,
    unsafe: bool = False,
    confirm_force: Optional[ForceConfirm] = None,
) -> DeletionResult:
    """Delete one branch, escalating to a forced delete only when allowed.

    Never raises for per-branch failures; they are reported on the result.
    """
    if unsafe:
        try:
            repo.delete_branch(branch_name, force=True)
        except GitError as err:
            logger.warning("%s", err)
            return DeletionResult(branch_name, deleted=False, forced=True, error=str(err))
        return DeletionResult(branch_name, deleted=True, forced=True)

    try:
        repo.delete_branch(branch_name)
        return DeletionResult(branch_name, deleted=True)
    except BranchNotMergedError as err:
        if confirm_force is None or not confirm_force(branch_name):
            logger.info("Skipped %s: %s", branch_name, err)
            return DeletionResult(branch_name, deleted=False, error=str(err))
    except GitError as err:
        logger.warning("%s", err)
        return DeletionResult(branch_name, deleted=False, error=str(err))

    try:
        repo.delete_branch(branch_name, force=True)
    except GitError as err:
        logger.warning("%s", err)
        return DeletionResult(branch_name, deleted=False, forced=True, error=str(err))
    return DeletionResult(branch_name, deleted=True, forced=True)


def delete_branches(
    repo: GitRepo,
    names: Iterable[str],
    unsafe: bool = False,
    confirm_force: Optional[ForceConfirm] = None,
    on_result: Optional[Callable[[DeletionResult], None]] = None,
) -> list[DeletionResult]:
    """Delete branches one by one; a failure never stops the batch.

    Args:
        repo: Repository to delete from
        names: Branch names, deleted in order
        unsafe: Force-delete every branch without asking
        confirm_force: Asked before forcing a branch git refused to soft-delete
        on_result: Called after each branch, for progress output
    """
    results = []
    for name in names:
        result = delete_branch(repo, name, unsafe=unsafe, confirm_force=confirm_force)
        results.append(result)
        if on_result is not None:
            on_result(result)
    return results


def count_deleted(results: Iterable[DeletionResult]) -> int:
    return sum(1 for result in results if result.deleted)

"""Per-repository dependency update pipeline.

One run walks a fixed sequence of git, package manager and gh commands:

    detect default branch -> checkout -> pull -> create working branch
    -> update -> install -> status
    -> (no changes: back to default branch, delete working branch)
    -> add -> commit -> push -> gh pr create
    -> back to default branch, delete local working branch

Any command failure after the working branch exists rolls the repository
back to its default branch and deletes the working branch (and its remote
copy when it was already pushed). The pipeline reports failures through the
returned outcome instead of raising.
"""

from __future__ import annotations

import logging
import re
import shlex
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from repo_updater.errors import CommandFailedError
from repo_updater.executor import Executor, execute
from repo_updater.package_manager import (
    PackageManager,
    detect_package_manager,
    install_command_for,
    update_command_for,
)

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_RE = re.compile(r"refs/remotes/origin/(.+)$")
FALLBACK_DEFAULT_BRANCH = "main"
BRANCH_PREFIX = "chore/dep-updates"
PLACEHOLDER_PR_URL = "https://github.com/example/repo/pull/0"


class OutcomeStatus(Enum):
    """How a pipeline run ended."""

    PR_CREATED = "pr-created"
    NO_CHANGES = "no-changes"
    FAILED = "failed"


@dataclass
class PipelineOutcome:
    """Result of running the pipeline against one repository."""

    repo: str
    status: OutcomeStatus
    pr_url: str | None = None
    error: CommandFailedError | None = None
    branch: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED


@dataclass
class BranchState:
    """What rollback has to undo for the working branch."""

    created: bool = False
    pushed: bool = False


def make_branch_name(date: str, timestamp: int | None = None) -> str:
    """Build the working branch name.

    The millisecond timestamp keeps same-day reruns from colliding with a
    branch left over from an earlier run.
    """
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return f"{BRANCH_PREFIX}-{date}-{timestamp}"


def commit_message(date: str) -> str:
    return f"dep updates {date}"


def pr_title(date: str) -> str:
    return f"Dep Updates {date}"


def checkout_command(branch: str) -> list[str]:
    return ["git", "checkout", branch]


def create_branch_command(branch: str) -> list[str]:
    return ["git", "checkout", "-b", branch]


def delete_branch_command(branch: str) -> list[str]:
    return ["git", "branch", "-D", branch]


def commit_command(date: str) -> list[str]:
    return ["git", "commit", "-m", commit_message(date)]


def push_command(branch: str) -> list[str]:
    return ["git", "push", "-u", "origin", branch]


def delete_remote_branch_command(branch: str) -> list[str]:
    return ["git", "push", "origin", "--delete", branch]


def pr_create_command(date: str) -> list[str]:
    title = pr_title(date)
    return ["gh", "pr", "create", "--title", title, "--body", title]


DEFAULT_BRANCH_QUERY = ["git", "symbolic-ref", "refs/remotes/origin/HEAD"]
PULL_COMMAND = ["git", "pull"]
STATUS_COMMAND = ["git", "status", "--porcelain"]
STAGE_COMMAND = ["git", "add", "-A"]


def parse_default_branch(output: str) -> str | None:
    """Extract the branch name from ``refs/remotes/origin/<name>``."""
    match = DEFAULT_BRANCH_RE.search(output.strip())
    if match:
        return match.group(1)
    return None


def detect_default_branch(repo: Path, executor: Executor = execute) -> str:
    """Ask git which branch origin/HEAD points to.

    Falls back to ``main`` only when git answers with something that is not a
    remote ref. A failing query raises CommandFailedError.
    """
    output = executor(DEFAULT_BRANCH_QUERY, repo)
    branch = parse_default_branch(output.stdout)
    if branch is None:
        logger.info(
            "Could not parse default branch from %r, using %s",
            output.stdout,
            FALLBACK_DEFAULT_BRANCH,
        )
        return FALLBACK_DEFAULT_BRANCH
    return branch


def describe_steps(
    default_branch: str, branch: str, date: str, manager: PackageManager
) -> list[str]:
    """Render the pipeline's commands, in order, as shell-style text."""
    commands = [
        checkout_command(default_branch),
        PULL_COMMAND,
        create_branch_command(branch),
        update_command_for(manager),
        install_command_for(manager),
        STATUS_COMMAND,
        STAGE_COMMAND,
        commit_command(date),
        push_command(branch),
        pr_create_command(date),
        checkout_command(default_branch),
        delete_branch_command(branch),
    ]
    return [shlex.join(cmd) for cmd in commands]


def _rollback(
    repo: Path,
    default_branch: str,
    branch: str,
    state: BranchState,
    executor: Executor,
) -> None:
    """Return to the default branch and remove the working branch.

    Each step is attempted even if an earlier one failed; failures are only
    logged so they never hide the error that triggered the rollback.
    """
    if not state.created:
        return

    try:
        executor(checkout_command(default_branch), repo)
    except CommandFailedError as e:
        logger.warning("Cleanup: failed to checkout %s: %s", default_branch, e.message)

    if state.pushed:
        try:
            executor(delete_remote_branch_command(branch), repo)
        except CommandFailedError as e:
            logger.warning("Cleanup: could not delete remote branch %s: %s", branch, e.message)

    try:
        executor(delete_branch_command(branch), repo)
    except CommandFailedError as e:
        logger.warning("Cleanup: failed to delete branch %s: %s", branch, e.message)


def update_repo(
    repo: Path | str,
    date: str,
    *,
    executor: Executor = execute,
    branch: str | None = None,
) -> PipelineOutcome:
    """Run the dependency update pipeline for one repository.

    Args:
        repo: Path to the git working tree.
        date: Date string used in the branch name, commit message and PR title.
        executor: Runs a single command; tests pass a scripted fake.
        branch: Working branch name. Generated from ``date`` when omitted.

    Returns:
        PipelineOutcome tagged pr-created, no-changes or failed.
    """
    repo_path = Path(repo)
    branch = branch or make_branch_name(date)

    manager = detect_package_manager(repo_path)
    logger.info("%s: detected package manager %s", repo_path.name, manager.value)

    try:
        default_branch = detect_default_branch(repo_path, executor)
        logger.info("%s: using default branch %s", repo_path.name, default_branch)
        executor(checkout_command(default_branch), repo_path)
        executor(PULL_COMMAND, repo_path)
    except CommandFailedError as e:
        return PipelineOutcome(repo=str(repo), status=OutcomeStatus.FAILED, error=e)

    state = BranchState()
    try:
        executor(create_branch_command(branch), repo_path)
        state.created = True

        executor(update_command_for(manager), repo_path)
        executor(install_command_for(manager), repo_path)

        status = executor(STATUS_COMMAND, repo_path)
        if status.stdout == "":
            executor(checkout_command(default_branch), repo_path)
            executor(delete_branch_command(branch), repo_path)
            return PipelineOutcome(
                repo=str(repo), status=OutcomeStatus.NO_CHANGES, branch=branch
            )

        executor(STAGE_COMMAND, repo_path)
        executor(commit_command(date), repo_path)
        executor(push_command(branch), repo_path)
        state.pushed = True

        pr = executor(pr_create_command(date), repo_path)
    except CommandFailedError as e:
        _rollback(repo_path, default_branch, branch, state, executor)
        return PipelineOutcome(
            repo=str(repo), status=OutcomeStatus.FAILED, error=e, branch=branch
        )

    # The open PR needs the remote branch; only the local copy is removed.
    _rollback(repo_path, default_branch, branch, BranchState(created=True), executor)

    return PipelineOutcome(
        repo=str(repo),
        status=OutcomeStatus.PR_CREATED,
        pr_url=pr.stdout.strip() or None,
        branch=branch,
    )


def dry_run_repo(
    repo: Path | str, date: str, *, branch: str | None = None
) -> tuple[PipelineOutcome, list[str]]:
    """Describe what :func:`update_repo` would run without running anything.

    The default branch cannot be known without asking git, so ``main`` is
    assumed. Returns a pr-created outcome with a placeholder URL so the
    caller's reporting path runs the same way as for a real update.
    """
    branch = branch or make_branch_name(date)
    manager = detect_package_manager(repo)
    steps = [
        f"assuming default branch: {FALLBACK_DEFAULT_BRANCH} "
        "(actual branch will be detected at runtime)",
        f"detected package manager: {manager.value}",
    ]
    steps.extend(describe_steps(FALLBACK_DEFAULT_BRANCH, branch, date, manager))
    outcome = PipelineOutcome(
        repo=str(repo),
        status=OutcomeStatus.PR_CREATED,
        pr_url=PLACEHOLDER_PR_URL,
        branch=branch,
    )
    return outcome, steps

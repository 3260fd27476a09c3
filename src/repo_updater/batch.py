"""Run the update pipeline over a list of repositories, one at a time."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from repo_updater.pipeline import (
    OutcomeStatus,
    PipelineOutcome,
    dry_run_repo,
    update_repo,
)

UpdateFn = Callable[[str, str], PipelineOutcome]
DryRunFn = Callable[[str, str], tuple[PipelineOutcome, list[str]]]


@dataclass
class BatchReport:
    """Outcomes of a batch run, in processing order."""

    outcomes: list[PipelineOutcome] = field(default_factory=list)
    pr_urls: list[str] = field(default_factory=list)

    def by_status(self, status: OutcomeStatus) -> list[PipelineOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def failed(self) -> list[PipelineOutcome]:
        return self.by_status(OutcomeStatus.FAILED)


def _report_outcome(console: Console, name: str, outcome: PipelineOutcome) -> None:
    """Print the result line(s) for one repository."""
    if outcome.status == OutcomeStatus.FAILED:
        console.print(f"  [red]✗ Failed:[/] {escape(name)}")
        if outcome.error is not None:
            console.print(f"    [red]{escape(outcome.error.message)}[/]")
            if outcome.error.stderr:
                console.print(f"    [dim]{escape(outcome.error.stderr)}[/]")
    elif outcome.status == OutcomeStatus.NO_CHANGES:
        console.print(f"  [cyan]•[/] {escape(name)}: No dependency changes")
    elif outcome.pr_url:
        console.print(f"  [green]✓[/] {escape(name)}: {escape(outcome.pr_url)}")
    else:
        console.print(f"  [green]✓[/] {escape(name)}")


def process_repo(
    repo: str,
    date: str,
    dry_run: bool,
    console: Console,
    update_fn: UpdateFn = update_repo,
    dry_run_fn: DryRunFn = dry_run_repo,
) -> PipelineOutcome:
    """Run (or describe) the pipeline for one repository and report it."""
    name = Path(repo).name or repo
    console.print(f"[bold]◆ {escape(name)}[/]")

    if dry_run:
        outcome, steps = dry_run_fn(repo, date)
        for step in steps:
            console.print(f"  [dim]\\[dry-run][/] {escape(step)}")
        console.print()
        return outcome

    with console.status("Updating dependencies..."):
        outcome = update_fn(repo, date)

    _report_outcome(console, name, outcome)
    return outcome


def run_batch(
    repos: Sequence[str],
    date: str,
    *,
    dry_run: bool = False,
    update_fn: UpdateFn = update_repo,
    dry_run_fn: DryRunFn = dry_run_repo,
    console: Console | None = None,
) -> BatchReport:
    """Process every repository sequentially and collect the PR URLs.

    A failed repository is recorded and the batch moves on to the next one.
    """
    console = console or Console()
    report = BatchReport()

    for repo in repos:
        outcome = process_repo(repo, date, dry_run, console, update_fn, dry_run_fn)
        report.outcomes.append(outcome)
        if outcome.pr_url:
            report.pr_urls.append(outcome.pr_url)

    return report


def format_batch_summary(report: BatchReport) -> str:
    """One-line tally of a batch run."""
    created = len(report.by_status(OutcomeStatus.PR_CREATED))
    unchanged = len(report.by_status(OutcomeStatus.NO_CHANGES))
    failed = len(report.failed)
    return f"{created} PRs created, {unchanged} no changes, {failed} failed"

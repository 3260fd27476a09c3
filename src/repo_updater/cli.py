"""CLI entry point.

Resolves the repository list (positional paths or the JSON config), runs
the update pipeline over every repository, then offers to open the
resulting pull requests in a browser.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from functools import partial

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm

from repo_updater import __version__
from repo_updater.batch import UpdateFn, format_batch_summary, run_batch
from repo_updater.browser import open_urls
from repo_updater.config import EXAMPLE_CONFIG, load_config, validate_repos
from repo_updater.errors import ConfigNotFoundError, ConfigParseError
from repo_updater.executor import make_executor
from repo_updater.pipeline import update_repo

EXAMPLES = """\
Examples:
  repo-updater                              # Update all repos from config
  repo-updater --dry-run                    # Preview without executing
  repo-updater -c ./my-config.json          # Use custom config
  repo-updater ~/code/org/repo1             # Update specific repos
"""


def get_date() -> str:
    """Today's date as YYYY-MM-DD, used for branch, commit and PR names."""
    return datetime.now().strftime("%Y-%m-%d")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-updater",
        description="Update dependencies across local repositories and open pull requests.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Print steps without executing"
    )
    parser.add_argument("-c", "--config", metavar="PATH", help="Path to config file")
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Kill any single command that runs longer than this",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging, including every command run")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "repos", nargs="*", metavar="REPO", help="Repository paths (override the config file)"
    )
    return parser


def configure_logging(console: Console, verbose: bool = False) -> None:
    """Route repo_updater log records through rich."""
    logger = logging.getLogger("repo_updater")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def resolve_repos(args: argparse.Namespace, console: Console) -> list[str] | None:
    """Positional paths win; otherwise load the config file.

    Returns None (after printing the problem) when the config is unusable.
    """
    if args.repos:
        return list(args.repos)

    try:
        config = load_config(args.config)
    except (ConfigNotFoundError, ConfigParseError) as e:
        console.print(f"[red]✗ {escape(e.message)}[/]")
        console.print(
            Panel(
                json.dumps(EXAMPLE_CONFIG, indent=2),
                title="Expected config format",
                box=box.ROUNDED,
                expand=False,
            )
        )
        return None

    return config.repos


def confirm_open(console: Console) -> bool | None:
    """Ask whether to open the PRs. None means the user cancelled."""
    try:
        return Confirm.ask("Open all PR URLs in browser?", console=console)
    except (KeyboardInterrupt, EOFError):
        return None


def main(
    argv: list[str] | None = None,
    update_fn: UpdateFn | None = None,
    console: Console | None = None,
) -> int:
    """Main entry point for the repo-updater CLI.

    Returns:
        Exit code: 1 when there is nothing to process, 0 otherwise (failed
        repositories are reported but do not change the exit code).
    """
    args = build_parser().parse_args(argv)
    console = console or Console()
    configure_logging(console, verbose=args.verbose)

    if update_fn is None:
        update_fn = partial(update_repo, executor=make_executor(args.timeout))

    console.rule("[bold]repo-updater[/]")

    repos = resolve_repos(args, console)
    if repos is None:
        console.print("Exiting.")
        return 1

    validation = validate_repos(repos)
    for error in validation.missing + validation.not_git:
        console.print(f"[yellow]⚠ {escape(error.message)}[/]")

    if not validation.valid:
        console.print("[red]✗ No valid repositories found.[/]")
        console.print("Exiting.")
        return 1

    date = get_date()
    if args.dry_run:
        console.print("[dim]\\[dry-run] No commands will be executed.[/]\n")

    try:
        report = run_batch(
            validation.valid, date, dry_run=args.dry_run, update_fn=update_fn, console=console
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/] Branches or PRs already created are left as-is.")
        return 130

    console.print(f"\n[bold]Summary:[/] {format_batch_summary(report)}")

    if report.pr_urls:
        console.print(
            Panel("\n".join(report.pr_urls), title="Pull Requests", box=box.ROUNDED, expand=False)
        )
        should_open = confirm_open(console)
        if should_open is None:
            console.print("Cancelled.")
            return 0
        if should_open and args.dry_run:
            console.print("[dim]\\[dry-run] Not opening placeholder URLs.[/]")
        elif should_open:
            open_urls(report.pr_urls)
    elif not args.dry_run:
        console.print("No pull requests were created.")

    console.print("[green]Done![/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())

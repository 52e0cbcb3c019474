"""
Command-line interface for the Trello to GitHub migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from . import github_target as ght
from .exceptions import InputFormatError, MigrationCancelledError, MigrationError
from .models import MissingLabel
from .orchestrator import plan_and_run
from .trello_source import load_board, load_mapping
from .utils import join_words, setup_logging

if TYPE_CHECKING:
    from .orchestrator import MigrationResult
    from .plan import ValidationReport
    from .schemas import Board, MappingConfig

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Import a Trello board into GitHub Issues and Projects")

    _ = parser.add_argument("--map", "-m", required=True, help="Path to the map.toml file mapping users, labels and lists")

    source = parser.add_mutually_exclusive_group(required=True)
    _ = source.add_argument("--trello-export", help="Path to a Trello export file (https://trello.com/b/<board-id>.json)")
    _ = source.add_argument("--trello-url", help="URL of the Trello board")

    _ = parser.add_argument("--github-token", help="GitHub token (default: $GITHUB_TOKEN, $PAT, or pass)")
    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: github/cli/token)"
    )

    _ = parser.add_argument("--keep-closed", action="store_true", help="Also transfer archived cards")
    _ = parser.add_argument(
        "--keep-closed-lists", action="store_true", help="Also transfer cards that are in an archived list"
    )
    _ = parser.add_argument(
        "--dry-run", action="store_true", help="Validate and preview the migration without changing GitHub"
    )
    _ = parser.add_argument("--yes", "-y", action="store_true", help="Continue past warnings without asking")
    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def _validation_errors(report: ValidationReport) -> list[str]:
    """One line per failure class, each naming every offending entry."""
    errors: list[str] = []
    if report.missing_labels:
        entries = [
            f"{label.source.name} ({label.reference})"
            if isinstance(label, MissingLabel)
            else f"(From list {label.source_list.name}) - {label.reference}"
            for label in report.missing_labels
        ]
        errors.append(f"Could not find labels in GitHub: {join_words(entries)}")
    if report.invalid_lists:
        errors.append(
            "These lists (see map.lists[].list or map.skip.lists[]) do not exist in Trello: "
            f"{join_words(report.invalid_lists)}"
        )
    if report.missing_milestones:
        entries = [str(reference) for reference in report.missing_milestones]
        errors.append(f"These milestones (see map.lists[].milestone) do not exist in GitHub: {join_words(entries)}")
    if report.missing_statuses:
        entries = [str(reference) for reference in report.missing_statuses]
        errors.append(
            f"These status fields (see map.lists[].status) do not exist in the project "
            f"({report.project_title}): {join_words(entries)}"
        )
    if report.statuses_to_create:
        names = join_words([status.name for status in report.statuses_to_create])
        errors.append(
            f"These status fields need to be created manually (create = true): {names}\n"
            f"  -> Please create them in your GitHub Project settings at: {report.project_settings_url}\n"
            "  -> After creating them, re-run this tool."
        )
    if report.status_without_project:
        errors.append("The map.lists[].status option can only be used if map.project is set.")
    if report.unverified_members:
        entries = [f"@{member.trello_name} (@{member.github_name})" for member in report.unverified_members]
        errors.append(f"The following Trello users are not GitHub users: {join_words(entries)}")
    return errors


def _print_validation_report(report: ValidationReport) -> None:
    """Print every problem found while validating the map file."""
    print(f"\nMigration plan: {'PASSED' if report.is_valid else 'FAILED'}")
    for error in _validation_errors(report):
        print(f"  - {error}")


def _print_summary(result: MigrationResult) -> None:
    stats = result.stats
    if result.dry_run:
        print(f"\nDry run: {stats.issues_planned} issues would be created")
        return
    print("\nMigration summary:")
    print(f"  Labels: Created={stats.labels_created}, Already existing={stats.labels_existing}")
    print(f"  Issues: Created={stats.issues_created}, Comments={stats.comments_created}")
    print(f"  Statuses: Set={stats.statuses_set}, Existing items updated={stats.existing_items_updated}")


def _confirm(message: str) -> bool:
    try:
        answer = input(f"{message}\nWould you like to continue? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _load_inputs(args: argparse.Namespace) -> tuple[Board, MappingConfig]:
    """Load both inputs, reporting every parse failure before giving up."""
    board: Board | None = None
    mapping: MappingConfig | None = None
    failures: list[InputFormatError] = []
    try:
        board = load_board(args.trello_export or args.trello_url)
    except InputFormatError as e:
        failures.append(e)
    try:
        mapping = load_mapping(args.map)
    except InputFormatError as e:
        failures.append(e)

    if failures or board is None or mapping is None:
        for failure in failures:
            logger.error(str(failure))
        msg = "Invalid input files"
        raise MigrationError(msg)
    return board, mapping


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose)

    try:
        board, mapping = _load_inputs(args)

        token = ght.get_token(args.github_token, args.github_pass_token)
        target = ght.GitHubTarget(ght.get_client(token), mapping.repo)

        result = plan_and_run(
            board,
            mapping,
            target,
            keep_closed=args.keep_closed,
            keep_closed_lists=args.keep_closed_lists,
            dry_run=args.dry_run,
            confirm=None if args.yes else _confirm,
        )

        _print_validation_report(result.report)
        if not result.success:
            sys.exit(1)
        _print_summary(result)
        sys.exit(0)

    except MigrationCancelledError:
        print("Operation cancelled.")
        sys.exit(0)
    except Exception:
        logger.exception("Migration failed")
        sys.exit(1)

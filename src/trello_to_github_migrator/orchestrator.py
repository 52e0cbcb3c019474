"""Migration orchestrator that drives a Trello board into GitHub.

Migration Flow
--------------
The run is strictly sequential: one GitHub request at a time, in a fixed
order, with no retries.

Phase 1: Snapshot
    - Fetch repository labels and open milestones
    - Fetch the project (node ID, Status field and its options) if the map
      names one
    - Look up every mapped GitHub user (404 is recorded, not raised)
    The snapshot is never refreshed during the run.

Phase 2: Plan
    - Resolve labels, lists, milestones and statuses against the snapshot
    - Aggregate every problem into a single ValidationReport
    - Stop here, with nothing written to GitHub, if the report has errors

Phase 3: Confirmation
    - Skipped Trello labels and `create = true` labels that GitHub already
      has are warnings; the caller's confirm callback may cancel the run

Phase 4: Labels
    - Create `create = true` labels; "already exists" is tolerated

Phase 5: Status sync
    - For issues already on the project, set Status to match the Trello
      list of the card with the same title, only where it differs

Phase 6: Issues
    For each card, in board order:
        a. Create the issue (body, labels, assignees, milestone)
        b. Post its comments, oldest first
        c. Add it to the project and set its Status, if mapped

Error Handling
--------------
Validation problems are data and are reported together. Anything that goes
wrong after Phase 2 is fatal: the exception propagates and whatever was
already created on GitHub stays there.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import MigrationCancelledError, MigrationError
from .issue_builder import build_issue_draft
from .labels import create_missing_labels
from .members import resolve_members
from .models import TargetSnapshot
from .plan import build_plan, filter_board
from .status_sync import fetch_existing_items, sync_existing_statuses
from .utils import join_words

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import IssueDraft
    from .plan import MigrationPlan, ValidationReport
    from .protocols import TargetClient
    from .schemas import Board, MappingConfig

    ConfirmCallback = Callable[[str], bool]

logger = logging.getLogger(__name__)


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    labels_created: int = 0
    labels_existing: int = 0
    issues_created: int = 0
    comments_created: int = 0
    statuses_set: int = 0
    """Statuses set on newly created issues."""
    existing_items_updated: int = 0
    existing_items_skipped: int = 0
    issues_planned: int = 0


@dataclass
class MigrationResult:
    """Result of a migration run.

    When the report is invalid nothing was written and the stats are zero.
    """

    report: ValidationReport
    stats: MigrationStats
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return self.report.is_valid


def fetch_snapshot(target: TargetClient, mapping: MappingConfig) -> TargetSnapshot:
    """Read the GitHub state every resolution decision is made against."""
    labels = target.list_labels()
    milestones = target.list_milestones()
    project = None
    if mapping.project is not None:
        project = target.get_project(mapping.repo.owner_type, mapping.repo.owner_login, mapping.project)
        logger.info(f"Using project {project.title} (#{project.number})")
    logger.debug(f"Found {len(labels)} labels and {len(milestones)} milestones in {mapping.repo.full_name}")
    return TargetSnapshot(labels=labels, milestones=milestones, project=project)


class Migrator:
    """Plans and runs a Trello to GitHub migration.

    Usage:
        target = GitHubTarget(client, mapping.repo)
        migrator = Migrator(target, confirm=ask_user)
        plan = migrator.plan(board, mapping)
        if plan.is_valid:
            stats = migrator.run(plan)
    """

    _target: TargetClient
    _confirm: ConfirmCallback | None

    def __init__(self, target: TargetClient, *, confirm: ConfirmCallback | None = None) -> None:
        """Initialize the migrator.

        Args:
            target: GitHub client used for every read and write
            confirm: Called with a warning message; returning False cancels
                the run. Without a callback, warnings are only logged.
        """
        self._target = target
        self._confirm = confirm

    def plan(self, board: Board, mapping: MappingConfig) -> MigrationPlan:
        """Fetch the GitHub snapshot and resolve the map against it."""
        snapshot = fetch_snapshot(self._target, mapping)
        members = resolve_members(self._target, mapping.users)
        return build_plan(board, mapping, snapshot, members)

    def run(self, plan: MigrationPlan, *, dry_run: bool = False) -> MigrationStats:
        """Execute a valid plan.

        Raises:
            MigrationError: If the plan is invalid
            MigrationCancelledError: If a warning was not confirmed
        """
        if not plan.is_valid:
            msg = "Refusing to run an invalid migration plan"
            raise MigrationError(msg)

        self._confirm_warnings(plan.report)
        stats = MigrationStats(issues_planned=len(plan.board.cards))

        if dry_run:
            logger.info(
                f"Dry run: would create {len(plan.labels_to_create)} labels "
                f"and {stats.issues_planned} issues in {plan.mapping.repo.full_name}"
            )
            return stats

        created = create_missing_labels(self._target, plan.labels)
        stats.labels_created = len(created.created)
        stats.labels_existing = len(created.already_existing)

        self._sync_existing(plan, stats)
        self._create_issues(plan, stats)
        return stats

    def _confirm_warnings(self, report: ValidationReport) -> None:
        messages: list[str] = []
        if report.skipped_labels:
            names = join_words([label.source.name or label.source.id for label in report.skipped_labels])
            messages.append(f"These labels will not be transferred: {names}")
        if report.labels_already_present:
            names = join_words([label.name for label in report.labels_already_present])
            messages.append(f"These labels already exist in GitHub and will be created anyway: {names}")

        for message in messages:
            logger.warning(message)
            if self._confirm is not None and not self._confirm(message):
                msg = "Migration cancelled by user"
                raise MigrationCancelledError(msg)

    def _sync_existing(self, plan: MigrationPlan, stats: MigrationStats) -> None:
        project = plan.snapshot.project
        if project is None or not plan.statuses.by_list:
            return

        logger.info("Checking existing project items...")
        repo = plan.mapping.repo
        items = fetch_existing_items(self._target, repo.owner_type, repo.owner_login, project.number)
        if not items:
            return
        result = sync_existing_statuses(self._target, project, items, plan.board.cards, plan.statuses.by_list)
        stats.existing_items_updated = result.updated
        stats.existing_items_skipped = result.skipped

    def _create_issues(self, plan: MigrationPlan, stats: MigrationStats) -> None:
        cards = plan.board.cards
        logger.info(f"Creating {len(cards)} issues")
        for index, card in enumerate(cards, start=1):
            draft = build_issue_draft(card, plan.board, plan)
            self._migrate_card(draft, plan, stats)
            logger.debug(f"Created issue {index}/{len(cards)}: {card.name}")
        logger.info(f"Created {stats.issues_created} issues")

    def _migrate_card(self, draft: IssueDraft, plan: MigrationPlan, stats: MigrationStats) -> None:
        issue = self._target.create_issue(
            draft.title,
            draft.body,
            draft.labels,
            draft.assignees,
            draft.milestone_number,
        )
        stats.issues_created += 1

        for comment in draft.comments:
            self._target.create_comment(issue.number, comment)
            stats.comments_created += 1

        project = plan.snapshot.project
        if project is None:
            return

        item_id = self._target.add_to_project(project.id, issue.node_id)
        status = plan.statuses.by_list.get(draft.list_id)
        if status is None:
            logger.debug(f'No status mapping for "{draft.title}" (list {draft.list_id})')
            return
        logger.info(f'Setting "{draft.title}" to status {status.name}')
        self._target.set_item_status(project.id, item_id, project.status_field_id, status.id)
        stats.statuses_set += 1


def plan_and_run(
    board: Board,
    mapping: MappingConfig,
    target: TargetClient,
    *,
    keep_closed: bool = False,
    keep_closed_lists: bool = False,
    dry_run: bool = False,
    confirm: ConfirmCallback | None = None,
) -> MigrationResult:
    """Migrate a Trello board into GitHub according to a map file.

    Returns the validation report without touching GitHub when the plan is
    invalid; otherwise runs the migration and returns its statistics.

    Raises:
        MigrationCancelledError: If a warning was not confirmed
        TransportError: If any GitHub request fails during the run
    """
    board = filter_board(board, keep_closed=keep_closed, keep_closed_lists=keep_closed_lists)
    migrator = Migrator(target, confirm=confirm)
    plan = migrator.plan(board, mapping)
    if not plan.is_valid:
        logger.error(f"Migration plan has {plan.report.problem_count} problems, nothing was changed")
        return MigrationResult(report=plan.report, stats=MigrationStats(), dry_run=dry_run)

    stats = migrator.run(plan, dry_run=dry_run)
    return MigrationResult(report=plan.report, stats=stats, dry_run=dry_run)

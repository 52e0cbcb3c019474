"""Build and validate the migration plan.

All resolvers run to completion before anything is judged, so a broken map
file produces one report listing every problem rather than one problem per
run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .labels import labels_already_present, resolve_labels
from .lists import ListResolution, resolve_lists
from .milestones import MilestoneResolution, resolve_milestones
from .models import (
    LabelToCreate,
    MissingLabel,
    MissingListLabel,
    PendingStatus,
    SkippedLabel,
    UnverifiedMember,
)
from .statuses import StatusResolution, resolve_statuses

if TYPE_CHECKING:
    from .models import ResolvedLabel, ResolvedMember, TargetSnapshot
    from .schemas import Board, MappingConfig, Reference

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Every reason the plan cannot run, plus non-fatal warnings."""

    missing_labels: list[MissingLabel | MissingListLabel] = field(default_factory=list)
    invalid_lists: list[str] = field(default_factory=list)
    missing_milestones: list[Reference] = field(default_factory=list)
    missing_statuses: list[Reference] = field(default_factory=list)
    statuses_to_create: list[PendingStatus] = field(default_factory=list)
    unverified_members: list[UnverifiedMember] = field(default_factory=list)
    status_without_project: bool = False

    # Warnings
    skipped_labels: list[SkippedLabel] = field(default_factory=list)
    labels_already_present: list[LabelToCreate] = field(default_factory=list)

    project_title: str | None = None
    project_settings_url: str | None = None

    @property
    def is_valid(self) -> bool:
        return not (
            self.missing_labels
            or self.invalid_lists
            or self.missing_milestones
            or self.missing_statuses
            or self.statuses_to_create
            or self.unverified_members
            or self.status_without_project
        )

    @property
    def problem_count(self) -> int:
        return (
            len(self.missing_labels)
            + len(self.invalid_lists)
            + len(self.missing_milestones)
            + len(self.missing_statuses)
            + len(self.statuses_to_create)
            + len(self.unverified_members)
            + int(self.status_without_project)
        )


@dataclass
class MigrationPlan:
    """Resolved mappings for one run, read by the card builder and status sync."""

    board: Board
    """The board with skipped lists' cards removed."""
    mapping: MappingConfig
    snapshot: TargetSnapshot
    labels: list[ResolvedLabel]
    lists: ListResolution
    milestones: MilestoneResolution
    statuses: StatusResolution
    members: list[ResolvedMember]
    report: ValidationReport

    @property
    def is_valid(self) -> bool:
        return self.report.is_valid

    @property
    def labels_to_create(self) -> list[LabelToCreate]:
        return [label for label in self.labels if isinstance(label, LabelToCreate)]


def filter_board(board: Board, *, keep_closed: bool = False, keep_closed_lists: bool = False) -> Board:
    """Drop archived cards and cards in archived lists unless asked to keep them."""
    cards = board.cards
    if not keep_closed:
        cards = [card for card in cards if not card.closed]
    if not keep_closed_lists:
        closed_lists = {trello_list.id for trello_list in board.lists if trello_list.closed}
        cards = [card for card in cards if card.list_id not in closed_lists]
    return board.model_copy(update={"cards": cards})


def project_settings_url(mapping: MappingConfig) -> str | None:
    if mapping.project is None:
        return None
    scope = "orgs" if mapping.repo.owner_type == "organization" else "users"
    return f"https://github.com/{scope}/{mapping.repo.owner_login}/projects/{mapping.project}/settings"


def build_plan(
    board: Board,
    mapping: MappingConfig,
    snapshot: TargetSnapshot,
    members: list[ResolvedMember],
) -> MigrationPlan:
    """Resolve every map rule against the board and the GitHub snapshot."""
    lists = resolve_lists(board, mapping)
    labels = resolve_labels(board.labels, mapping.labels, lists.rules, snapshot.labels)
    milestones = resolve_milestones(lists.rules, snapshot.milestones)
    statuses = resolve_statuses(lists.rules, snapshot.project)

    skipped_list_ids = {trello_list.id for trello_list in lists.skipped_lists}
    remaining = [card for card in board.cards if card.list_id not in skipped_list_ids]
    if len(remaining) != len(board.cards):
        logger.info(f"Skipping {len(board.cards) - len(remaining)} cards in skipped lists")
    board = board.model_copy(update={"cards": remaining})

    report = ValidationReport(
        missing_labels=[label for label in labels if isinstance(label, MissingLabel | MissingListLabel)],
        invalid_lists=list(lists.invalid_lists),
        missing_milestones=list(milestones.missing),
        missing_statuses=list(statuses.missing),
        statuses_to_create=list(statuses.to_create),
        unverified_members=[member for member in members if isinstance(member, UnverifiedMember)],
        status_without_project=statuses.used_without_project,
        skipped_labels=[label for label in labels if isinstance(label, SkippedLabel)],
        labels_already_present=labels_already_present(labels, snapshot.labels),
        project_title=snapshot.project.title if snapshot.project else None,
        project_settings_url=project_settings_url(mapping),
    )

    if report.is_valid:
        logger.info("Migration plan is valid")
    else:
        logger.debug(f"Migration plan has {report.problem_count} problems")

    return MigrationPlan(
        board=board,
        mapping=mapping,
        snapshot=snapshot,
        labels=labels,
        lists=lists,
        milestones=milestones,
        statuses=statuses,
        members=members,
        report=report,
    )

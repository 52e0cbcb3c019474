"""
Label resolution and creation for Trello to GitHub.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple, assert_never

from .exceptions import LabelAlreadyExistsError
from .matching import find_match
from .models import (
    LabelToCreate,
    ListMappedLabel,
    MappedLabel,
    MissingLabel,
    MissingListLabel,
    SkippedLabel,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .lists import ResolvedListRule
    from .models import ResolvedLabel, TargetLabel
    from .protocols import TargetClient
    from .schemas import LabelRule, TrelloLabel

logger: logging.Logger = logging.getLogger(__name__)


def normalize_color(color: str | None) -> str | None:
    """Return a color in the form GitHub expects (no '#', lowercase)."""
    if color is None:
        return None
    return color.strip().removeprefix("#").lower()


def resolve_labels(
    trello_labels: Sequence[TrelloLabel],
    label_rules: Sequence[LabelRule],
    list_rules: Sequence[ResolvedListRule],
    github_labels: Sequence[TargetLabel],
) -> list[ResolvedLabel]:
    """Classify every Trello label and every list-level label rule.

    A Trello label without a rule is skipped. `create = true` rules are
    never looked up; lookup rules resolve by name or ID against the labels
    GitHub already has.
    """
    resolved: list[ResolvedLabel] = []

    for trello_label in trello_labels:
        rule = next((r for r in label_rules if r.trello == trello_label.name), None)
        if rule is None:
            resolved.append(SkippedLabel(trello_label))
            continue
        if rule.create:
            resolved.append(LabelToCreate(trello_label, rule.github, rule.color))
            continue
        github_label = find_match(rule.github, github_labels)
        if github_label is None:
            resolved.append(MissingLabel(trello_label, rule.github))
        else:
            resolved.append(MappedLabel(trello_label, github_label))

    for list_rule in list_rules:
        reference = list_rule.rule.label
        if reference is None:
            continue
        github_label = find_match(reference, github_labels)
        if github_label is None:
            resolved.append(MissingListLabel(list_rule.trello_list, reference))
        else:
            resolved.append(ListMappedLabel(list_rule.trello_list, github_label))

    return resolved


def target_label_name(label: ResolvedLabel) -> str | None:
    """Name the label will carry on GitHub, or None if it will not be applied."""
    match label:
        case LabelToCreate():
            return label.name
        case MappedLabel() | ListMappedLabel():
            return label.target.name
        case SkippedLabel() | MissingLabel() | MissingListLabel():
            return None
        case _:
            assert_never(label)


def labels_already_present(
    resolved: Sequence[ResolvedLabel], github_labels: Sequence[TargetLabel]
) -> list[LabelToCreate]:
    """Labels marked `create = true` whose name GitHub already has."""
    existing = {label.name for label in github_labels}
    return [label for label in resolved if isinstance(label, LabelToCreate) and label.name in existing]


class LabelCreationResult(NamedTuple):
    """Result of creating the `create = true` labels."""

    created: list[str]
    already_existing: list[str]


def create_missing_labels(target: TargetClient, resolved: Sequence[ResolvedLabel]) -> LabelCreationResult:
    """Create every `create = true` label on GitHub.

    A label that already exists (created by a previous partial run or by
    someone else in the meantime) is logged and skipped. Any other failure
    propagates.
    """
    to_create: dict[str, LabelToCreate] = {}
    for label in resolved:
        if isinstance(label, LabelToCreate):
            to_create.setdefault(label.name, label)

    created: list[str] = []
    already_existing: list[str] = []
    for index, label in enumerate(to_create.values(), start=1):
        try:
            target.create_label(label.name, normalize_color(label.color))
        except LabelAlreadyExistsError:
            logger.warning(f"Label {label.name} already exists, skipping...")
            already_existing.append(label.name)
        else:
            created.append(label.name)
            logger.debug(f"Created label {label.name} [{index}/{len(to_create)}]")

    if to_create:
        suffix = f", skipped {len(already_existing)} existing labels" if already_existing else ""
        logger.info(f"Created {len(created)} labels{suffix}")

    return LabelCreationResult(created=created, already_existing=already_existing)

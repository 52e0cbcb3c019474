"""Resolve `lists[].milestone` rules against the repository's milestones."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .matching import find_match

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .lists import ResolvedListRule
    from .models import TargetMilestone
    from .schemas import Reference


@dataclass
class MilestoneResolution:
    by_list: dict[str, TargetMilestone] = field(default_factory=dict)
    """Trello list ID -> GitHub milestone."""
    missing: list[Reference] = field(default_factory=list)


def resolve_milestones(
    list_rules: Sequence[ResolvedListRule], github_milestones: Sequence[TargetMilestone]
) -> MilestoneResolution:
    """Resolve milestone references by ID, number or title.

    GitHub milestones are never created, so every miss is an error.
    """
    result = MilestoneResolution()
    for list_rule in list_rules:
        reference = list_rule.rule.milestone
        if reference is None:
            continue
        milestone = find_match(reference, github_milestones)
        if milestone is None:
            result.missing.append(reference)
            continue
        result.by_list[list_rule.trello_list.id] = milestone
    return result

"""Resolve `lists[].status` rules against a project's Status field.

GitHub's API cannot add options to an existing single-select field, so a
status the operator asked to create (`create = true`) is reported as a
manual step instead of being created here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .matching import find_match
from .models import PendingStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .lists import ResolvedListRule
    from .models import ProjectInfo, StatusOption
    from .schemas import Reference


@dataclass
class StatusResolution:
    by_list: dict[str, StatusOption] = field(default_factory=dict)
    """Trello list ID -> Status option, only for rules that resolved."""
    to_create: list[PendingStatus] = field(default_factory=list)
    missing: list[Reference] = field(default_factory=list)
    used_without_project: bool = False


def resolve_statuses(list_rules: Sequence[ResolvedListRule], project: ProjectInfo | None) -> StatusResolution:
    """Resolve status references by option ID or name.

    An existing option always wins over `create = true`. A missing option
    is pending manual creation only when it was referenced by name; option
    IDs are assigned by GitHub and cannot be declared up front.
    """
    result = StatusResolution()
    for list_rule in list_rules:
        reference = list_rule.rule.status
        if reference is None:
            continue
        if project is None:
            result.used_without_project = True
            continue

        option = find_match(reference, project.status_options)
        if option is not None:
            result.by_list[list_rule.trello_list.id] = option
        elif list_rule.rule.create and isinstance(reference, str):
            result.to_create.append(PendingStatus(list_rule.trello_list.id, reference))
        else:
            result.missing.append(reference)
    return result

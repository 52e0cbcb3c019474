"""Resolve `lists[].list` and `skip.lists[]` entries against the Trello board."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .matching import find_match

if TYPE_CHECKING:
    from .schemas import Board, ListRule, MappingConfig, TrelloList

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedListRule:
    trello_list: TrelloList
    rule: ListRule


@dataclass
class ListResolution:
    rules: list[ResolvedListRule] = field(default_factory=list)
    skipped_lists: list[TrelloList] = field(default_factory=list)
    invalid_lists: list[str] = field(default_factory=list)
    """References from `lists[].list` or `skip.lists[]` that match no Trello list."""


def resolve_lists(board: Board, mapping: MappingConfig) -> ListResolution:
    """Pair each list rule with its Trello list and resolve the skip list."""
    result = ListResolution()

    for rule in mapping.lists:
        trello_list = find_match(rule.list, board.lists)
        if trello_list is None:
            result.invalid_lists.append(rule.list)
            continue
        result.rules.append(ResolvedListRule(trello_list, rule))

    for reference in mapping.skip.lists:
        trello_list = find_match(reference, board.lists)
        if trello_list is None:
            result.invalid_lists.append(reference)
            continue
        result.skipped_lists.append(trello_list)
        logger.debug(f"Skipping cards in list {trello_list.name}")

    return result

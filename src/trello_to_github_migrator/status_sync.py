"""Bring the Status of issues already on the project in line with their Trello lists.

Existing project items are matched to Trello cards by exact title. This is
best-effort: renamed issues and duplicate titles are simply not matched, and
unmatched items are counted as skipped rather than reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .models import ExistingProjectItem, ProjectInfo, StatusOption
    from .protocols import OwnerType, TargetClient
    from .schemas import TrelloCard

logger: logging.Logger = logging.getLogger(__name__)

PAGE_SIZE = 100
TITLE_PREVIEW_LENGTH = 50


@dataclass
class StatusSyncResult:
    updated: int = 0
    skipped: int = 0


def fetch_existing_items(
    target: TargetClient, owner_type: OwnerType, owner: str, project_number: int
) -> list[ExistingProjectItem]:
    """Read every issue-backed item of the project, following the page cursor."""
    items: list[ExistingProjectItem] = []
    cursor: str | None = None
    while True:
        page = target.get_project_items_page(owner_type, owner, project_number, first=PAGE_SIZE, after=cursor)
        items.extend(page.items)
        if not page.has_next_page or page.end_cursor is None:
            break
        cursor = page.end_cursor
    logger.info(f"Found {len(items)} existing items in project")
    return items


def sync_existing_statuses(
    target: TargetClient,
    project: ProjectInfo,
    items: Sequence[ExistingProjectItem],
    cards: Sequence[TrelloCard],
    statuses: Mapping[str, StatusOption],
) -> StatusSyncResult:
    """Update items whose Status differs from their card's list mapping.

    Items that already carry the expected Status cost no request, so a
    second run against unchanged data makes no updates.
    """
    result = StatusSyncResult()
    for item in items:
        card = next((c for c in cards if c.name == item.issue_title), None)
        if card is None:
            result.skipped += 1
            continue

        expected = statuses.get(card.list_id)
        if expected is None or item.current_status == expected.name:
            result.skipped += 1
            continue

        logger.info(
            f'Updating issue #{item.issue_number} "{item.issue_title[:TITLE_PREVIEW_LENGTH]}" '
            f"from {item.current_status or 'no status'} to {expected.name}"
        )
        target.set_item_status(project.id, item.id, project.status_field_id, expected.id)
        result.updated += 1

    logger.info(f"Updated {result.updated} existing items, skipped {result.skipped} items")
    return result
